from datetime import datetime
from typing import Any, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class Vehicle(BaseModel):
    """A catalog vehicle.

    Rows arrive either snake_case (Supabase columns) or camelCase (the
    legacy Mongo catalog export); both populate the same fields. Responses are
    serialized camelCase so the comparison table gets the full attribute set
    under its familiar names.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )

    id: str = Field(validation_alias=AliasChoices("id", "_id"))
    name: str = ""
    brand: str = ""
    type: Optional[str] = None
    variant: Optional[str] = None
    model_year: Optional[int] = None
    price: float = 0.0
    on_road_price: Optional[float] = None

    # Technical specs, unit-tagged strings ("1497cc", "18 km/l")
    engine: Optional[str] = None
    engine_power: Optional[str] = None
    torque: Optional[str] = None
    fuel_type: Optional[str] = None
    mileage: Optional[str] = None
    transmission: Optional[str] = None
    drive_type: Optional[str] = None
    top_speed: Optional[str] = None
    acceleration: Optional[str] = None

    seating_capacity: Optional[int] = None
    body_type: Optional[str] = None
    image: Optional[str] = None

    performance_score: float = 0.0
    eco_score: float = 0.0
    is_trending: bool = False
    avg_rating: float = 0.0
    review_count: int = 0

    created_at: Optional[datetime] = None

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, value: Any) -> str:
        return str(value)

    @field_validator("price", "performance_score", "eco_score", mode="before")
    @classmethod
    def none_to_zero(cls, value: Any) -> Any:
        return 0.0 if value is None else value

    @field_validator(
        "engine_power", "torque", "mileage", "top_speed", "acceleration", mode="before"
    )
    @classmethod
    def unit_string(cls, value: Any) -> Any:
        """Unit fields are sometimes stored as bare numbers."""
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value

    def to_public(self, fields: tuple[str, ...] | None = None) -> dict[str, Any]:
        """Serialize camelCase, optionally projected to ``fields`` (snake_case names)."""
        data = self.model_dump(
            by_alias=True,
            exclude_none=True,
            include=set(fields) if fields else None,
            mode="json",
        )
        return data


# Fixed attribute subset returned by the advisor
ADVISOR_FIELDS: tuple[str, ...] = (
    "id",
    "name",
    "brand",
    "price",
    "fuel_type",
    "mileage",
    "transmission",
    "engine_power",
    "body_type",
    "performance_score",
    "image",
)
