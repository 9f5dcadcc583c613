"""Enums for vehicle catalog and advisor constants."""

from enum import Enum


class VehicleType(str, Enum):
    """Top-level vehicle category."""

    CAR = "car"
    BIKE = "bike"

    @classmethod
    def from_string(cls, value: str | None) -> "VehicleType | None":
        """Convert string to enum, returning None if invalid."""
        if not value:
            return None
        try:
            return cls(value.lower())
        except ValueError:
            return None


class FuelType(str, Enum):
    """Fuel types as stored in the catalog."""

    PETROL = "Petrol"
    DIESEL = "Diesel"
    ELECTRIC = "Electric"
    HYBRID = "Hybrid"
    CNG = "CNG"


class Transmission(str, Enum):
    """Gearbox types as stored in the catalog."""

    MANUAL = "Manual"
    AUTOMATIC = "Automatic"


class Intent(str, Enum):
    """What the user is trying to do with an advisor query."""

    FILTER = "filter"
    RECOMMEND = "recommend"
    COMPARE = "compare"


class SortField(str, Enum):
    """Catalog fields the advisor can sort on."""

    PERFORMANCE_SCORE = "performance_score"
    CREATED_AT = "created_at"
    PRICE = "price"


# Similar-vehicle prefilter
PRICE_BAND_TOLERANCE = 0.15
SIMILAR_CANDIDATE_CAP = 300
SIMILAR_TOP_K = 4

# Advisor
ADVISOR_FETCH_LIMIT = 15
ADVISOR_RESULT_LIMIT = 10
TRENDING_FALLBACK_LIMIT = 8
BASE_CONFIDENCE = 100
FALLBACK_CONFIDENCE_PENALTY = 30
MAX_CONFIDENCE_JITTER = 5

# Catalog endpoints
TRENDING_DEFAULT_LIMIT = 100
TRENDING_MAX_LIMIT = 300
