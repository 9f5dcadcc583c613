"""FastAPI route definitions for the DriveMatch API."""

import re
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Query, Request

from drivematch.api.deps import (
    get_jitter_source,
    get_llm_advisor,
    get_repository,
    limiter,
)
from drivematch.config import Settings, get_settings
from drivematch.core.enums import TRENDING_DEFAULT_LIMIT, TRENDING_MAX_LIMIT, VehicleType
from drivematch.core.exceptions import QueryValidationError, VehicleNotFoundError
from drivematch.models.advisor import (
    AdvisorRequest,
    AdvisorResponse,
    CompareRequest,
    CompareResponse,
    LLMAdvisorResponse,
    SimilarResponse,
)
from drivematch.models.criteria import Condition, Exact, Pattern, Range, freeze
from drivematch.services.advisor import JitterSource, advise
from drivematch.services.filter_compiler import compile_query
from drivematch.services.llm_advisor import LLMAdvisor
from drivematch.services.repository import VehicleRepository
from drivematch.services.similarity import rank_similar

router = APIRouter()

Repository = Annotated[VehicleRepository, Depends(get_repository)]


def _advisor_rate_limit() -> str:
    return get_settings().advisor_rate_limit


# ---------------------------------------------------------------------------
# Advisor
# ---------------------------------------------------------------------------


@router.post(
    "/advisor",
    response_model=AdvisorResponse,
    response_model_exclude_none=True,
)
@limiter.limit(_advisor_rate_limit)
async def advisor(
    request: Request,
    body: AdvisorRequest,
    repository: Repository,
    jitter_source: Annotated[JitterSource, Depends(get_jitter_source)],
):
    """Interpret a freeform query and return matching vehicles.

    Falls back to trending vehicles (``fallback: true``) when nothing matches.
    """
    return await advise(repository, body.query, jitter_source)


@router.post("/advisor/ai", response_model=LLMAdvisorResponse)
@limiter.limit(_advisor_rate_limit)
async def advisor_ai(
    request: Request,
    body: AdvisorRequest,
    repository: Repository,
    llm_advisor: Annotated[LLMAdvisor, Depends(get_llm_advisor)],
):
    """LLM-interpreted variant of the advisor."""
    return await llm_advisor.advise(repository, body.query)


# ---------------------------------------------------------------------------
# Vehicles (read-only)
# ---------------------------------------------------------------------------


@router.get("/vehicles")
async def list_vehicles(
    repository: Repository,
    name: Optional[str] = None,
    brand: Optional[str] = None,
    type: Optional[str] = None,
    min_price: Annotated[Optional[float], Query(alias="minPrice")] = None,
    max_price: Annotated[Optional[float], Query(alias="maxPrice")] = None,
):
    """All vehicles with optional name/brand (substring), type and price filters."""
    criteria: dict[str, Condition] = {}
    if name:
        criteria["name"] = Pattern(re.escape(name))
    if brand:
        criteria["brand"] = Pattern(re.escape(brand))
    if type:
        category = VehicleType.from_string(type)
        criteria["type"] = Exact(category.value if category else type)
    if min_price is not None or max_price is not None:
        criteria["price"] = Range(gte=min_price, lte=max_price)

    vehicles = await repository.find_by_filter(compile_query(freeze(criteria)))
    return [v.to_public() for v in vehicles]


@router.get("/vehicles/trending")
async def trending_vehicles(
    repository: Repository,
    limit: Annotated[int, Query(ge=1)] = TRENDING_DEFAULT_LIMIT,
):
    vehicles = await repository.find_trending(min(limit, TRENDING_MAX_LIMIT))
    return [v.to_public() for v in vehicles]


@router.get("/vehicles/similar/{vehicle_id}", response_model=SimilarResponse)
async def similar_vehicles(
    vehicle_id: str,
    repository: Repository,
    settings: Annotated[Settings, Depends(get_settings)],
):
    """Up to four vehicles most similar to ``vehicle_id``, with full attributes."""
    base, similar = await rank_similar(
        repository, vehicle_id, candidate_cap=settings.similar_candidate_cap
    )
    return SimilarResponse(
        base=base.to_public(),
        similar=[v.to_public() for v in similar],
    )


@router.post("/vehicles/compare", response_model=CompareResponse)
async def compare_vehicles(body: CompareRequest, repository: Repository):
    if len(body.ids) < 2:
        raise QueryValidationError("Need at least 2 vehicle IDs.")
    vehicles = await repository.find_by_ids(body.ids)
    return CompareResponse(count=len(vehicles), vehicles=[v.to_public() for v in vehicles])


@router.get("/vehicles/{vehicle_id}")
async def get_vehicle(vehicle_id: str, repository: Repository):
    vehicle = await repository.find_by_id(vehicle_id)
    if vehicle is None:
        raise VehicleNotFoundError(vehicle_id)
    return vehicle.to_public()
