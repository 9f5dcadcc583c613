"""Similar-vehicle engine: candidate prefilter, weighted scorer and ranker.

Pipeline for one reference vehicle:

    find_by_id -> prefilter criteria -> find_by_filter (capped) ->
    normalize -> score -> stable sort -> top 4

The score is a fixed-weight sum whose maximum attainable value is 100:

    price       (1 - priceDiff)   * 25
    power       (1 - powerDiff)   * 20
    mileage     (1 - mileageDiff) * 15
    torque      (1 - torqueDiff)  * 10
    fuel/transmission/body exact match   +5 each
    performance (1 - |dPerf|/100) * 10
    eco         (1 - |dEco|/100)  * 5

Relative diffs use ``max(base, 1)`` as denominator and nothing is clamped:
a candidate far from a small reference value gets a negative sub-score and
the total can drop below zero. Callers and tests rely on the raw sum.
"""

import logging
from dataclasses import dataclass

from drivematch.core.enums import PRICE_BAND_TOLERANCE, SIMILAR_CANDIDATE_CAP, SIMILAR_TOP_K
from drivematch.core.exceptions import VehicleNotFoundError
from drivematch.models.criteria import Exact, FilterCriteria, NotEqual, Range, freeze
from drivematch.models.vehicle import Vehicle
from drivematch.services.filter_compiler import compile_query
from drivematch.services.normalizer import parse_number, relative_diff
from drivematch.services.repository import VehicleRepository

logger = logging.getLogger(__name__)

# =============================================================================
# Weights
# =============================================================================

PRICE_WEIGHT = 25.0
POWER_WEIGHT = 20.0
MILEAGE_WEIGHT = 15.0
TORQUE_WEIGHT = 10.0
FUEL_MATCH_BONUS = 5.0
TRANSMISSION_MATCH_BONUS = 5.0
BODY_MATCH_BONUS = 5.0
PERFORMANCE_WEIGHT = 10.0
ECO_WEIGHT = 5.0

SCORE_RANGE = 100.0  # performance/eco scores are on a 0-100 scale


@dataclass
class ScoredCandidate:
    vehicle: Vehicle
    score: float


# =============================================================================
# Candidate Prefilter
# =============================================================================


def price_band(price: float) -> Range:
    """``[price * 0.85, price * 1.15]``; degenerate ``[0, 0]`` for price <= 0."""
    if price <= 0:
        return Range(gte=0, lte=0)
    return Range(
        gte=price * (1 - PRICE_BAND_TOLERANCE),
        lte=price * (1 + PRICE_BAND_TOLERANCE),
    )


def build_prefilter(reference: Vehicle) -> FilterCriteria:
    """Hard constraints every candidate must meet before scoring."""
    return freeze(
        {
            "id": NotEqual(reference.id),
            "type": Exact(reference.type),
            "price": price_band(reference.price),
            "fuel_type": Exact(reference.fuel_type),
            "transmission": Exact(reference.transmission),
        }
    )


# =============================================================================
# Weighted Similarity Scorer
# =============================================================================


def score_breakdown(base: Vehicle, candidate: Vehicle) -> dict[str, float]:
    """Per-component similarity contributions (unclamped)."""
    price_diff = relative_diff(parse_number(base.price), parse_number(candidate.price))
    power_diff = relative_diff(
        parse_number(base.engine_power), parse_number(candidate.engine_power)
    )
    torque_diff = relative_diff(parse_number(base.torque), parse_number(candidate.torque))
    mileage_diff = relative_diff(
        parse_number(base.mileage), parse_number(candidate.mileage)
    )

    perf_diff = abs(base.performance_score - candidate.performance_score) / SCORE_RANGE
    eco_diff = abs(base.eco_score - candidate.eco_score) / SCORE_RANGE

    return {
        "price": (1 - price_diff) * PRICE_WEIGHT,
        "engine_power": (1 - power_diff) * POWER_WEIGHT,
        "mileage": (1 - mileage_diff) * MILEAGE_WEIGHT,
        "torque": (1 - torque_diff) * TORQUE_WEIGHT,
        "fuel_type": FUEL_MATCH_BONUS if base.fuel_type == candidate.fuel_type else 0.0,
        "transmission": TRANSMISSION_MATCH_BONUS
        if base.transmission == candidate.transmission
        else 0.0,
        "body_type": BODY_MATCH_BONUS if base.body_type == candidate.body_type else 0.0,
        "performance_score": (1 - perf_diff) * PERFORMANCE_WEIGHT,
        "eco_score": (1 - eco_diff) * ECO_WEIGHT,
    }


def similarity_score(base: Vehicle, candidate: Vehicle) -> float:
    return sum(score_breakdown(base, candidate).values())


# =============================================================================
# Ranker
# =============================================================================


def rank(scored: list[ScoredCandidate], k: int = SIMILAR_TOP_K) -> list[ScoredCandidate]:
    """Descending by score, stable on ties, truncated to ``k``."""
    return sorted(scored, key=lambda s: s.score, reverse=True)[:k]


async def rank_similar(
    repository: VehicleRepository,
    reference_id: str,
    candidate_cap: int = SIMILAR_CANDIDATE_CAP,
    top_k: int = SIMILAR_TOP_K,
) -> tuple[Vehicle, list[Vehicle]]:
    """Find the vehicles most similar to ``reference_id``.

    Exactly two repository round-trips. An empty candidate set is a normal
    outcome and returns ``(base, [])``.

    Raises:
        VehicleNotFoundError: the reference id does not resolve.
    """
    base = await repository.find_by_id(reference_id)
    if base is None:
        raise VehicleNotFoundError(reference_id)

    query = compile_query(build_prefilter(base), limit=candidate_cap)
    candidates = await repository.find_by_filter(query)

    scored = [ScoredCandidate(c, similarity_score(base, c)) for c in candidates]
    top = rank(scored, top_k)
    logger.debug(
        "Similar to %s: %d candidates, top scores %s",
        reference_id,
        len(candidates),
        [round(s.score, 2) for s in top],
    )
    return base, [s.vehicle for s in top]
