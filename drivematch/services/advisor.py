"""Query advisor: interpret -> compile -> fetch -> fallback -> response.

One or two repository round-trips per request: the primary filtered fetch,
plus a trending fetch only when the primary fetch comes back empty. An empty
result is not an error; it produces a full response flagged
``fallback=True`` with a lowered confidence.

Confidence is cosmetic. It starts at 100, drops by a fixed penalty on
fallback, and otherwise loses a small random jitter drawn from a pluggable
``JitterSource``. The jitter never feeds into filtering or ranking.
"""

import logging
import random
from typing import Optional, Protocol

from drivematch.core.enums import (
    ADVISOR_FETCH_LIMIT,
    ADVISOR_RESULT_LIMIT,
    FALLBACK_CONFIDENCE_PENALTY,
    MAX_CONFIDENCE_JITTER,
    TRENDING_FALLBACK_LIMIT,
)
from drivematch.models.advisor import AdvisorResponse
from drivematch.models.vehicle import ADVISOR_FIELDS
from drivematch.services.filter_compiler import applied_filters, compile_query
from drivematch.services.intent import Interpretation, interpret
from drivematch.services.repository import VehicleRepository

logger = logging.getLogger(__name__)

FALLBACK_REASON = "No direct match found. Showing trending vehicles instead."
FALLBACK_MESSAGE = "No exact matches found — showing trending suggestions."


class JitterSource(Protocol):
    def jitter(self) -> int: ...


class RandomJitter:
    """Integer jitter in ``[0, MAX_CONFIDENCE_JITTER)``; seedable for tests."""

    def __init__(self, seed: Optional[int] = None) -> None:
        self._rng = random.Random(seed)

    def jitter(self) -> int:
        return self._rng.randrange(MAX_CONFIDENCE_JITTER)


class FixedJitter:
    def __init__(self, value: int = 0) -> None:
        self.value = value

    def jitter(self) -> int:
        return self.value


def summary_message(count: int, interpretation: Interpretation) -> str:
    """'I found 7 matching cars from tata that suit your preferences.'"""
    noun = f"{interpretation.category}s" if interpretation.category else "vehicles"
    brand = f"from {interpretation.brand} " if interpretation.brand else ""
    return f"I found {count} matching {noun} {brand}that suit your preferences."


async def advise(
    repository: VehicleRepository,
    text: str | None,
    jitter_source: JitterSource | None = None,
) -> AdvisorResponse:
    """Answer a freeform vehicle query.

    Raises:
        QueryValidationError: empty or whitespace-only query, before any
            repository call.
    """
    interpretation = interpret(text)
    filters = applied_filters(interpretation.criteria)

    query = compile_query(
        interpretation.criteria,
        sort=interpretation.sort,
        limit=ADVISOR_FETCH_LIMIT,
        columns=ADVISOR_FIELDS,
    )
    vehicles = await repository.find_by_filter(query)

    if not vehicles:
        trending = await repository.find_trending(TRENDING_FALLBACK_LIMIT)
        logger.info(
            "Advisor fallback: no match for %r, returning %d trending", text, len(trending)
        )
        return AdvisorResponse(
            query=text,
            message=FALLBACK_MESSAGE,
            intent=interpretation.intent.value,
            confidence=interpretation.confidence_seed - FALLBACK_CONFIDENCE_PENALTY,
            context_tags=interpretation.context_tags,
            applied_filters=filters,
            reasoning=[*interpretation.reasoning, FALLBACK_REASON],
            fallback=True,
            total_results=len(trending),
            results=[v.to_public(ADVISOR_FIELDS) for v in trending],
        )

    jitter_source = jitter_source or RandomJitter()
    return AdvisorResponse(
        query=text,
        message=summary_message(len(vehicles), interpretation),
        intent=interpretation.intent.value,
        confidence=interpretation.confidence_seed - jitter_source.jitter(),
        context_tags=interpretation.context_tags,
        applied_filters=filters,
        reasoning=interpretation.reasoning,
        total_results=len(vehicles),
        results=[v.to_public(ADVISOR_FIELDS) for v in vehicles[:ADVISOR_RESULT_LIMIT]],
    )
