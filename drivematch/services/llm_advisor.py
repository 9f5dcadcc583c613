"""LLM-assisted advisor: OpenAI turns the query into structured filters.

Alternate path to the rule cascade in ``intent.py``. The model is asked for
a small JSON object; anything that doesn't parse becomes an empty filter and
the query then returns the cheapest vehicles in the catalog.
"""

import asyncio
import json
import re
import time
from typing import Any

from openai import OpenAI

from drivematch.core.exceptions import QueryValidationError
from drivematch.core.logging import log_external_call
from drivematch.models.advisor import LLMAdvisorResponse
from drivematch.models.criteria import Condition, Exact, Pattern, Range, SortDirective, freeze
from drivematch.services.filter_compiler import compile_query
from drivematch.services.repository import VehicleRepository
from drivematch.utils.converters import safe_float, safe_str

LLM_RESULT_LIMIT = 20

FILTER_KEYS = (
    "type",
    "maxPrice",
    "minPrice",
    "brand",
    "fuelType",
    "transmission",
    "bodyType",
)

PROMPT_TEMPLATE = """
You are a vehicle query interpreter for an app named DriveMatch.

User query: "{query}"

Extract meaning and return ONLY valid JSON with these keys:
{{
  "type": "car/bike/null",
  "maxPrice": number or null,
  "minPrice": number or null,
  "brand": string or null,
  "fuelType": string or null,
  "transmission": string or null,
  "bodyType": string or null
}}

Rules:
- Detect prices written as "30 lakh", "3 million", "under 5 lakh", etc.
- Detect brands like BMW, Audi, Tata, Hyundai, etc.
- If not mentioned, return null for the field.
- Output ONLY JSON. No extra text.
"""

_FENCE_RE = re.compile(r"^```(?:json)?\s*|\s*```$")

# JSON key -> Vehicle field, for the pattern-matched text filters
_TEXT_FIELDS = {
    "brand": "brand",
    "fuelType": "fuel_type",
    "transmission": "transmission",
    "bodyType": "body_type",
}


def parse_llm_filters(content: str | None) -> dict[str, Any]:
    """Parse the model reply; unparsable or non-object replies give ``{}``."""
    if not content:
        return {}
    try:
        data = json.loads(_FENCE_RE.sub("", content.strip()))
    except json.JSONDecodeError:
        return {}
    if not isinstance(data, dict):
        return {}
    return {k: data.get(k) for k in FILTER_KEYS}


def criteria_from_llm(filters: dict[str, Any]) -> dict[str, Condition]:
    """Model JSON -> criteria. Prices may come back as numbers or numeric strings."""
    criteria: dict[str, Condition] = {}
    vehicle_type = safe_str(filters.get("type"))
    if vehicle_type and vehicle_type.lower() != "null":
        criteria["type"] = Exact(vehicle_type.lower())
    for key, field_name in _TEXT_FIELDS.items():
        text = safe_str(filters.get(key))
        if text:
            criteria[field_name] = Pattern(re.escape(text))

    min_price = safe_float(filters.get("minPrice"), default=None)
    max_price = safe_float(filters.get("maxPrice"), default=None)
    if min_price is not None or max_price is not None:
        criteria["price"] = Range(gte=min_price, lte=max_price)
    return criteria


class LLMAdvisor:
    def __init__(self, client: OpenAI, model: str = "gpt-4o-mini") -> None:
        self.client = client
        self.model = model

    def extract_filters(self, query: str) -> dict[str, Any]:
        start = time.time()
        try:
            completion = self.client.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": PROMPT_TEMPLATE.format(query=query)}],
            )
        except Exception:
            log_external_call("openai", "extract_filters", False, (time.time() - start) * 1000)
            raise
        log_external_call("openai", "extract_filters", True, (time.time() - start) * 1000)
        return parse_llm_filters(completion.choices[0].message.content)

    async def advise(
        self, repository: VehicleRepository, text: str | None
    ) -> LLMAdvisorResponse:
        if not text or not text.strip():
            raise QueryValidationError("Please provide a query text.")

        filters = await asyncio.to_thread(self.extract_filters, text)
        query = compile_query(
            freeze(criteria_from_llm(filters)),
            sort=SortDirective("price"),
            limit=LLM_RESULT_LIMIT,
        )
        vehicles = await repository.find_by_filter(query)

        return LLMAdvisorResponse(
            message=f"Found {len(vehicles)} matching vehicles."
            if vehicles
            else "No vehicles match your filters.",
            filters=filters,
            reasoning=[f"{k}: {v}" for k, v in filters.items() if v],
            results=[v.to_public() for v in vehicles],
        )
