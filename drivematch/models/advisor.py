from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------


class AdvisorRequest(BaseModel):
    # Empty text is rejected by the interpreter with a 400, not by schema
    # validation, so a missing or null field behaves like an empty query.
    query: Optional[str] = Field(default="", max_length=1000)


class CompareRequest(BaseModel):
    ids: list[str] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------


class AdvisorResponse(_CamelModel):
    query: str
    message: str
    intent: str
    confidence: int
    context_tags: list[str]
    applied_filters: dict[str, Any]
    reasoning: list[str]
    fallback: Optional[bool] = None
    total_results: int
    results: list[dict[str, Any]]


class SimilarResponse(_CamelModel):
    base: dict[str, Any]
    similar: list[dict[str, Any]]


class LLMAdvisorResponse(_CamelModel):
    message: str
    filters: dict[str, Any]
    reasoning: list[str]
    results: list[dict[str, Any]]


class CompareResponse(_CamelModel):
    count: int
    vehicles: list[dict[str, Any]]
