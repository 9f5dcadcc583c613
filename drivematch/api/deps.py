"""FastAPI dependency injection."""

import logging
from functools import lru_cache
from typing import Annotated

from fastapi import Depends
from openai import OpenAI
from slowapi import Limiter
from slowapi.util import get_remote_address

from drivematch.config import Settings, get_settings
from drivematch.core.exceptions import AdvisorNotConfiguredError
from drivematch.services.advisor import JitterSource, RandomJitter
from drivematch.services.db import get_supabase_client
from drivematch.services.llm_advisor import LLMAdvisor
from drivematch.services.memory_repository import InMemoryVehicleRepository
from drivematch.services.repository import SupabaseVehicleRepository, VehicleRepository

logger = logging.getLogger(__name__)

# Rate limiter (advisor endpoints)
limiter = Limiter(key_func=get_remote_address)

_repository: VehicleRepository | None = None


def get_repository(
    settings: Annotated[Settings, Depends(get_settings)],
) -> VehicleRepository:
    """Dependency for the catalog repository (created once per process)."""
    global _repository
    if _repository is None:
        if settings.use_supabase:
            _repository = SupabaseVehicleRepository(
                get_supabase_client(), settings.vehicles_table
            )
            logger.info("Using Supabase catalog table=%s", settings.vehicles_table)
        else:
            _repository = InMemoryVehicleRepository.from_json_file(settings.seed_file)
            logger.info("Using in-memory catalog from %s", settings.seed_file)
    return _repository


def get_jitter_source() -> JitterSource:
    return RandomJitter()


@lru_cache
def get_openai_client(api_key: str) -> OpenAI:
    """Get cached OpenAI client."""
    return OpenAI(api_key=api_key)


def get_llm_advisor(
    settings: Annotated[Settings, Depends(get_settings)],
) -> LLMAdvisor:
    """Dependency for the LLM advisor; 503 when no API key is configured."""
    if not settings.openai_api_key:
        raise AdvisorNotConfiguredError(
            "AI advisor not configured. Set OPENAI_API_KEY environment variable."
        )
    return LLMAdvisor(get_openai_client(settings.openai_api_key), settings.openai_model)
