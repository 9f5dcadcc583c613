"""Application configuration with environment variable validation."""

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from drivematch.core.enums import SIMILAR_CANDIDATE_CAP

_PROJECT_ROOT = Path(__file__).resolve().parent.parent
_ENV_FILE = _PROJECT_ROOT / ".env"
_DEFAULT_SEED_FILE = _PROJECT_ROOT / "data" / "sample_vehicles.json"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=str(_ENV_FILE),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Catalog database. When unset the in-memory catalog is used.
    supabase_url: str = Field(default="", validation_alias="SUPABASE_URL")
    supabase_key: str = Field(default="", validation_alias="SUPABASE_KEY")
    vehicles_table: str = Field(default="vehicles", validation_alias="VEHICLES_TABLE")
    seed_file: str = Field(
        default=str(_DEFAULT_SEED_FILE),
        validation_alias="DRIVEMATCH_SEED_FILE",
    )

    # OpenAI (LLM advisor only)
    openai_api_key: str = Field(default="", validation_alias="OPENAI_API_KEY")
    openai_model: str = Field(default="gpt-4o-mini", validation_alias="OPENAI_MODEL")

    # Matching
    similar_candidate_cap: int = Field(
        default=SIMILAR_CANDIDATE_CAP,
        validation_alias="SIMILAR_CANDIDATE_CAP",
    )

    # API settings
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")
    advisor_rate_limit: str = Field(
        default="30/minute", validation_alias="ADVISOR_RATE_LIMIT"
    )
    allowed_origins: list[str] | str = Field(
        default=["*"],
        validation_alias="ALLOWED_ORIGINS",
    )

    @property
    def cors_origins(self) -> list[str]:
        """Parse ALLOWED_ORIGINS from comma-separated string or return list."""
        if isinstance(self.allowed_origins, str):
            return [o.strip() for o in self.allowed_origins.split(",") if o.strip()]
        return self.allowed_origins

    @property
    def use_supabase(self) -> bool:
        return bool(self.supabase_url and self.supabase_key)


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings."""
    return Settings()
