from functools import lru_cache
from typing import Literal

from pydantic import computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict

from shopfloor.domain.scheduling.value_objects.enums import OverlapPolicy


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_ignore_empty=True,
        extra="ignore",
    )
    PROJECT_NAME: str = "shopfloor"
    ENVIRONMENT: Literal["local", "staging", "production"] = "local"

    # Direct connection string for the relational store; in-memory SQLite by default
    DATABASE_URL: str = "sqlite://"

    # Supabase Configuration (prefer new naming; keep legacy for compatibility)
    SUPABASE_URL: str | None = None
    SUPABASE_SECRET: str | None = None
    # Legacy envs (optional)
    SUPABASE_SERVICE_KEY: str | None = None

    @computed_field  # type: ignore[prop-decorator]
    @property
    def supabase_enabled(self) -> bool:
        return bool(self.SUPABASE_URL and self.supabase_service_key)

    @property
    def supabase_service_key(self) -> str | None:
        return self.SUPABASE_SECRET or self.SUPABASE_SERVICE_KEY

    # Scheduling behaviour
    REASSIGN_OVERLAP_POLICY: OverlapPolicy = OverlapPolicy.WARN
    EXPORT_ROWS_PER_PAGE: int = 30
    PRODUCTION_DEPARTMENT: str = "Production"

    # Logging Configuration
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "json"  # "json" or "console"
    LOG_SQL: bool = False

    # Metrics
    ENABLE_METRICS: bool = False
    METRICS_PORT: int = 9090


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
