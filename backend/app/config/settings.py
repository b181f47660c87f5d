"""Application configuration and environment helpers."""

from __future__ import annotations

from functools import lru_cache
from typing import Any

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_TIMEZONE = "UTC"
DEFAULT_DATABASE_URL = "sqlite+aiosqlite:///./invest_ledger.db"


class AppSettings(BaseSettings):
    """Configuration options for the Invest Ledger service."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    app_name: str = Field(default="Invest Ledger")
    timezone: str = Field(default=DEFAULT_TIMEZONE, description="Timezone used to resolve 'today'.")

    database_url: str = Field(
        default=DEFAULT_DATABASE_URL,
        description="SQLAlchemy async database URL holding the portfolio snapshot.",
    )

    equity_series_days: int = Field(default=120, gt=0)
    equity_series_max_days: int = Field(default=3650, gt=0)

    cors_origins: list[str] = Field(default_factory=lambda: ["http://localhost:4200"])

    telemetry_enabled: bool = Field(default=False)
    telemetry_service_name: str = Field(default="invest-ledger")
    telemetry_otlp_endpoint: str | None = Field(default=None)
    telemetry_otlp_insecure: bool = Field(default=True)
    telemetry_sample_ratio: float = Field(default=1.0, ge=0.0, le=1.0)

    def dict_for_logging(self) -> dict[str, Any]:
        """Return a sanitized dict for logging purposes."""

        hidden = {"database_url"}
        return {k: ("***" if k in hidden and "@" in str(v) else v) for k, v in self.model_dump().items()}


@lru_cache(maxsize=1)
def get_settings(**overrides: Any) -> AppSettings:
    """Return cached application settings with optional overrides."""

    if overrides:
        return AppSettings(**overrides)
    return AppSettings()


__all__ = [
    "AppSettings",
    "DEFAULT_DATABASE_URL",
    "DEFAULT_TIMEZONE",
    "get_settings",
]
