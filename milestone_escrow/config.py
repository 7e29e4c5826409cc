"""Application configuration settings."""
from __future__ import annotations

import os
from functools import lru_cache

from pydantic import BaseModel, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# --- Runtime toggles -----------------------------------------------------
# Environnement d'exécution: "dev" | "test" | "staging" | "prod"
ENV = os.getenv("ESCROW_ENV", "dev").lower()

# Header carrying the address of the account invoking an operation
CALLER_HEADER = "X-Caller-Address"


class Settings(BaseSettings):
    """Environment configuration for the milestone escrow backend."""

    app_env: str = ENV
    database_url: str = "sqlite:///milestone_escrow.db"
    LOG_LEVEL: str = "INFO"
    CORS_ALLOW_ORIGINS: list[str] = [
        "http://localhost:3000",
    ]
    SENTRY_DSN: str | None = None
    PROMETHEUS_ENABLED: bool = True
    ALLOW_DB_CREATE_ALL: bool = False

    # --- Milestones --------------------------------------------------------
    # A milestone committed with amount == 0 is accepted unless disabled here.
    ALLOW_ZERO_AMOUNT_MILESTONES: bool = True

    model_config = SettingsConfigDict(
        env_file=".env", env_prefix="", env_file_encoding="utf-8"
    )

    @field_validator("SENTRY_DSN")
    @classmethod
    def _strip_empty_dsn(cls, value: str | None) -> str | None:
        """Normalise empty DSNs to ``None`` so Sentry stays disabled."""

        if value is None:
            return None
        cleaned = value.strip()
        return cleaned or None


class AppInfo(BaseModel):
    name: str = "milestone-escrow"
    version: str = "0.1.0"


settings = Settings()


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings."""

    return settings


__all__ = [
    "ENV",
    "CALLER_HEADER",
    "Settings",
    "AppInfo",
    "settings",
    "get_settings",
]
