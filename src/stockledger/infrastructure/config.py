"""Runtime settings, read from the environment or a ``.env`` file."""

from __future__ import annotations

from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from .env"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # === Database ===
    DATABASE_URL: str = "sqlite:///stockledger.db"
    DATABASE_ECHO: bool = False

    # === Warehouses ===
    DEFAULT_WAREHOUSE_ID: int | None = None
    CHANNEL_WAREHOUSES: dict[str, int] = {}  # JSON, e.g. {"shopee": 2, "pos": 1}

    # === Deduction ===
    DEDUCTION_STATUSES: list[str] = ["shipped", "delivered", "completed"]

    # === System ===
    LOG_LEVEL: str = "INFO"

    @field_validator("DEDUCTION_STATUSES")
    @classmethod
    def validate_deduction_statuses(cls, v: list[str]) -> list[str]:
        statuses = [s.strip().lower() for s in v if s and s.strip()]
        if not statuses:
            raise ValueError("DEDUCTION_STATUSES must name at least one status")
        return statuses

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown LOG_LEVEL {v!r}")
        return level


@lru_cache
def get_settings() -> Settings:
    return Settings()
