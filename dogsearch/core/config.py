# dogsearch/core/config.py
import logging
import os
from pathlib import Path
from typing import Literal

from dotenv import load_dotenv
from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

_PROJECT_ROOT = Path(__file__).resolve().parents[2]

# Load .env file only if not in CI
if not os.getenv("CI"):
    env_path = _PROJECT_ROOT / ".env"
    logger.debug(f"[CONFIG] Looking for .env at: {env_path} (exists={env_path.exists()})")
    load_dotenv(env_path)


class Settings(BaseSettings):
    """Runtime configuration for the search API."""

    environment: Literal["development", "staging", "production", "test"] = Field(
        default="development",
        description="Deployment environment name",
    )
    log_level: str = Field(default="INFO", description="Root logging level")

    database_url: str = Field(
        default="sqlite:///./dogsearch.db",
        description="SQLAlchemy URL of the listings database",
    )
    database_echo: bool = Field(default=False, description="Echo SQL statements to the log")

    # Result cache
    search_cache_ttl_seconds: float = Field(
        default=300.0,
        description="Lifetime of a cached search result, measured from creation",
        gt=0,
    )
    search_cache_max_entries: int = Field(
        default=1000,
        description="Maximum number of cached search results before LRU eviction",
        ge=1,
    )
    search_coordinate_precision: int = Field(
        default=2,
        description="Decimal places kept when bucketing user coordinates (2 is roughly 1.1km)",
        ge=0,
        le=6,
    )

    # Admission gate
    search_rate_limit_enabled: bool = Field(
        default=True, description="Enable search rate limiting (disable for load testing)"
    )
    search_rate_limit_shadow: bool = Field(
        default=False,
        description="Record rate limit denials without blocking the request",
    )
    search_rate_limit_requests: int = Field(
        default=10,
        description="Uncached search requests allowed per caller per window",
        ge=1,
    )
    search_rate_limit_window_seconds: float = Field(
        default=60.0,
        description="Length of the fixed rate limit window in seconds",
        gt=0,
    )
    search_rate_limit_retention_seconds: float = Field(
        default=600.0,
        description="Idle time after which a caller's rate window is discarded",
        gt=0,
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalize_log_level(cls, value: object) -> str:
        level = str(value or "INFO").strip().upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {value}")
        return level

    @model_validator(mode="after")
    def _retention_covers_window(self) -> "Settings":
        if self.search_rate_limit_retention_seconds < self.search_rate_limit_window_seconds:
            raise ValueError(
                "search_rate_limit_retention_seconds must be at least search_rate_limit_window_seconds"
            )
        return self


settings = Settings()
