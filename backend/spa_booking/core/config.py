# backend/spa_booking/core/config.py
import logging
import os
from pathlib import Path
from typing import Literal

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .constants import BRAND_NAME, DEFAULT_CURRENCY

logger = logging.getLogger(__name__)


# Load .env file only if not in CI
if not os.getenv("CI"):
    env_path = Path(__file__).parent.parent.parent / ".env"  # Goes up to backend/.env
    logger.debug("[CONFIG] Looking for .env at: %s (exists=%s)", env_path, env_path.exists())
    load_dotenv(env_path)


class Settings(BaseSettings):
    environment: Literal["development", "test", "staging", "production"] = Field(
        default="development",
        description="Deployment environment name",
    )
    database_url: str = Field(
        default="sqlite:///./spa_booking.db",
        alias="DATABASE_URL",
        description="SQLAlchemy database URL for the booking and catalog store",
    )
    database_echo: bool = Field(default=False, description="Echo SQL statements to the log")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    problem_json_media_type: bool = Field(
        default=False,
        alias="PROBLEM_JSON_MEDIA_TYPE",
        description="Send error bodies as application/problem+json instead of application/json",
    )

    brand_name: str = Field(default=BRAND_NAME, description="Business name used in notifications")
    default_currency: str = Field(
        default=DEFAULT_CURRENCY,
        description="Currency assumed for catalog records that do not declare one",
    )

    # Listing engine
    bookings_default_page_size: int = Field(default=20, ge=1)
    bookings_max_page_size: int = Field(default=100, ge=1)
    bookings_in_filter_limit: int = Field(
        default=10,
        ge=1,
        description="Maximum alternatives honoured by the status 'in' filter; extras are dropped",
    )
    bookings_cursor_version: int = Field(default=1, ge=1, description="Page token schema version")

    # Lifecycle transactions
    booking_txn_max_attempts: int = Field(
        default=3,
        ge=1,
        description="Attempts for a booking read-modify-write before giving up",
    )
    booking_txn_retry_backoff_seconds: float = Field(default=0.05, ge=0)

    model_config = SettingsConfigDict(
        env_file=".env" if not os.getenv("CI") else None,
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    @field_validator("log_level")
    @classmethod
    def _normalize_log_level(cls, v: str) -> str:
        level = (v or "INFO").strip().upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unsupported log level: {v}")
        return level

    @field_validator("default_currency")
    @classmethod
    def _normalize_currency(cls, v: str) -> str:
        return (v or DEFAULT_CURRENCY).strip().upper()

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")


settings = Settings()
