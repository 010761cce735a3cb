"""
Configuration management module for the Wedding Guests application.

This module provides centralized configuration management using pydantic-settings
for loading and validating environment variables from .env file.
"""

from functools import lru_cache
from typing import Dict, List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


UNLIMITED_TOKENS = {"unlimited", "-1", "*"}
CAPACITY_MODES = ("block", "warn")


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All required configuration parameters must be provided via environment variables
    or .env file. Optional parameters have sensible defaults.
    """

    # Application Settings
    APP_NAME: str = "Wedding Guests"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Database - PostgreSQL (Required fields)
    POSTGRES_USER: str
    POSTGRES_PASSWORD: str
    POSTGRES_DB: str
    POSTGRES_HOST: str = "db"
    POSTGRES_PORT: int = 5432

    # Full URL override (e.g. sqlite:///./wedding_guests.db for local development)
    DATABASE_URL: Optional[str] = None
    DB_POOL_SIZE: int = 10
    DB_MAX_OVERFLOW: int = 20

    # CORS Configuration
    CORS_ORIGINS: str = Field(
        default="http://localhost:3000,http://localhost:8000",
        description="Comma-separated list of allowed CORS origins"
    )

    # Subscription plans
    PLAN_EVENT_LIMITS: str = Field(
        default="free:1,pro:5,agency:unlimited",
        description="Comma-separated plan:limit pairs; 'unlimited' disables the limit"
    )
    DEFAULT_PLAN: str = "free"

    # RSVP
    ALLOW_RSVP_CHANGES: bool = False
    RSVP_MAX_PLUS_ONES: int = Field(default=5, ge=0, le=20)
    RSVP_TOKEN_BYTES: int = Field(default=24, ge=16, le=64)

    # Check-in
    CHECKIN_CAPACITY_MODE: str = "block"

    # CSV import
    CSV_IMPORT_MAX_ROWS: int = 5000
    CSV_MAX_FILE_SIZE: int = 2 * 1024 * 1024  # 2MB

    # Rate limiting
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_STORAGE_URI: str = "memory://"
    RSVP_RATE_LIMIT: str = "30/minute"

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore"
    )

    @field_validator("CHECKIN_CAPACITY_MODE")
    @classmethod
    def validate_capacity_mode(cls, v: str) -> str:
        """Validate that the check-in capacity mode is a known value."""
        mode = v.strip().lower()
        if mode not in CAPACITY_MODES:
            raise ValueError(f"CHECKIN_CAPACITY_MODE must be one of {', '.join(CAPACITY_MODES)}")
        return mode

    @field_validator("PLAN_EVENT_LIMITS")
    @classmethod
    def validate_plan_limits(cls, v: str) -> str:
        """Validate that PLAN_EVENT_LIMITS parses into plan:limit pairs."""
        _parse_plan_limits(v)
        return v

    @field_validator("CSV_IMPORT_MAX_ROWS", "CSV_MAX_FILE_SIZE")
    @classmethod
    def validate_positive(cls, v: int) -> int:
        """Validate that size limits are positive."""
        if v <= 0:
            raise ValueError("Limit must be positive")
        return v

    @property
    def database_url(self) -> str:
        """
        Construct the SQLAlchemy connection URL.

        DATABASE_URL wins when set; otherwise the PostgreSQL URL is
        assembled from the POSTGRES_* settings.

        Returns:
            str: SQLAlchemy-compatible database URL
        """
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return (
            f"postgresql://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}"
            f"@{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"
        )

    def get_plan_limits(self) -> Dict[str, Optional[int]]:
        """
        Get the event limit of every subscription plan.

        Returns:
            Dict[str, Optional[int]]: Plan name to limit; None means unlimited
        """
        return _parse_plan_limits(self.PLAN_EVENT_LIMITS)

    def get_cors_origins(self) -> List[str]:
        """
        Get list of allowed CORS origins from comma-separated string.

        Returns:
            List[str]: List of allowed CORS origins
        """
        if not self.CORS_ORIGINS:
            return []
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]


def _parse_plan_limits(raw: str) -> Dict[str, Optional[int]]:
    limits: Dict[str, Optional[int]] = {}
    for pair in raw.split(","):
        pair = pair.strip()
        if not pair:
            continue
        plan, sep, value = pair.partition(":")
        plan = plan.strip().lower()
        value = value.strip().lower()
        if not sep or not plan or not value:
            raise ValueError(f"Invalid plan limit entry: {pair!r} (expected plan:limit)")
        if value in UNLIMITED_TOKENS:
            limits[plan] = None
            continue
        try:
            limit = int(value)
        except ValueError:
            raise ValueError(f"Invalid limit for plan {plan!r}: {value!r}") from None
        if limit < 0:
            raise ValueError(f"Limit for plan {plan!r} must not be negative")
        limits[plan] = limit
    if not limits:
        raise ValueError("At least one plan limit must be configured")
    return limits


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached Settings instance.

    This function uses lru_cache to ensure only one Settings instance is created
    and reused throughout the application lifecycle.

    Returns:
        Settings: Singleton Settings instance
    """
    return Settings()
