"""
Configuration module for the Refund Approval service.
Loads settings from environment variables, including refund policy overrides.
"""

from decimal import Decimal

from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application Configuration
    app_host: str = Field(
        default="0.0.0.0",
        alias="APP_HOST",
        description="Host to bind the application"
    )
    app_port: int = Field(
        default=8000,
        alias="APP_PORT",
        description="Port to bind the application"
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        alias="LOG_LEVEL",
        description="Logging level"
    )

    # Data Store Configuration
    data_backend: str = Field(
        default="memory",
        alias="DATA_BACKEND",
        description="Record store backend: 'memory' (seeded sample data) or 'cosmos'"
    )
    record_cache_ttl_seconds: int = Field(
        default=300,
        alias="RECORD_CACHE_TTL_SECONDS",
        description="How long fetched case/account records are cached"
    )

    # Case Configuration
    case_type: str = Field(
        default="Refund Request",
        alias="CASE_TYPE",
        description="Case type written back when a refund decision is confirmed"
    )
    currency_symbol: str = Field(
        default="£",
        alias="CURRENCY_SYMBOL",
        description="Currency symbol used in decision reasons"
    )

    # Refund Policy
    refund_ratio_lower: Decimal = Field(
        default=Decimal("0.25"),
        alias="REFUND_RATIO_LOWER",
        description="Highest refund ratio approved automatically for experienced accounts"
    )
    refund_ratio_upper: Decimal = Field(
        default=Decimal("0.40"),
        alias="REFUND_RATIO_UPPER",
        description="Highest refund ratio held for a call instead of denied"
    )
    refund_max_fee: Decimal = Field(
        default=Decimal("60"),
        alias="REFUND_MAX_FEE",
        description="Largest refund total approved automatically"
    )
    refund_max_shortlists: int = Field(
        default=3,
        alias="REFUND_MAX_SHORTLISTS",
        description="Shortlists per request at which the request is always held"
    )
    refund_experience_days: int = Field(
        default=100,
        alias="REFUND_EXPERIENCE_DAYS",
        description="Account age in days below which the account is inexperienced"
    )
    refund_experience_year_days: int = Field(
        default=366,
        alias="REFUND_EXPERIENCE_YEAR_DAYS",
        description="Account age in days below which low shortlist volume means inexperienced"
    )
    refund_experience_shortlists: int = Field(
        default=16,
        alias="REFUND_EXPERIENCE_SHORTLISTS",
        description="Shortlist count below which a first-year account is inexperienced"
    )

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


# Global settings instance
settings = Settings()
