"""
Configuration management for the sales reporting backend.

Values come from environment variables (or a local .env file) so report
behaviour can be tuned per deployment without code changes.
"""

from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


SUPPORTED_PAGE_SIZES = ("A4", "LETTER")
LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG", "NOTSET")


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=False
    )

    # Environment Settings
    environment: str = "development"
    debug: bool = True
    log_level: str = "INFO"

    # Order Retrieval
    REPORT_ORDER_BATCH_SIZE: int = Field(
        default=1000, description="Maximum orders fetched by the indexed query"
    )

    # Demonstration Data
    REPORT_SYNTHETIC_DATA_ENABLED: bool = Field(
        default=True,
        description="Synthesize demonstration orders when a window has none",
    )
    REPORT_SYNTHETIC_SEED: Optional[int] = Field(
        default=None, description="Seed for reproducible demonstration data"
    )

    # Rendering
    REPORT_CURRENCY_SYMBOL: str = Field(
        default="Rs.", description="Currency prefix used in rendered reports"
    )
    REPORT_PAGE_SIZE: str = Field(default="A4", description="A4 or LETTER")
    REPORT_DETAILED_ORDER_LIMIT: int = Field(
        default=100, description="Rows carried in the detailed order list"
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"Unknown log level: {v}")
        return level

    @field_validator("REPORT_PAGE_SIZE")
    @classmethod
    def validate_page_size(cls, v: str) -> str:
        size = v.upper()
        if size not in SUPPORTED_PAGE_SIZES:
            raise ValueError(
                f"REPORT_PAGE_SIZE must be one of {', '.join(SUPPORTED_PAGE_SIZES)}"
            )
        return size

    @field_validator("REPORT_ORDER_BATCH_SIZE", "REPORT_DETAILED_ORDER_LIMIT")
    @classmethod
    def validate_positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("must be a positive integer")
        return v


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Returns:
        Settings instance with environment variables loaded
    """
    return Settings()


# Export settings instance for easy import
settings = get_settings()
