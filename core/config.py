"""
Application configuration using Pydantic settings.

Usage:
    from core.config import get_settings
    settings = get_settings()

For field allow-lists and wire tokens, import from core.constants:
    from core.constants import FILTERABLE_FIELDS, MUTABLE_FIELDS
"""

from functools import lru_cache
from typing import List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Unified application settings loaded from environment variables and .env file.

    Required for production:
        - DATABASE_URL (defaults to a local SQLite file)
    """
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # App settings
    app_name: str = Field(default="Issue Tracker", validation_alias="APP_NAME")
    api_prefix: str = Field(default="/api", validation_alias="API_PREFIX")
    debug: bool = Field(default=False, validation_alias="DEBUG")
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")
    log_json: bool = Field(default=False, validation_alias="LOG_JSON")

    # Database
    database_url: str = Field(default="sqlite:///issue_tracker.db", validation_alias="DATABASE_URL")
    db_pool_size: int = Field(default=10, validation_alias="DB_POOL_SIZE")
    db_max_overflow: int = Field(default=20, validation_alias="DB_MAX_OVERFLOW")
    db_pool_pre_ping: bool = Field(default=True, validation_alias="DB_POOL_PRE_PING")

    # CORS
    cors_allowed_origins: str = Field(default="*", validation_alias="CORS_ALLOWED_ORIGINS")

    # Listing
    issue_list_max_limit: int = Field(default=100, ge=1, validation_alias="ISSUE_LIST_MAX_LIMIT")

    @field_validator("api_prefix")
    @classmethod
    def normalize_api_prefix(cls, v: str) -> str:
        """Ensure the prefix starts with a slash and has no trailing slash."""
        v = "/" + v.strip().strip("/")
        return "" if v == "/" else v

    @property
    def cors_origins_list(self) -> List[str]:
        """Parse CORS origins from comma-separated string."""
        return [origin.strip() for origin in self.cors_allowed_origins.split(",") if origin.strip()]


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings."""
    return Settings()


__all__ = ["Settings", "get_settings"]
