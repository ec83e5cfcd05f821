"""Configuration management for pgdocstore.

This module uses Pydantic Settings to load and validate configuration from
environment variables and .env files. The connection parameters are only
consumed here; nothing in the library writes them back.
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy.engine import URL


class Settings(BaseSettings):
    """Library configuration settings.

    Settings are loaded from environment variables and .env files.
    All configuration values are validated at startup.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="PGDOCSTORE_",
        case_sensitive=False,
        extra="ignore",
    )

    environment: Literal["development", "production", "testing"] = "development"

    # Database Settings
    db_host: str = "localhost"
    db_port: int = 5432
    db_name: str = "content"
    db_user: str = "postgres"
    db_password: str | None = None
    db_schema: str = "public"
    db_echo: bool = False

    # Pagination Settings
    default_page_size: int = Field(
        default=50,
        description="Page size reported in find metadata when no limit is given",
    )

    # Logging Settings
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    log_format: Literal["json", "console"] = "json"

    @field_validator("default_page_size")
    @classmethod
    def validate_page_size(cls, v: int) -> int:
        """Page size must be positive, it is used as a divisor."""
        if v < 1:
            raise ValueError("default_page_size must be at least 1")
        return v

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.environment == "development"

    @property
    def is_testing(self) -> bool:
        """Check if running in testing environment."""
        return self.environment == "testing"

    @property
    def database_url(self) -> URL:
        """Build the asyncpg database URL from the individual parameters."""
        return URL.create(
            "postgresql+asyncpg",
            username=self.db_user,
            password=self.db_password,
            host=self.db_host,
            port=self.db_port,
            database=self.db_name,
        )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Returns:
        Settings: Cached settings instance.
    """
    return Settings()
