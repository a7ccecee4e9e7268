"""
Storefront Configuration

Configuration management with environment variable support.
Implements defaults and validation for cache, storage and backend settings.
"""

from functools import lru_cache
from typing import Optional

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..constants import CACHE_NAMESPACE, CacheTTL

# Load environment variables from .env file
load_dotenv()


class Settings(BaseSettings):
    """Application settings with validation and defaults."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=True, extra="ignore"
    )

    # Environment settings
    ENVIRONMENT: str = Field(
        default="development", description="Application environment"
    )

    # Hosted database backend (PostgREST compatible)
    BACKEND_URL: Optional[str] = Field(
        default=None, description="Base URL of the hosted database REST API"
    )
    BACKEND_API_KEY: Optional[str] = Field(
        default=None, description="Public API key sent with every backend request"
    )
    BACKEND_TIMEOUT: float = Field(
        default=15.0, gt=0, le=120, description="Backend request timeout in seconds"
    )

    # Cache configuration
    CACHE_USE_DURABLE_STORE: bool = Field(
        default=True, description="Persist cache entries to the durable store"
    )
    CACHE_DEFAULT_TTL_MS: int = Field(
        default=CacheTTL.SHORT, description="Default entry TTL in milliseconds"
    )
    CACHE_NAMESPACE: str = Field(
        default=CACHE_NAMESPACE, description="Durable key prefix owned by the cache"
    )

    # Durable store configuration
    DURABLE_STORE: str = Field(
        default="memory", description="Durable store backend (memory or redis)"
    )
    REDIS_URL: str = Field(
        default="redis://localhost:6379/0", description="Redis connection URL"
    )
    STORAGE_MAX_BYTES: Optional[int] = Field(
        default=5 * 1024 * 1024,
        ge=1,
        description="Quota of the in-memory durable store (characters)",
    )
    STORAGE_WARNING_THRESHOLD: float = Field(
        default=0.8, gt=0, le=1, description="Usage ratio that triggers a warning"
    )

    # Cart configuration
    CART_MATCH_MODE: str = Field(
        default="identity",
        description="Line matching for cart remove/update (identity or product)",
    )

    # Development and debugging
    DEBUG: bool = Field(default=False, description="Force DEBUG logging")
    LOG_LEVEL: str = Field(default="INFO", description="Logging level")
    LOG_JSON: bool = Field(default=False, description="Render logs as JSON")

    @field_validator("ENVIRONMENT")
    @classmethod
    def validate_environment(cls, v):
        """Validate environment value."""
        allowed = ["development", "test", "staging", "production"]
        if v not in allowed:
            raise ValueError(f"ENVIRONMENT must be one of: {allowed}")
        return v

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v):
        """Validate log level."""
        allowed = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in allowed:
            raise ValueError(f"LOG_LEVEL must be one of: {allowed}")
        return v.upper()

    @field_validator("CACHE_DEFAULT_TTL_MS")
    @classmethod
    def validate_default_ttl(cls, v: int) -> int:
        """Default TTL must be positive and shorter than a year."""
        if not 0 < v < CacheTTL.MAX:
            raise ValueError("CACHE_DEFAULT_TTL_MS must be between 0 and one year")
        return v

    @field_validator("DURABLE_STORE")
    @classmethod
    def validate_durable_store(cls, v: str) -> str:
        allowed = ["memory", "redis"]
        if v.lower() not in allowed:
            raise ValueError(f"DURABLE_STORE must be one of: {allowed}")
        return v.lower()

    @field_validator("CART_MATCH_MODE")
    @classmethod
    def validate_cart_match_mode(cls, v: str) -> str:
        allowed = ["identity", "product"]
        if v.lower() not in allowed:
            raise ValueError(f"CART_MATCH_MODE must be one of: {allowed}")
        return v.lower()

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.ENVIRONMENT == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.ENVIRONMENT == "production"

    @property
    def backend_configured(self) -> bool:
        """Whether both the backend URL and API key are set."""
        return bool(self.BACKEND_URL and self.BACKEND_API_KEY)


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
