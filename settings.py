"""
Configuration for the Budget API

Loaded from environment variables (and an optional .env file) with
pydantic-settings, so a misconfigured deployment fails at startup rather
than on the first request.
"""

from functools import lru_cache
from typing import List, Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEV_JWT_SECRET = "dev-secret-do-not-use-in-production"


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    database_url: str = Field(
        default="mongodb://localhost:27017",
        description="MongoDB connection string"
    )
    database_name: str = Field(
        default="budget_api",
        description="Database holding the budget collections"
    )

    jwt_secret: str = Field(
        default=DEV_JWT_SECRET,
        description="Secret used to sign bearer tokens"
    )
    jwt_algorithm: str = Field(default="HS256")
    jwt_expires_hours: int = Field(
        default=24,
        ge=1,
        le=720,
        description="Token validity window in hours"
    )

    app_environment: Literal["development", "production"] = Field(
        default="production",
        description="Application environment"
    )
    debug_mode: bool = Field(
        default=False,
        description="Expose stack traces in error responses"
    )
    cors_origins: str = Field(
        default="*",
        description="Comma-separated list of allowed CORS origins"
    )
    port: int = Field(default=8000)

    @property
    def is_development(self) -> bool:
        return self.app_environment == "development" or self.debug_mode

    @property
    def cors_origins_list(self) -> List[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Call get_settings.cache_clear() to reload.
    """
    return Settings()
