"""
Configuration management for the transport order dashboard
"""
from functools import lru_cache
from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings"""

    # API Configuration
    API_HOST: str = Field(default="localhost")
    API_PORT: int = Field(default=8000)
    API_DEBUG: bool = Field(default=False)
    API_RELOAD: bool = Field(default=False)

    # Database Configuration
    DATABASE_URL: str = Field(default="sqlite:///./orders.db")
    DATABASE_ECHO: bool = Field(default=False)
    # The orders table is owned by the ingestion workflow; only create it locally
    DATABASE_CREATE_TABLES: bool = Field(default=False)

    # Orders
    ORDERS_LIST_LIMIT: int = Field(default=100, ge=1, le=1000)
    # Per process: with several workers a write only clears its own worker, so
    # other workers can serve reads up to this old. Set 0 to disable.
    ORDERS_CACHE_TTL_SECONDS: float = Field(default=3.0, ge=0)
    ORDERS_CACHE_MAX_ENTRIES: int = Field(default=512, ge=1)

    # Logging Configuration
    LOG_LEVEL: str = Field(default="INFO")

    # CORS Configuration
    ALLOWED_ORIGINS: List[str] = Field(default=["*"])

    # Dashboard Configuration
    DASHBOARD_API_URL: str = Field(default="http://localhost:8000")
    DASHBOARD_AUTO_REFRESH_SECONDS: int = Field(default=60, ge=5)
    DASHBOARD_REQUEST_TIMEOUT_SECONDS: float = Field(default=10.0, gt=0)

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )


@lru_cache
def get_settings() -> Settings:
    """Build the settings once per process"""
    return Settings()
