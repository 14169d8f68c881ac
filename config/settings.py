"""
County Compass - Application Settings
Manages environment variables and configuration using Pydantic
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache
from typing import Optional
import os


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Optional:
        - COUNTY_DATA_PATH (exported county dataset, JSON or CSV)
        - LOG_DIR (enables the dated log file handler)
    """

    # Dataset
    COUNTY_DATA_PATH: str = "data/counties.json"

    # Application
    ENVIRONMENT: str = "production"
    LOG_LEVEL: str = "INFO"
    DEBUG: bool = False

    # API settings
    API_TITLE: str = "County Compass API"
    API_VERSION: str = "1.0.0"
    API_DESCRIPTION: str = "Read-only county dataset, statistics and presets for the county explorer"
    CORS_ALLOW_ORIGINS: str = "http://localhost:3000,http://127.0.0.1:3000"

    # File storage
    LOG_DIR: Optional[str] = "logs"

    # Explorer defaults
    TOP_MATCHES_LIMIT: int = 10
    SEARCH_RESULT_LIMIT: int = 8
    DEFAULT_IMPORTANCE: int = 3  # Importance used when a filter leaves it unset

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True
    )

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        if self.LOG_DIR:
            os.makedirs(self.LOG_DIR, exist_ok=True)


@lru_cache()
def get_settings() -> Settings:
    """
    Returns cached settings instance.
    Uses lru_cache to avoid re-reading .env on every call.
    """
    return Settings()


# Importance slider bounds
IMPORTANCE_MIN = 1
IMPORTANCE_MAX = 5
