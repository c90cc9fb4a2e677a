"""
Unified application settings.

Aggregates all configuration modules into a single Settings class.
Provides dependency injection factory for FastAPI.

Dependencies: All config modules
System role: Central configuration aggregator for the application
"""

from functools import lru_cache

from pydantic import Field

from docmanager.configs.base import BaseSettings
from docmanager.configs.database import DatabaseSettings
from docmanager.configs.ingestion import IngestionSettings
from docmanager.configs.processing import ProcessingSettings


class Settings(BaseSettings):
    """Unified application settings aggregating all config modules."""

    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    processing: ProcessingSettings = Field(default_factory=ProcessingSettings)
    ingestion: IngestionSettings = Field(default_factory=IngestionSettings)


@lru_cache
def get_settings() -> Settings:
    """
    Get application settings singleton.

    Returns Settings instance, cached for dependency injection.
    Environment variables loaded once at startup.

    Usage:
        from docmanager.configs import get_settings
        settings = get_settings()
    """
    return Settings()
