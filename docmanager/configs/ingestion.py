"""
Ingestion job configuration settings.

Dependencies: pydantic, pydantic_settings
System role: Job lifecycle tuning (retries, paging, stale-job recovery)
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class IngestionSettings(BaseSettings):
    """Ingestion job lifecycle configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="INGESTION_",
        case_sensitive=False,
        extra="ignore",
    )

    default_max_retries: int = Field(default=3, ge=0, description="Retries allowed per job")
    max_page_size: int = Field(default=100, ge=1, description="Upper bound for list page size")

    stale_sweep_enabled: bool = Field(
        default=False,
        description="Periodically fail jobs stuck in PROCESSING",
    )
    stale_after_seconds: int = Field(
        default=900,
        gt=0,
        description="Age of a PROCESSING job before it is considered stale",
    )
    sweep_interval_seconds: int = Field(
        default=60,
        gt=0,
        description="Delay between recovery sweeps",
    )
