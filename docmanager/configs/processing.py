"""
Processing backend configuration settings.

Location and timeout of the external document-processing service
that ingestion jobs are handed off to.

Dependencies: pydantic, pydantic_settings
System role: External processing client configuration
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ProcessingSettings(BaseSettings):
    """External processing backend configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="PROCESSING_",
        case_sensitive=False,
        extra="ignore",
    )

    backend_url: str = Field(
        default="http://localhost:8000",
        description="Base URL of the processing backend",
    )
    trigger_path: str = Field(
        default="/api/ingestion/trigger",
        description="Path that accepts ingestion payloads",
    )
    timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Upper bound for a single submission call",
    )
