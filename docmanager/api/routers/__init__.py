"""
API routers.

Exports:
  - health_router: liveness
  - ingestion_router: ingestion job lifecycle
"""

from docmanager.api.routers.health import router as health_router
from docmanager.api.routers.ingestion.ingestion_router import router as ingestion_router

__all__ = ["health_router", "ingestion_router"]
