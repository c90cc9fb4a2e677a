"""
Processing backend boundary.

Exports:
  - HttpProcessingClient: httpx client for the external processing backend
"""

from docmanager.boundary.processing.processing_client import HttpProcessingClient

__all__ = ["HttpProcessingClient"]
