"""
Boundary layer: adapters between the ingestion core and the outside world.

  - db: SQLAlchemy job store and document status gateway
  - processing: httpx client for the external processing backend
"""
