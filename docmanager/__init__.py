"""Document management backend: ingestion job lifecycle over FastAPI + SQLAlchemy."""

__version__ = "0.1.0"
