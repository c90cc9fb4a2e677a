"""
HTTP API layer.

FastAPI application factory, dependency wiring and routers.
"""
