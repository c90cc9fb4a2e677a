"""
API request/response schemas.

Dependencies: pydantic
System role: HTTP contracts for the ingestion API
"""
