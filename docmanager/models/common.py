"""
Common response models.

Error schema shared by every route's documented error responses.

Dependencies: pydantic
System role: Common API response structures
"""

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """Error response schema (FastAPI HTTPException body)."""

    detail: str | dict = Field(description="Error message or structured error context")


class InvalidStateDetail(BaseModel):
    """409 body for operations refused by the job's current status."""

    message: str
    current_status: str
