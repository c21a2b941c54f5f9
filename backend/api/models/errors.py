"""
Error response models.

Standardized error responses for the API.
"""

from typing import Any

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """Standard error response format (rendered by api/errors.py)."""

    error: str
    kind: str
    message: str
    details: dict[str, Any] = Field(default_factory=dict)
