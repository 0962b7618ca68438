"""
Shared schema primitives.
"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model that serializes to camelCase and accepts either casing."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,  # Allow ORM model conversion
    )


class MessageResponse(BaseModel):
    """Plain acknowledgement."""

    message: str = Field(..., description="Human readable result")


class ErrorDetail(BaseModel):
    message: str = Field(..., description="Error message")
    type: str = Field(..., description="Machine-readable error reason")
    details: Optional[Any] = Field(None, description="Additional error details")


class ErrorResponse(BaseModel):
    """Standard error response schema."""

    error: ErrorDetail


AUTH_RESPONSES = {
    401: {"model": ErrorResponse, "description": "Not authenticated or not authorized"},
}

NOT_FOUND_RESPONSES = {
    404: {"model": ErrorResponse, "description": "Resource not found"},
}

__all__ = [
    "CamelModel",
    "MessageResponse",
    "ErrorResponse",
    "AUTH_RESPONSES",
    "NOT_FOUND_RESPONSES",
]
