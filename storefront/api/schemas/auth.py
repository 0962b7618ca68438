"""
Authentication schemas.
"""

from uuid import UUID

from pydantic import Field

from .common import CamelModel


class UserIdentity(CamelModel):
    """Resolved caller identity (never includes the password hash)."""

    id: UUID = Field(..., description="User unique identifier")
    name: str = Field(..., description="Display name")
    email: str = Field(..., description="User email address")
    is_admin: bool = Field(default=False, description="Whether the user has admin privileges")
