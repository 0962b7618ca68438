"""
Auth Service
Bearer token verification and the admin authorization gate.
"""

import logging
from typing import Optional
from uuid import UUID

import jwt
from sqlalchemy.orm import Session

from ...db.models import User
from ..errors import (
    InvalidTokenError,
    NotAdminError,
    TokenExpiredError,
    UnauthenticatedError,
    UserNotFoundError,
)
from ..schemas.auth import UserIdentity
from ..security import decode_token

logger = logging.getLogger(__name__)


def extract_token(authorization: Optional[str], cookie_token: Optional[str]) -> Optional[str]:
    """
    Pick the token to verify.

    The bearer segment of the Authorization header wins over the cookie.
    """
    if authorization:
        parts = authorization.split()
        if len(parts) == 2 and parts[0].lower() == "bearer":
            return parts[1]
    return cookie_token or None


class CredentialVerifier:
    """
    Resolves a bearer token to a user identity.

    Each failure raises a distinct AuthenticationError subclass so the
    reason is visible to clients and in logs.
    """

    def __init__(self, secret: str, algorithm: str = "HS256"):
        self.secret = secret
        self.algorithm = algorithm

    def verify(self, token: Optional[str], db: Session) -> UserIdentity:
        if not token:
            raise UnauthenticatedError()

        try:
            payload = decode_token(token, self.secret, self.algorithm)
        except jwt.ExpiredSignatureError:
            logger.warning("Rejected expired token")
            raise TokenExpiredError()
        except jwt.InvalidTokenError as e:
            logger.warning(f"Rejected invalid token: {e}")
            raise InvalidTokenError()

        user_id_str = payload.get("sub")
        if not user_id_str:
            raise InvalidTokenError("Authentication failed: invalid token payload")

        try:
            user_id = UUID(str(user_id_str))
        except ValueError:
            raise InvalidTokenError("Authentication failed: invalid user ID in token")

        user = db.get(User, user_id)
        if user is None:
            logger.warning(f"Token subject no longer exists: {user_id}")
            raise UserNotFoundError()

        return UserIdentity.model_validate(user)


class AuthorizationGate:
    """Decides whether an identity may perform admin-only operations."""

    @staticmethod
    def is_permitted(identity: Optional[UserIdentity]) -> bool:
        return identity is not None and identity.is_admin

    def require_admin(self, identity: Optional[UserIdentity]) -> UserIdentity:
        if not self.is_permitted(identity):
            raise NotAdminError()
        return identity
