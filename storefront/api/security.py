"""
Security helpers.
Password hashing (bcrypt) and JWT encoding/decoding (PyJWT).
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import bcrypt
import jwt

from .config import get_settings


def hash_password(password: str) -> str:
    """Hash a plaintext password with bcrypt."""
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def create_access_token(
    data: Dict[str, Any],
    secret: Optional[str] = None,
    algorithm: Optional[str] = None,
    expires_delta: Optional[timedelta] = None,
) -> str:
    """
    Create a signed access token.

    Token issuance belongs to the identity service; this helper exists for
    seeding and tests.

    Args:
        data: Claims to embed (``sub`` should hold the user id)
        secret: Signing secret (defaults to settings)
        algorithm: Signing algorithm (defaults to settings)
        expires_delta: Token lifetime (defaults to settings)

    Returns:
        Encoded JWT
    """
    settings = get_settings()
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.access_token_expire_minutes)

    now = datetime.now(timezone.utc)
    claims = dict(data)
    claims.update({"iat": now, "exp": now + expires_delta, "type": "access"})

    return jwt.encode(
        claims,
        secret or settings.jwt_secret,
        algorithm=algorithm or settings.jwt_algorithm,
    )


def decode_token(token: str, secret: str, algorithm: str) -> Dict[str, Any]:
    """
    Decode and verify a token.

    Raises:
        jwt.ExpiredSignatureError: validity window has elapsed
        jwt.InvalidTokenError: malformed token or bad signature
    """
    return jwt.decode(token, secret, algorithms=[algorithm])
