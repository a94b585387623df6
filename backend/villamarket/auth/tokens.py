"""Bearer token issuance and verification (python-jose, HS256 by default)."""

import uuid
from datetime import datetime, timedelta, timezone

from jose import jwt

from villamarket.config import settings

ACCESS = "access"
REFRESH = "refresh"


def _encode(subject: str, token_type: str, lifetime: timedelta, extra: dict | None = None) -> str:
    issued = datetime.now(timezone.utc)
    claims = {
        **(extra or {}),
        "sub": subject,
        "type": token_type,
        "iat": issued,
        "exp": issued + lifetime,
    }
    return jwt.encode(claims, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def create_access_token(
    user_id: uuid.UUID | str,
    account_type: str | None = None,
    expires_delta: timedelta | None = None,
) -> str:
    """Short-lived token accepted by the API. ``account_type`` is informational only."""
    lifetime = expires_delta or timedelta(minutes=settings.jwt_access_token_expire_minutes)
    extra = {"account_type": account_type} if account_type else None
    return _encode(str(user_id), ACCESS, lifetime, extra)


def create_refresh_token(user_id: uuid.UUID | str, expires_delta: timedelta | None = None) -> str:
    """Long-lived token that can only be exchanged for a new pair."""
    lifetime = expires_delta or timedelta(days=settings.jwt_refresh_token_expire_days)
    return _encode(str(user_id), REFRESH, lifetime)


def decode_token(token: str) -> dict:
    """Verify signature and expiry and return the claims.

    Raises:
        jose.JWTError: If the token is invalid, expired, or malformed.
    """
    return jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])


def issue_token_pair(user_id: uuid.UUID | str, account_type: str | None = None) -> dict[str, str]:
    return {
        "access_token": create_access_token(user_id, account_type),
        "refresh_token": create_refresh_token(user_id),
        "token_type": "bearer",
    }
