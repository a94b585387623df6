"""FastAPI authentication dependencies for route protection."""

import uuid

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError
from sqlalchemy.ext.asyncio import AsyncSession

from villamarket.auth.tokens import ACCESS, decode_token
from villamarket.database import get_db
from villamarket.models.user import User

# Strict bearer: rejects requests without an Authorization header
_bearer_scheme = HTTPBearer()

# Optional bearer: anonymous requests pass through as None
_bearer_scheme_optional = HTTPBearer(auto_error=False)


def _unauthorized(detail: str = "Could not validate credentials") -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def _user_from_token(token: str, db: AsyncSession) -> User:
    """Resolve an access token to an active user or raise 401."""
    try:
        payload = decode_token(token)
    except JWTError:
        raise _unauthorized() from None

    # Refresh tokens are only good for /auth/refresh
    if payload.get("type") != ACCESS:
        raise _unauthorized("Invalid token type")

    try:
        user_id = uuid.UUID(payload.get("sub") or "")
    except ValueError:
        raise _unauthorized() from None

    user = await db.get(User, user_id)
    if user is None:
        raise _unauthorized()
    if not user.is_active:
        raise _unauthorized("User account is inactive")
    return user


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(_bearer_scheme),
    db: AsyncSession = Depends(get_db),
) -> User:
    """Return the authenticated user for the request's Bearer token."""
    return await _user_from_token(credentials.credentials, db)


async def get_optional_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer_scheme_optional),
    db: AsyncSession = Depends(get_db),
) -> User | None:
    """Like :func:`get_current_user` but ``None`` for anonymous or invalid credentials.

    Used by public endpoints that show extra data to the villa's host.
    """
    if credentials is None:
        return None
    try:
        return await _user_from_token(credentials.credentials, db)
    except HTTPException:
        return None
