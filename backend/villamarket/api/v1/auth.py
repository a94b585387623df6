"""Auth API router — register, login, refresh, me."""

import logging
import uuid

from fastapi import APIRouter, Depends, HTTPException, status
from jose import JWTError
from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from villamarket.api.deps import get_current_user, get_db
from villamarket.auth.passwords import hash_password, verify_password
from villamarket.auth.tokens import REFRESH, decode_token, issue_token_pair
from villamarket.models.user import User
from villamarket.schemas.auth import (
    AuthResponse,
    LoginRequest,
    RefreshRequest,
    RegisterRequest,
    TokenResponse,
    UserResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/auth", tags=["auth"])


def _invalid_refresh(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


# ---------------------------------------------------------------------------
# POST /register
# ---------------------------------------------------------------------------


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def register(body: RegisterRequest, db: AsyncSession = Depends(get_db)) -> AuthResponse:
    """Register a new guest or host account with email and password."""
    # Email and phone number are both unique
    uniqueness = [User.email == body.email]
    if body.phone_number:
        uniqueness.append(User.phone_number == body.phone_number)
    existing = await db.scalar(select(User).where(or_(*uniqueness)))
    if existing is not None:
        detail = "Email already registered" if existing.email == body.email else "Phone number already registered"
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=detail)

    user = User(
        email=body.email,
        hashed_password=hash_password(body.password),
        name=body.name,
        phone_number=body.phone_number,
        account_type=body.account_type,
    )
    db.add(user)
    await db.flush()
    await db.refresh(user)
    logger.info("Registered %s account %s", user.account_type, user.id)

    tokens = issue_token_pair(user.id, user.account_type)
    return AuthResponse(
        user=UserResponse.model_validate(user),
        tokens=TokenResponse(**tokens),
    )


# ---------------------------------------------------------------------------
# POST /login
# ---------------------------------------------------------------------------


@router.post("/login", response_model=AuthResponse)
async def login(body: LoginRequest, db: AsyncSession = Depends(get_db)) -> AuthResponse:
    """Authenticate with email and password."""
    user = await db.scalar(select(User).where(User.email == body.email))

    if user is None or not verify_password(body.password, user.hashed_password):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Account is inactive",
        )

    tokens = issue_token_pair(user.id, user.account_type)
    return AuthResponse(
        user=UserResponse.model_validate(user),
        tokens=TokenResponse(**tokens),
    )


# ---------------------------------------------------------------------------
# POST /refresh
# ---------------------------------------------------------------------------


@router.post("/refresh", response_model=TokenResponse)
async def refresh(body: RefreshRequest, db: AsyncSession = Depends(get_db)) -> TokenResponse:
    """Exchange a valid refresh token for a new token pair."""
    try:
        payload = decode_token(body.refresh_token)
    except JWTError:
        raise _invalid_refresh("Invalid or expired refresh token") from None

    if payload.get("type") != REFRESH:
        raise _invalid_refresh("Invalid token type")

    try:
        user_id = uuid.UUID(payload.get("sub") or "")
    except ValueError:
        raise _invalid_refresh("Invalid token payload") from None

    user = await db.get(User, user_id)
    if user is None or not user.is_active:
        raise _invalid_refresh("User not found or inactive")

    return TokenResponse(**issue_token_pair(user.id, user.account_type))


# ---------------------------------------------------------------------------
# GET /me
# ---------------------------------------------------------------------------


@router.get("/me", response_model=UserResponse)
async def me(current_user: User = Depends(get_current_user)) -> UserResponse:
    """Return the currently authenticated user's profile."""
    return UserResponse.model_validate(current_user)
