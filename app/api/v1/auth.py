"""Authentication endpoints."""

import logging
from datetime import UTC, datetime
from typing import Annotated

from fastapi import APIRouter, Depends, status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_active_user, get_db
from app.config import settings
from app.core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    ValidationError,
)
from app.core.middleware import login_limiter, password_reset_limiter, register_limiter
from app.core.security import (
    create_user_token,
    generate_reset_token,
    get_password_hash,
    hash_reset_token,
    verify_password,
)
from app.models.user import User
from app.schemas.user import (
    AuthResponse,
    MessageResponse,
    PasswordResetConfirm,
    PasswordResetRequest,
    UserCreate,
    UserLogin,
    UserResponse,
)
from app.services.notification_service import notification_service

logger = logging.getLogger(__name__)

router = APIRouter()


def _auth_response(user: User) -> AuthResponse:
    return AuthResponse(
        access_token=create_user_token(str(user.id), user.role),
        user=UserResponse.model_validate(user),
    )


async def _get_user_by_email(db: AsyncSession, email: str) -> User | None:
    result = await db.execute(select(User).where(func.lower(User.email) == email.lower()))
    return result.scalar_one_or_none()


@router.post(
    "/register",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(register_limiter)],
)
async def register(
    user_data: UserCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> AuthResponse:
    """Register a new user account."""
    if await _get_user_by_email(db, user_data.email):
        raise ConflictError("Email already registered")

    user = User(
        username=user_data.username,
        email=user_data.email.lower(),
        password_hash=get_password_hash(user_data.password),
    )
    db.add(user)
    await db.flush()

    logger.info("User %s registered", user.id)
    return _auth_response(user)


@router.post("/login", response_model=AuthResponse, dependencies=[Depends(login_limiter)])
async def login(
    credentials: UserLogin,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> AuthResponse:
    """Login with email and password."""
    user = await _get_user_by_email(db, credentials.email)

    if not user or not verify_password(credentials.password, user.password_hash):
        raise AuthenticationError("Invalid email or password")

    if user.is_suspended:
        raise AuthorizationError("Your account has been suspended by the administrator.")

    user.last_login_at = datetime.now(UTC)
    await db.flush()

    return _auth_response(user)


@router.get("/me", response_model=UserResponse)
async def get_current_user_profile(
    current_user: Annotated[User, Depends(get_current_active_user)],
) -> User:
    """Get current authenticated user profile."""
    return current_user


@router.post(
    "/forgot-password",
    response_model=MessageResponse,
    status_code=status.HTTP_202_ACCEPTED,
    dependencies=[Depends(password_reset_limiter)],
)
async def forgot_password(
    request: PasswordResetRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> MessageResponse:
    """Request password reset email."""
    user = await _get_user_by_email(db, request.email)

    # Same answer either way so emails can't be enumerated
    if user:
        token, hashed_token, expires_at = generate_reset_token()
        user.reset_password_token = hashed_token
        user.reset_password_expires_at = expires_at
        await db.flush()

        reset_url = f"{settings.frontend_url.rstrip('/')}/reset-password/{token}"
        sent = await notification_service.send_password_reset(user.email, reset_url)
        if not sent:
            logger.warning("Password reset email for user %s was not delivered", user.id)

    return MessageResponse(message="If the email exists, a password reset link has been sent")


@router.put("/reset-password/{token}", response_model=AuthResponse)
async def reset_password(
    token: str,
    request: PasswordResetConfirm,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> AuthResponse:
    """Reset password with the emailed token."""
    result = await db.execute(
        select(User).where(User.reset_password_token == hash_reset_token(token))
    )
    user = result.scalar_one_or_none()

    expires_at = user.reset_password_expires_at if user else None
    if expires_at is not None and expires_at.tzinfo is None:
        # SQLite hands back naive datetimes
        expires_at = expires_at.replace(tzinfo=UTC)
    if not user or expires_at is None or expires_at < datetime.now(UTC):
        raise ValidationError("Invalid or expired token")

    user.password_hash = get_password_hash(request.password)
    user.reset_password_token = None
    user.reset_password_expires_at = None
    await db.flush()

    logger.info("Password reset for user %s", user.id)
    return _auth_response(user)
