"""User administration endpoints (admin only)."""

import logging
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Request
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_admin, get_db
from app.core.exceptions import NotFoundError, ValidationError
from app.core.middleware import get_client_ip
from app.models.booking import Booking
from app.models.user import User
from app.schemas.user import MessageResponse, UserResponse, UserStatusResponse
from app.services.audit_service import audit_service

logger = logging.getLogger(__name__)

router = APIRouter()


async def _get_user(db: AsyncSession, user_id: UUID) -> User:
    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    if not user:
        raise NotFoundError("User", str(user_id))
    return user


@router.get("", response_model=list[UserResponse])
async def list_users(
    admin: Annotated[User, Depends(get_current_admin)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> list[User]:
    """List all users."""
    result = await db.execute(select(User).order_by(User.created_at.desc()))
    return list(result.scalars().all())


@router.put("/{user_id}", response_model=UserStatusResponse)
async def toggle_user_suspension(
    user_id: UUID,
    request: Request,
    admin: Annotated[User, Depends(get_current_admin)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> UserStatusResponse:
    """Suspend an active user or reactivate a suspended one."""
    if user_id == admin.id:
        raise ValidationError("You cannot suspend yourself")

    user = await _get_user(db, user_id)
    was_suspended = user.is_suspended
    user.is_suspended = not was_suspended

    await audit_service.log_action(
        db,
        user_id=admin.id,
        action="user_activated" if was_suspended else "user_suspended",
        resource_type="user",
        resource_id=user.id,
        old_values={"is_suspended": was_suspended},
        new_values={"is_suspended": user.is_suspended},
        ip_address=get_client_ip(request),
    )
    await db.flush()

    state = "suspended" if user.is_suspended else "activated"
    logger.info("User %s %s by admin %s", user.id, state, admin.id)
    return UserStatusResponse(
        message=f"User {state} successfully",
        user=UserResponse.model_validate(user),
    )


@router.delete("/{user_id}", response_model=MessageResponse)
async def delete_user(
    user_id: UUID,
    request: Request,
    admin: Annotated[User, Depends(get_current_admin)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> MessageResponse:
    """Delete a user together with their bookings."""
    if user_id == admin.id:
        raise ValidationError("You cannot delete yourself")

    user = await _get_user(db, user_id)

    removed = await db.execute(delete(Booking).where(Booking.user_id == user.id))
    await audit_service.log_action(
        db,
        user_id=admin.id,
        action="user_deleted",
        resource_type="user",
        resource_id=user.id,
        old_values={"email": user.email, "username": user.username, "bookings": removed.rowcount},
        ip_address=get_client_ip(request),
    )
    await db.delete(user)
    await db.flush()

    logger.info("User %s deleted by admin %s (%d bookings removed)", user.id, admin.id, removed.rowcount)
    return MessageResponse(message="User deleted successfully")
