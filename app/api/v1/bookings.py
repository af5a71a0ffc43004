"""Booking endpoints."""

import logging
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_active_user, get_current_admin, get_db
from app.config import settings
from app.core.exceptions import ConflictError
from app.core.middleware import booking_limiter
from app.models.booking import Booking
from app.models.user import User
from app.schemas.booking import (
    BookingActionResponse,
    BookingCreate,
    BookingCreatedResponse,
    BookingEvidenceUpload,
    BookingRefundRequest,
    BookingResponse,
    BookingStatusResponse,
    BookingVerifyRequest,
)
from app.schemas.user import MessageResponse
from app.services.booking_service import booking_service

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "",
    response_model=BookingCreatedResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(booking_limiter)],
)
async def create_booking(
    booking_data: BookingCreate,
    current_user: Annotated[User, Depends(get_current_active_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> BookingCreatedResponse:
    """Create a booking and allocate its reference.

    A reference collision with a concurrent request is retried with a
    freshly computed reference.
    """
    details = booking_data.model_dump(exclude={"payment_screenshot"})
    max_attempts = max(1, settings.booking_reference_max_attempts)

    for attempt in range(1, max_attempts + 1):
        try:
            booking = await booking_service.create_booking(
                db,
                owner=current_user,
                details=details,
                evidence=booking_data.payment_screenshot,
            )
            break
        except ConflictError:
            if attempt == max_attempts:
                logger.error("Gave up allocating a booking reference after %d attempts", attempt)
                raise
            logger.warning("Retrying booking reference allocation (attempt %d)", attempt + 1)

    return BookingCreatedResponse(id=booking.id, booking_reference=booking.booking_reference)


@router.get("", response_model=list[BookingResponse])
async def list_bookings(
    current_user: Annotated[User, Depends(get_current_active_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> list[Booking]:
    """List bookings: all of them for admins, otherwise the user's own."""
    return await booking_service.list_bookings(db, current_user)


@router.get("/mine", response_model=list[BookingStatusResponse])
async def list_my_bookings(
    current_user: Annotated[User, Depends(get_current_active_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> list[Booking]:
    """List the current user's bookings with their verification status."""
    return await booking_service.list_own_bookings(db, current_user)


@router.get("/{booking_id}", response_model=BookingResponse)
async def get_booking(
    booking_id: UUID,
    current_user: Annotated[User, Depends(get_current_active_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Booking:
    """Get booking details."""
    return await booking_service.get_booking(db, booking_id, current_user)


@router.put("/{booking_id}/verify", response_model=BookingActionResponse)
async def verify_booking(
    booking_id: UUID,
    review: BookingVerifyRequest,
    admin: Annotated[User, Depends(get_current_admin)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> BookingActionResponse:
    """Verify, reject or suspend a booking's payment."""
    booking = await booking_service.verify(
        db,
        booking_id,
        admin,
        status=review.status,
        rejection_reason=review.rejection_reason,
        suspension_reason=review.suspension_reason,
    )
    return BookingActionResponse(
        message=f"Booking {review.status} successfully",
        booking=BookingResponse.model_validate(booking),
    )


@router.put("/{booking_id}/refund", response_model=BookingActionResponse)
async def refund_booking(
    booking_id: UUID,
    current_user: Annotated[User, Depends(get_current_active_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
    refund: BookingRefundRequest | None = None,
) -> BookingActionResponse:
    """Cancel a pending booking and request a refund."""
    booking = await booking_service.request_refund(
        db,
        booking_id,
        current_user,
        reason=refund.reason if refund else None,
    )
    return BookingActionResponse(
        message="Refund requested successfully",
        booking=BookingResponse.model_validate(booking),
    )


@router.put("/{booking_id}/evidence", response_model=BookingActionResponse)
async def upload_evidence(
    booking_id: UUID,
    upload: BookingEvidenceUpload,
    current_user: Annotated[User, Depends(get_current_active_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> BookingActionResponse:
    """Upload or replace the payment screenshot."""
    booking = await booking_service.attach_evidence(
        db, booking_id, current_user, upload.payment_screenshot
    )
    return BookingActionResponse(
        message="Payment stored successfully",
        booking=BookingResponse.model_validate(booking),
    )


@router.delete("/{booking_id}", response_model=MessageResponse)
async def delete_booking(
    booking_id: UUID,
    current_user: Annotated[User, Depends(get_current_active_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> MessageResponse:
    """Delete a booking."""
    booking = await booking_service.delete_booking(db, booking_id, current_user)
    return MessageResponse(message=f"Booking {booking.booking_reference} deleted successfully")
