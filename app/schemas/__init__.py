"""Pydantic schemas for API validation."""

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
from app.schemas.destination import (
    DestinationCreate,
    DestinationDeleteResponse,
    DestinationResponse,
    DestinationUpdate,
)
from app.schemas.user import (
    AuthResponse,
    MessageResponse,
    PasswordResetConfirm,
    PasswordResetRequest,
    UserCreate,
    UserLogin,
    UserResponse,
    UserStatusResponse,
)

__all__ = [
    # User
    "UserCreate",
    "UserLogin",
    "UserResponse",
    "UserStatusResponse",
    "AuthResponse",
    "PasswordResetRequest",
    "PasswordResetConfirm",
    "MessageResponse",
    # Destination
    "DestinationCreate",
    "DestinationUpdate",
    "DestinationResponse",
    "DestinationDeleteResponse",
    # Booking
    "BookingCreate",
    "BookingCreatedResponse",
    "BookingResponse",
    "BookingStatusResponse",
    "BookingVerifyRequest",
    "BookingRefundRequest",
    "BookingEvidenceUpload",
    "BookingActionResponse",
]
