"""Booking-related Pydantic schemas."""

from datetime import date, datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator


class BookingCreate(BaseModel):
    """Schema for creating a booking."""

    traveler_name: str = Field(..., max_length=200)
    contact_email: str = Field(..., max_length=255)
    destination: str = Field(..., max_length=100)
    start_date: date
    end_date: date
    people: int = Field(..., ge=1, le=100)
    price_per_person: int | None = Field(None, gt=0)  # falls back to the destination's price
    payment_screenshot: str | None = None  # data URL

    @field_validator("end_date")
    @classmethod
    def validate_end_date(cls, v: date, info) -> date:
        start_date = info.data.get("start_date")
        if start_date and v < start_date:
            raise ValueError("End date cannot be before start date")
        return v


class BookingCreatedResponse(BaseModel):
    """Schema for booking creation response."""

    id: UUID
    booking_reference: str
    message: str = "Payment stored successfully"


class BookingResponse(BaseModel):
    """Schema for booking response."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    booking_reference: str | None
    user_id: UUID

    # Trip
    traveler_name: str
    contact_email: str
    destination: str
    start_date: date
    end_date: date
    duration: int
    people: int
    price_per_person: int
    total_amount: int

    # Evidence
    payment_screenshot: str | None
    has_evidence: bool

    # Status
    verification_status: str
    verified_by: UUID | None
    verified_at: datetime | None
    rejection_reason: str | None
    suspension_reason: str | None
    refunded_at: datetime | None
    refunded_by: UUID | None
    refund_reason: str | None

    # Timestamps
    created_at: datetime
    updated_at: datetime


class BookingStatusResponse(BaseModel):
    """Compact booking view for a user's status page."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    booking_reference: str | None
    destination: str
    start_date: date
    end_date: date
    people: int
    total_amount: int
    verification_status: str
    rejection_reason: str | None
    suspension_reason: str | None
    refund_reason: str | None
    created_at: datetime


class BookingVerifyRequest(BaseModel):
    """Schema for admin review of a booking."""

    status: str = Field(..., pattern="^(verified|rejected|suspended)$")
    rejection_reason: str | None = Field(None, max_length=1000)
    suspension_reason: str | None = Field(None, max_length=1000)


class BookingRefundRequest(BaseModel):
    """Schema for an owner's refund request."""

    reason: str | None = Field(None, max_length=1000)


class BookingEvidenceUpload(BaseModel):
    """Schema for uploading payment evidence."""

    payment_screenshot: str


class BookingActionResponse(BaseModel):
    """Schema for responses to booking status changes."""

    success: bool = True
    message: str
    booking: BookingResponse
