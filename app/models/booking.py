"""Booking database model."""

from __future__ import annotations

import uuid
from datetime import date, datetime
from typing import TYPE_CHECKING

from sqlalchemy import Date, DateTime, ForeignKey, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from app.database import Base, utcnow

if TYPE_CHECKING:
    from app.models.user import User


class Booking(Base):
    """A trip reservation and its payment verification status."""

    __tablename__ = "bookings"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    booking_reference: Mapped[str | None] = mapped_column(
        String(20), unique=True, index=True
    )  # BOOK-2025-00001
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )

    # Trip facts (immutable after creation)
    traveler_name: Mapped[str] = mapped_column(String(200), nullable=False)
    contact_email: Mapped[str] = mapped_column(String(255), nullable=False)
    destination: Mapped[str] = mapped_column(String(100), nullable=False)
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)
    duration: Mapped[int] = mapped_column(Integer, nullable=False)  # days
    people: Mapped[int] = mapped_column(Integer, nullable=False)
    price_per_person: Mapped[int] = mapped_column(Integer, nullable=False)  # per day
    total_amount: Mapped[int] = mapped_column(Integer, nullable=False)

    # Evidence: data URL of the uploaded screenshot/receipt
    payment_screenshot: Mapped[str | None] = mapped_column(Text)

    # Status
    verification_status: Mapped[str] = mapped_column(
        String(20), default="pending", nullable=False, index=True
    )  # pending, verified, rejected, suspended, refunded

    # Admin review
    verified_by: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="SET NULL")
    )
    verified_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    rejection_reason: Mapped[str | None] = mapped_column(Text)
    suspension_reason: Mapped[str | None] = mapped_column(Text)

    # Refund request
    refunded_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    refunded_by: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="SET NULL")
    )
    refund_reason: Mapped[str | None] = mapped_column(Text)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now(), index=True
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now(), onupdate=utcnow
    )

    # Optimistic concurrency guard for status transitions
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    __mapper_args__ = {"version_id_col": version}

    # Relationships
    user: Mapped["User"] = relationship(
        "User", back_populates="bookings", foreign_keys=[user_id]
    )

    @property
    def has_evidence(self) -> bool:
        """Whether a payment screenshot has been uploaded."""
        return bool(self.payment_screenshot)
