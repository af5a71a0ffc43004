"""Booking lifecycle service.

Owns booking creation (reference allocation + insert), the verification
status transitions and their recorded effects, listing and deletion. The
service keeps no state between calls; everything lives in the database.
"""

import logging
import re
from collections.abc import Mapping
from datetime import UTC, date, datetime
from typing import Any
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError

from app.core.exceptions import (
    ConflictError,
    InvalidTransitionError,
    NotFoundError,
    ValidationError,
)
from app.core.permissions import Actor, Permission, authorize, has_permission, is_admin
from app.domain.verification_state import (
    VerificationStatus,
    assert_verification_transition,
    can_delete_booking,
)
from app.models.booking import Booking
from app.models.destination import Destination
from app.services.audit_service import audit_service
from app.services.evidence_service import EvidenceService, evidence_service
from app.utils.booking_reference import next_booking_reference

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

REQUIRED_TRIP_FACTS = (
    "traveler_name",
    "contact_email",
    "destination",
    "start_date",
    "end_date",
    "people",
)

DEFAULT_REFUND_REASON = "User requested refund"


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _parse_date(field: str, value: Any) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value).strip()[:10])
    except ValueError:
        raise ValidationError(f"{field} must be a date in YYYY-MM-DD format")


def _parse_positive_int(field: str, value: Any) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field} must be a whole number")
    if number < 1:
        raise ValidationError(f"{field} must be at least 1")
    return number


def calculate_duration(start_date: date, end_date: date) -> int:
    """Trip length in days; same-day trips count as one day."""
    return max(1, (end_date - start_date).days)


def calculate_total_amount(price_per_person: int, people: int, duration: int) -> int:
    """Total price: per person, per day, for the whole party."""
    return price_per_person * people * duration


class BookingService:
    """Booking lifecycle manager."""

    def __init__(self, evidence: EvidenceService | None = None) -> None:
        self.evidence = evidence or evidence_service

    # ==================== LOOKUPS ====================

    async def _load(self, db: AsyncSession, booking_id: UUID) -> Booking:
        result = await db.execute(select(Booking).where(Booking.id == booking_id))
        booking = result.scalar_one_or_none()
        if not booking:
            raise NotFoundError("Booking", str(booking_id))
        return booking

    async def _destination_price(self, db: AsyncSession, name: str) -> int | None:
        result = await db.execute(
            select(Destination.price).where(func.lower(Destination.name) == name.strip().lower())
        )
        return result.scalar_one_or_none()

    async def get_booking(self, db: AsyncSession, booking_id: UUID, actor: Actor) -> Booking:
        """Get a booking visible to the actor (owner or admin)."""
        booking = await self._load(db, booking_id)
        authorize(actor, Permission.VIEW_BOOKING, booking)
        return booking

    async def list_bookings(self, db: AsyncSession, actor: Actor) -> list[Booking]:
        """List bookings, most recent first.

        Admins see every booking; everyone else sees only their own.
        """
        query = select(Booking)
        if not has_permission(actor.role, Permission.VIEW_ALL_BOOKINGS):
            query = query.where(Booking.user_id == actor.id)
        query = query.order_by(Booking.created_at.desc(), Booking.booking_reference.desc())

        result = await db.execute(query)
        return list(result.scalars().all())

    async def list_own_bookings(self, db: AsyncSession, actor: Actor) -> list[Booking]:
        """List the actor's own bookings regardless of role."""
        result = await db.execute(
            select(Booking)
            .where(Booking.user_id == actor.id)
            .order_by(Booking.created_at.desc(), Booking.booking_reference.desc())
        )
        return list(result.scalars().all())

    # ==================== CREATION ====================

    async def validate_trip_facts(
        self, db: AsyncSession, details: Mapping[str, Any]
    ) -> dict[str, Any]:
        """Validate trip facts and derive duration and pricing.

        Raises:
            ValidationError: If a required fact is missing or malformed
        """
        missing = [field for field in REQUIRED_TRIP_FACTS if _is_blank(details.get(field))]
        if missing:
            raise ValidationError(
                f"Missing required trip details: {', '.join(missing)}",
                errors=[{"field": field, "message": "This field is required"} for field in missing],
            )

        contact_email = str(details["contact_email"]).strip()
        if not EMAIL_PATTERN.match(contact_email):
            raise ValidationError("Invalid email format")

        start_date = _parse_date("start_date", details["start_date"])
        end_date = _parse_date("end_date", details["end_date"])
        if end_date < start_date:
            raise ValidationError("End date cannot be before start date")

        people = _parse_positive_int("people", details["people"])
        destination = str(details["destination"]).strip()

        price = details.get("price_per_person")
        if _is_blank(price):
            price = await self._destination_price(db, destination)
            if price is None:
                raise ValidationError(f"Destination '{destination}' not found and no price was given")
        price_per_person = _parse_positive_int("price_per_person", price)

        duration = calculate_duration(start_date, end_date)
        return {
            "traveler_name": str(details["traveler_name"]).strip(),
            "contact_email": contact_email,
            "destination": destination,
            "start_date": start_date,
            "end_date": end_date,
            "duration": duration,
            "people": people,
            "price_per_person": price_per_person,
            "total_amount": calculate_total_amount(price_per_person, people, duration),
        }

    async def create_booking(
        self,
        db: AsyncSession,
        owner: Actor,
        details: Mapping[str, Any],
        evidence: str | None = None,
    ) -> Booking:
        """Create a pending booking with a freshly allocated reference.

        Allocation and insert form one unit. When another writer took the
        same reference first, nothing is persisted and ConflictError is
        raised so the caller can retry the whole unit.

        Raises:
            ValidationError: Missing or invalid trip facts or evidence
            ConflictError: Booking reference collision
            AuthorizationError: Suspended owner
        """
        authorize(owner, Permission.CREATE_BOOKING)

        facts = await self.validate_trip_facts(db, details)
        screenshot = self.evidence.validate(evidence)

        booking_reference = await next_booking_reference(db)
        booking = Booking(
            booking_reference=booking_reference,
            user_id=owner.id,
            payment_screenshot=screenshot,
            verification_status=VerificationStatus.PENDING.value,
            **facts,
        )

        try:
            async with db.begin_nested():
                db.add(booking)
        except IntegrityError:
            logger.warning("Booking reference conflict on %s", booking_reference)
            raise ConflictError("Booking ID conflict. Please try again.")

        logger.info(
            "Booking %s created for user %s (%s, %d people, %d days, total %d)",
            booking.booking_reference,
            owner.id,
            booking.destination,
            booking.people,
            booking.duration,
            booking.total_amount,
        )
        return booking

    async def attach_evidence(
        self,
        db: AsyncSession,
        booking_id: UUID,
        actor: Actor,
        evidence: str,
    ) -> Booking:
        """Upload or replace the payment screenshot of an unreviewed booking."""
        booking = await self._load(db, booking_id)
        authorize(actor, Permission.UPLOAD_EVIDENCE, booking)

        if booking.verification_status not in (
            VerificationStatus.PENDING.value,
            VerificationStatus.SUSPENDED.value,
        ):
            raise InvalidTransitionError(
                f"Cannot upload evidence for a {booking.verification_status} booking"
            )

        screenshot = self.evidence.validate(evidence)
        if screenshot is None:
            raise ValidationError("Please upload a payment screenshot or receipt")

        reference = booking.booking_reference
        booking.payment_screenshot = screenshot
        await self._flush(db, reference)
        logger.info("Evidence uploaded for booking %s", reference)
        return booking

    # ==================== TRANSITIONS ====================

    async def transition(
        self,
        db: AsyncSession,
        booking_id: UUID,
        requested_state: str,
        actor: Actor,
        reason: str | None = None,
    ) -> Booking:
        """Move a booking to a new verification status.

        Args:
            db: Database session
            booking_id: Booking to transition
            requested_state: Target status
            actor: User requesting the change
            reason: Rejection/suspension/refund reason, depending on target

        Raises:
            NotFoundError: Unknown booking
            AuthorizationError: Admin-only review or owner-only refund
            InvalidTransitionError: Not allowed from the current status
        """
        booking = await self._load(db, booking_id)

        if requested_state == VerificationStatus.REFUNDED.value:
            authorize(actor, Permission.REFUND_BOOKING, booking)
        else:
            authorize(actor, Permission.REVIEW_BOOKING, booking)

        current = booking.verification_status
        reference = booking.booking_reference
        assert_verification_transition(current, requested_state)

        if requested_state == VerificationStatus.VERIFIED.value and not booking.has_evidence:
            raise InvalidTransitionError(
                "Payment evidence is required before a booking can be verified"
            )
        if requested_state == VerificationStatus.REJECTED.value and _is_blank(reason):
            raise ValidationError("A rejection reason is required")

        now = datetime.now(UTC)
        reason = reason.strip() if reason else None

        if requested_state == VerificationStatus.REFUNDED.value:
            reason = reason or DEFAULT_REFUND_REASON
            booking.refunded_at = now
            booking.refunded_by = actor.id
            booking.refund_reason = reason
        else:
            booking.verified_by = actor.id
            booking.verified_at = now
            if requested_state == VerificationStatus.REJECTED.value:
                booking.rejection_reason = reason
            elif requested_state == VerificationStatus.SUSPENDED.value:
                booking.suspension_reason = reason

        booking.verification_status = requested_state

        await audit_service.log_booking_transition(
            db,
            user_id=actor.id,
            booking_id=booking.id,
            old_status=current,
            new_status=requested_state,
            reason=reason,
        )
        await self._flush(db, reference)

        logger.info(
            "Booking %s %s → %s by %s",
            reference,
            current,
            requested_state,
            actor.id,
        )
        return booking

    async def verify(
        self,
        db: AsyncSession,
        booking_id: UUID,
        actor: Actor,
        status: str,
        rejection_reason: str | None = None,
        suspension_reason: str | None = None,
    ) -> Booking:
        """Admin review: verify, reject or suspend a booking."""
        if status == VerificationStatus.REJECTED.value:
            reason = rejection_reason
        elif status == VerificationStatus.SUSPENDED.value:
            reason = suspension_reason
        else:
            reason = None
        return await self.transition(db, booking_id, status, actor, reason)

    async def request_refund(
        self,
        db: AsyncSession,
        booking_id: UUID,
        actor: Actor,
        reason: str | None = None,
    ) -> Booking:
        """Owner cancels a pending booking and asks for the money back."""
        return await self.transition(
            db, booking_id, VerificationStatus.REFUNDED.value, actor, reason
        )

    # ==================== DELETION ====================

    async def delete_booking(self, db: AsyncSession, booking_id: UUID, actor: Actor) -> Booking:
        """Hard-delete a booking.

        Refunded bookings are never deleted. Admins may delete any other
        booking; owners only their own pending bookings.
        """
        booking = await self._load(db, booking_id)
        authorize(actor, Permission.DELETE_BOOKING, booking)

        allowed, message = can_delete_booking(booking.verification_status)
        if not allowed:
            raise InvalidTransitionError(message)
        if not is_admin(actor) and booking.verification_status != VerificationStatus.PENDING.value:
            raise InvalidTransitionError(
                f"Cannot cancel a {booking.verification_status} booking. Only pending bookings can be cancelled."
            )

        await audit_service.log_action(
            db,
            user_id=actor.id,
            action="booking_deleted",
            resource_type="booking",
            resource_id=booking.id,
            old_values={
                "booking_reference": booking.booking_reference,
                "verification_status": booking.verification_status,
            },
        )
        reference = booking.booking_reference
        await db.delete(booking)
        await self._flush(db, reference)

        logger.info("Booking %s deleted by %s", reference, actor.id)
        return booking

    async def _flush(self, db: AsyncSession, reference: str | None) -> None:
        # A failed flush rolls the session back, so only plain values are safe here
        try:
            await db.flush()
        except StaleDataError:
            logger.warning("Concurrent update on booking %s", reference)
            raise ConflictError("Booking was modified by another request. Please reload and try again.")


booking_service = BookingService()
