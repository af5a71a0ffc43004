"""Booking payment verification state machine.

States: pending → verified | rejected | suspended | refunded
        suspended → verified | rejected
verified, rejected and refunded are terminal.
"""

from enum import Enum

from app.core.exceptions import InvalidTransitionError


class VerificationStatus(str, Enum):
    """Verification status of a booking."""

    PENDING = "pending"
    VERIFIED = "verified"
    REJECTED = "rejected"
    SUSPENDED = "suspended"
    REFUNDED = "refunded"


VERIFICATION_TRANSITIONS: dict[str, set[str]] = {
    "pending": {"verified", "rejected", "suspended", "refunded"},
    "suspended": {"verified", "rejected"},
    "verified": set(),
    "rejected": set(),
    "refunded": set(),
}

TERMINAL_STATUSES = frozenset(
    status for status, targets in VERIFICATION_TRANSITIONS.items() if not targets
)


def assert_verification_transition(current: str, target: str) -> None:
    """Validate a verification status transition.

    Raises:
        InvalidTransitionError: If the transition is not allowed
    """
    allowed = VERIFICATION_TRANSITIONS.get(current, set())
    if target not in allowed:
        if current in TERMINAL_STATUSES:
            raise InvalidTransitionError(
                f"Cannot change a {current} booking: {current} → {target}"
            )
        raise InvalidTransitionError(
            f"Invalid verification transition: {current} → {target}"
        )


def can_delete_booking(status: str) -> tuple[bool, str | None]:
    """Check whether a booking in this status may be deleted."""
    if status == "refunded":
        return False, "Refunded bookings are kept until the refund has been processed"
    return True, None
