"""Tests for the booking verification state machine."""

import pytest

from app.core.exceptions import InvalidTransitionError
from app.domain.verification_state import (
    TERMINAL_STATUSES,
    VERIFICATION_TRANSITIONS,
    assert_verification_transition,
    can_delete_booking,
)

ALL_STATUSES = ["pending", "verified", "rejected", "suspended", "refunded"]


@pytest.mark.parametrize(
    "current, target",
    [
        ("pending", "verified"),
        ("pending", "rejected"),
        ("pending", "suspended"),
        ("pending", "refunded"),
        ("suspended", "verified"),
        ("suspended", "rejected"),
    ],
)
def test_allowed_transitions(current, target):
    assert_verification_transition(current, target)


@pytest.mark.parametrize(
    "current, target",
    [
        ("suspended", "refunded"),
        ("suspended", "suspended"),
        ("pending", "pending"),
        ("suspended", "pending"),
    ],
)
def test_disallowed_transitions(current, target):
    with pytest.raises(InvalidTransitionError):
        assert_verification_transition(current, target)


@pytest.mark.parametrize("current", ["verified", "rejected", "refunded"])
@pytest.mark.parametrize("target", ALL_STATUSES)
def test_terminal_statuses_never_change(current, target):
    with pytest.raises(InvalidTransitionError) as exc_info:
        assert_verification_transition(current, target)
    assert f"Cannot change a {current} booking" in exc_info.value.detail


def test_unknown_status_rejected():
    with pytest.raises(InvalidTransitionError):
        assert_verification_transition("archived", "verified")


def test_terminal_statuses():
    assert TERMINAL_STATUSES == {"verified", "rejected", "refunded"}
    assert set(VERIFICATION_TRANSITIONS) == set(ALL_STATUSES)


def test_refunded_bookings_cannot_be_deleted():
    allowed, message = can_delete_booking("refunded")
    assert allowed is False
    assert message


@pytest.mark.parametrize("status", ["pending", "verified", "rejected", "suspended"])
def test_other_bookings_can_be_deleted(status):
    assert can_delete_booking(status) == (True, None)
