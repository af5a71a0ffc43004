"""Tests for booking reference allocation."""

from datetime import UTC, datetime

import pytest

from app.utils.booking_reference import (
    backfill_booking_references,
    format_booking_reference,
    next_booking_reference,
    parse_booking_sequence,
)


def test_format_pads_sequence_to_five_digits():
    assert format_booking_reference(2025, 6) == "BOOK-2025-00006"
    assert format_booking_reference(2025, 1) == "BOOK-2025-00001"


def test_format_widens_past_99999():
    assert format_booking_reference(2025, 123456) == "BOOK-2025-123456"


@pytest.mark.parametrize(
    "reference, expected",
    [
        ("BOOK-2025-00005", 5),
        ("BOOK-2025-100000", 100000),
        ("BOOK-2025-abc", None),
        ("", None),
        (None, None),
    ],
)
def test_parse_booking_sequence(reference, expected):
    assert parse_booking_sequence(reference) == expected


async def test_first_reference_of_year(db):
    assert await next_booking_reference(db, 2025) == "BOOK-2025-00001"


async def test_next_reference_follows_highest_in_year(db, user, make_booking):
    await make_booking(user, "BOOK-2025-00005")
    await make_booking(user, "BOOK-2025-00002")
    await make_booking(user, "BOOK-2024-00099")

    assert await next_booking_reference(db, 2025) == "BOOK-2025-00006"
    assert await next_booking_reference(db, 2024) == "BOOK-2024-00100"
    assert await next_booking_reference(db, 2026) == "BOOK-2026-00001"


async def test_next_reference_keeps_numeric_order_past_99999(db, user, make_booking):
    await make_booking(user, "BOOK-2025-99999")
    await make_booking(user, "BOOK-2025-100000")

    assert await next_booking_reference(db, 2025) == "BOOK-2025-100001"


async def test_bookings_without_reference_are_ignored(db, user, make_booking):
    await make_booking(user, None)

    assert await next_booking_reference(db, 2025) == "BOOK-2025-00001"


async def test_malformed_references_are_skipped(db, user, make_booking):
    await make_booking(user, "BOOK-2025-00001")
    await make_booking(user, "BOOK-2025-X0001")
    await make_booking(user, "BOOK-2025-0000Z7")

    assert await next_booking_reference(db, 2025) == "BOOK-2025-00002"


async def test_default_year_is_current(db):
    year = datetime.now(UTC).year

    assert await next_booking_reference(db) == f"BOOK-{year}-00001"


async def test_backfill_numbers_per_creation_year(db, user, make_booking):
    await make_booking(user, "BOOK-2025-00003", created_at=datetime(2025, 1, 5, tzinfo=UTC))
    old = await make_booking(user, None, created_at=datetime(2024, 3, 1, tzinfo=UTC))
    first = await make_booking(user, None, created_at=datetime(2025, 2, 1, tzinfo=UTC))
    second = await make_booking(user, None, created_at=datetime(2025, 2, 2, tzinfo=UTC))

    assigned = dict(await backfill_booking_references(db))
    await db.commit()

    assert assigned == {
        str(old.id): "BOOK-2024-00001",
        str(first.id): "BOOK-2025-00004",
        str(second.id): "BOOK-2025-00005",
    }


async def test_backfill_with_nothing_to_do(db, user, make_booking):
    await make_booking(user, "BOOK-2025-00001")

    assert await backfill_booking_references(db) == []
