"""Booking reference generation utilities."""

from datetime import UTC, datetime

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

REFERENCE_PREFIX = "BOOK"
SEQUENCE_WIDTH = 5


def reference_year_prefix(year: int) -> str:
    """Return the prefix shared by every reference issued in a year."""
    return f"{REFERENCE_PREFIX}-{year}-"


def format_booking_reference(year: int, sequence: int) -> str:
    """Format a booking reference.

    Args:
        year: Calendar year the booking is created in
        sequence: 1-based sequence number within the year

    Returns:
        str: Reference like 'BOOK-2025-00006'. Sequences above 99999
        widen the numeric field instead of wrapping.
    """
    return f"{reference_year_prefix(year)}{sequence:0{SEQUENCE_WIDTH}d}"


def parse_booking_sequence(reference: str | None) -> int | None:
    """Extract the numeric sequence from a booking reference.

    Returns:
        int | None: The sequence, or None if the reference is malformed
    """
    if not reference:
        return None
    suffix = reference.rsplit("-", 1)[-1]
    if not suffix.isdigit():
        return None
    return int(suffix)


async def get_last_booking_reference(db: AsyncSession, year: int) -> str | None:
    """Fetch the highest well-formed reference issued in a year.

    References whose suffix is not a number are skipped.
    """
    from app.models.booking import Booking

    # Longer suffixes sort first so references past 99999 keep numeric order
    result = await db.execute(
        select(Booking.booking_reference)
        .where(Booking.booking_reference.startswith(reference_year_prefix(year)))
        .order_by(
            func.length(Booking.booking_reference).desc(),
            Booking.booking_reference.desc(),
        )
    )
    for reference in result.scalars():
        if parse_booking_sequence(reference) is not None:
            return reference
    return None


async def next_booking_reference(db: AsyncSession, year: int | None = None) -> str:
    """Compute the next booking reference for a year.

    This is a read-then-write allocation: two concurrent callers can compute
    the same value. The unique constraint on ``bookings.booking_reference``
    rejects the second insert.

    Args:
        db: Database session
        year: Year to allocate in (defaults to the current UTC year)

    Returns:
        str: Next reference like 'BOOK-2025-00007'
    """
    if year is None:
        year = datetime.now(UTC).year

    last_reference = await get_last_booking_reference(db, year)
    last_sequence = parse_booking_sequence(last_reference)
    next_sequence = 1 if last_sequence is None else last_sequence + 1

    return format_booking_reference(year, next_sequence)


async def backfill_booking_references(db: AsyncSession) -> list[tuple[str, str]]:
    """Give every booking without a reference one from its creation year.

    Bookings are numbered oldest first, continuing after the highest
    reference already issued in that year.

    Returns:
        list[tuple[str, str]]: (booking id, assigned reference) pairs
    """
    from app.models.booking import Booking

    result = await db.execute(
        select(Booking)
        .where((Booking.booking_reference.is_(None)) | (Booking.booking_reference == ""))
        .order_by(Booking.created_at.asc())
    )
    bookings = list(result.scalars().all())

    next_sequences: dict[int, int] = {}
    assigned: list[tuple[str, str]] = []
    for booking in bookings:
        year = booking.created_at.year if booking.created_at else datetime.now(UTC).year
        if year not in next_sequences:
            last_sequence = parse_booking_sequence(await get_last_booking_reference(db, year))
            next_sequences[year] = (last_sequence or 0) + 1

        booking.booking_reference = format_booking_reference(year, next_sequences[year])
        next_sequences[year] += 1
        assigned.append((str(booking.id), booking.booking_reference))

    await db.flush()
    return assigned
