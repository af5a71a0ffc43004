#!/usr/bin/env python3
"""Assign booking references to bookings created before references existed."""

import asyncio
import logging

from app.core.logging import configure_logging
from app.database import get_db_context
from app.utils.booking_reference import backfill_booking_references

logger = logging.getLogger("backfill_booking_references")


async def main() -> None:
    async with get_db_context() as session:
        assigned = await backfill_booking_references(session)

    if not assigned:
        logger.info("All bookings already have booking references")
        return

    for booking_id, reference in assigned:
        logger.info("Booking %s -> %s", booking_id, reference)
    logger.info("Updated %d bookings", len(assigned))


if __name__ == "__main__":
    configure_logging()
    asyncio.run(main())
