"""Destination catalogue service."""

import logging
from typing import Any
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import ConflictError, NotFoundError
from app.models.destination import Destination

logger = logging.getLogger(__name__)

# Catalogue served to a fresh install; prices are PKR per person per day
DEFAULT_DESTINATIONS: tuple[dict[str, Any], ...] = (
    {"name": "Multan", "description": "City of Saints", "price": 1500, "image": "mulimg.jpg"},
    {"name": "Islamabad", "description": "Capital", "price": 1800, "image": "isbimg.jpg"},
    {"name": "Karachi", "description": "City by the sea", "price": 2000, "image": "karimg.jpg"},
    {"name": "Lahore", "description": "Heart of Pakistan", "price": 1700, "image": "lahimg.jpg"},
    {"name": "Peshawar", "description": "Historic city", "price": 1600, "image": "peimg.jpg"},
    {"name": "Quetta", "description": "Mountain city", "price": 1800, "image": "queimg.jpg"},
)


class DestinationService:
    """Lookup, seeding and uniqueness rules for destinations."""

    async def list_destinations(self, db: AsyncSession) -> list[Destination]:
        result = await db.execute(select(Destination).order_by(Destination.name))
        return list(result.scalars().all())

    async def seed_defaults(self, db: AsyncSession) -> int:
        """Insert the default catalogue when the table is empty.

        Returns:
            int: Number of destinations created
        """
        count = await db.scalar(select(func.count()).select_from(Destination))
        if count:
            return 0

        db.add_all(Destination(**data) for data in DEFAULT_DESTINATIONS)
        await db.flush()
        logger.info("Seeded %d default destinations", len(DEFAULT_DESTINATIONS))
        return len(DEFAULT_DESTINATIONS)

    async def get(self, db: AsyncSession, destination_id: UUID) -> Destination:
        result = await db.execute(select(Destination).where(Destination.id == destination_id))
        destination = result.scalar_one_or_none()
        if not destination:
            raise NotFoundError("Destination", str(destination_id))
        return destination

    async def get_by_name(self, db: AsyncSession, name: str) -> Destination:
        """Case-insensitive lookup by name."""
        result = await db.execute(
            select(Destination).where(func.lower(Destination.name) == name.strip().lower())
        )
        destination = result.scalar_one_or_none()
        if not destination:
            raise NotFoundError("Destination")
        return destination

    async def ensure_unique_name(
        self,
        db: AsyncSession,
        name: str,
        exclude_id: UUID | None = None,
    ) -> None:
        """Raise ConflictError if another destination already uses this name."""
        query = select(Destination.id).where(func.lower(Destination.name) == name.lower())
        if exclude_id is not None:
            query = query.where(Destination.id != exclude_id)
        if (await db.execute(query)).first():
            raise ConflictError("Destination with this name already exists")

    async def save(self, db: AsyncSession, destination: Destination) -> Destination:
        """Flush a new or changed destination, mapping name races to ConflictError."""
        try:
            async with db.begin_nested():
                db.add(destination)
        except IntegrityError:
            raise ConflictError("Destination with this name already exists")
        return destination


destination_service = DestinationService()
