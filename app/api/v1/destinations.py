"""Destination endpoints."""

import logging
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_admin, get_db
from app.config import settings
from app.core.middleware import get_client_ip
from app.models.destination import Destination
from app.models.user import User
from app.schemas.destination import (
    DestinationCreate,
    DestinationDeleteResponse,
    DestinationResponse,
    DestinationUpdate,
)
from app.services.audit_service import audit_service
from app.services.destination_service import destination_service

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=list[DestinationResponse])
async def list_destinations(
    db: Annotated[AsyncSession, Depends(get_db)],
) -> list[Destination]:
    """List all destinations, seeding the default catalogue on first use."""
    if settings.seed_destinations:
        await destination_service.seed_defaults(db)
    return await destination_service.list_destinations(db)


@router.get("/by-name/{name}", response_model=DestinationResponse)
async def get_destination_by_name(
    name: str,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Destination:
    """Get a destination by name (case-insensitive)."""
    return await destination_service.get_by_name(db, name)


@router.get("/{destination_id}", response_model=DestinationResponse)
async def get_destination(
    destination_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Destination:
    """Get a destination by ID."""
    return await destination_service.get(db, destination_id)


@router.post("", response_model=DestinationResponse, status_code=status.HTTP_201_CREATED)
async def create_destination(
    destination_data: DestinationCreate,
    request: Request,
    admin: Annotated[User, Depends(get_current_admin)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Destination:
    """Create a destination."""
    await destination_service.ensure_unique_name(db, destination_data.name)

    destination = Destination(**destination_data.model_dump())
    await destination_service.save(db, destination)

    await audit_service.log_action(
        db,
        user_id=admin.id,
        action="destination_created",
        resource_type="destination",
        resource_id=destination.id,
        new_values=destination_data.model_dump(),
        ip_address=get_client_ip(request),
    )
    await db.flush()

    logger.info("Destination '%s' created by admin %s", destination.name, admin.id)
    return destination


@router.put("/{destination_id}", response_model=DestinationResponse)
async def update_destination(
    destination_id: UUID,
    updates: DestinationUpdate,
    request: Request,
    admin: Annotated[User, Depends(get_current_admin)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Destination:
    """Update a destination."""
    destination = await destination_service.get(db, destination_id)
    update_data = updates.model_dump(exclude_unset=True, exclude_none=True)

    if "name" in update_data:
        await destination_service.ensure_unique_name(db, update_data["name"], exclude_id=destination.id)

    old_values = {field: getattr(destination, field) for field in update_data}
    for field, value in update_data.items():
        setattr(destination, field, value)
    await destination_service.save(db, destination)

    await audit_service.log_action(
        db,
        user_id=admin.id,
        action="destination_updated",
        resource_type="destination",
        resource_id=destination.id,
        old_values=old_values,
        new_values=update_data,
        ip_address=get_client_ip(request),
    )
    await db.flush()

    return destination


@router.delete("/{destination_id}", response_model=DestinationDeleteResponse)
async def delete_destination(
    destination_id: UUID,
    request: Request,
    admin: Annotated[User, Depends(get_current_admin)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> DestinationDeleteResponse:
    """Delete a destination. Existing bookings keep their copy of the name."""
    destination = await destination_service.get(db, destination_id)
    name = destination.name

    await audit_service.log_action(
        db,
        user_id=admin.id,
        action="destination_deleted",
        resource_type="destination",
        resource_id=destination.id,
        old_values={"name": name, "price": destination.price},
        ip_address=get_client_ip(request),
    )
    await db.delete(destination)
    await db.flush()

    logger.info("Destination '%s' deleted by admin %s", name, admin.id)
    return DestinationDeleteResponse(
        message="Destination deleted successfully",
        deleted_destination=name,
    )
