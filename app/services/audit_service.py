"""Audit trail service."""

from typing import Any
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.models.admin import AuditLog


class AuditService:
    """Service for append-only audit logging."""

    async def log_action(
        self,
        db: AsyncSession,
        user_id: UUID | None,
        action: str,
        resource_type: str,
        resource_id: UUID | None,
        old_values: dict[str, Any] | None = None,
        new_values: dict[str, Any] | None = None,
        ip_address: str | None = None,
    ) -> AuditLog:
        """Log an action.

        Args:
            db: Database session
            user_id: User performing the action
            action: Action name (e.g., "booking_verified")
            resource_type: Resource type (e.g., "booking", "destination")
            resource_id: Resource ID
            old_values: Previous state
            new_values: New state
            ip_address: Client IP

        Returns:
            Created audit log entry
        """
        audit = AuditLog(
            user_id=user_id,
            action=action,
            resource_type=resource_type,
            resource_id=resource_id,
            old_values=old_values,
            new_values=new_values,
            ip_address=ip_address,
        )
        db.add(audit)
        return audit

    async def log_booking_transition(
        self,
        db: AsyncSession,
        user_id: UUID,
        booking_id: UUID,
        old_status: str,
        new_status: str,
        reason: str | None = None,
    ) -> AuditLog:
        """Log a booking verification status change."""
        new_values: dict[str, Any] = {"verification_status": new_status}
        if reason:
            new_values["reason"] = reason

        return await self.log_action(
            db=db,
            user_id=user_id,
            action=f"booking_{new_status}",
            resource_type="booking",
            resource_id=booking_id,
            old_values={"verification_status": old_status},
            new_values=new_values,
        )


audit_service = AuditService()
