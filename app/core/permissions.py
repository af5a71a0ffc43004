"""Role-based access control and permissions."""

from enum import Enum
from typing import Any, Protocol
from uuid import UUID

from app.core.exceptions import AuthorizationError


class UserRole(str, Enum):
    """User roles in the system."""

    USER = "user"
    ADMIN = "admin"


class Permission(str, Enum):
    """System permissions."""

    # Booking permissions
    CREATE_BOOKING = "create_booking"
    VIEW_BOOKING = "view_booking"
    VIEW_ALL_BOOKINGS = "view_all_bookings"
    REVIEW_BOOKING = "review_booking"  # verify, reject, suspend
    REFUND_BOOKING = "refund_booking"
    DELETE_BOOKING = "delete_booking"
    UPLOAD_EVIDENCE = "upload_evidence"

    # Admin permissions
    MANAGE_DESTINATIONS = "manage_destinations"
    MANAGE_USERS = "manage_users"


# Role to permissions mapping
ROLE_PERMISSIONS: dict[UserRole, set[Permission]] = {
    UserRole.USER: {
        Permission.CREATE_BOOKING,
        Permission.VIEW_BOOKING,
        Permission.REFUND_BOOKING,
        Permission.DELETE_BOOKING,
        Permission.UPLOAD_EVIDENCE,
    },
    UserRole.ADMIN: {
        # Admins have all permissions
        perm for perm in Permission
    },
}

# Only the booking owner may perform these, whatever their role
OWNER_ONLY_PERMISSIONS = {Permission.REFUND_BOOKING, Permission.UPLOAD_EVIDENCE}

# Owners may perform these on their own bookings, admins on any booking
OWNER_OR_ADMIN_PERMISSIONS = {Permission.VIEW_BOOKING, Permission.DELETE_BOOKING}


class Actor(Protocol):
    """Identity produced by the authentication boundary."""

    id: UUID
    role: str
    is_suspended: bool


def has_permission(role: str | UserRole, permission: Permission) -> bool:
    """Check if a role has a specific permission."""
    try:
        user_role = UserRole(role)
    except ValueError:
        return False
    return permission in ROLE_PERMISSIONS.get(user_role, set())


def is_admin(actor: Actor) -> bool:
    return actor.role == UserRole.ADMIN.value


def authorize(actor: Actor, permission: Permission, resource: Any | None = None) -> None:
    """Single authorization check consulted by every mutating operation.

    Args:
        actor: Authenticated user
        permission: Permission being exercised
        resource: Booking being acted on, if any (must expose ``user_id``)

    Raises:
        AuthorizationError: If the actor may not perform the action
    """
    if getattr(actor, "is_suspended", False):
        raise AuthorizationError("Your account has been suspended by the administrator.")

    if not has_permission(actor.role, permission):
        raise AuthorizationError(f"Permission '{permission.value}' is required for this action")

    if resource is None:
        return

    is_owner = getattr(resource, "user_id", None) == actor.id

    if permission in OWNER_ONLY_PERMISSIONS and not is_owner:
        raise AuthorizationError("You can only perform this action on your own bookings")

    if permission in OWNER_OR_ADMIN_PERMISSIONS and not is_owner and not is_admin(actor):
        raise AuthorizationError("You don't have permission to access this booking")
