"""Database models."""

from app.models.admin import AuditLog
from app.models.booking import Booking
from app.models.destination import Destination
from app.models.user import User

__all__ = [
    # User
    "User",
    # Destination
    "Destination",
    # Booking
    "Booking",
    # Admin
    "AuditLog",
]
