#!/usr/bin/env python3
"""Create an admin user with properly hashed password."""

import asyncio
import logging

from sqlalchemy import func, select

from app.core.logging import configure_logging
from app.core.security import get_password_hash
from app.database import get_db_context
from app.models.user import User

logger = logging.getLogger("create_admin")


async def create_admin(
    email: str = "admin@gmail.com",
    password: str = "Admin12345",
    username: str = "admin",
) -> None:
    """Create an admin user, or promote and reset an existing one."""
    async with get_db_context() as session:
        result = await session.execute(
            select(User).where(func.lower(User.email) == email.lower())
        )
        existing = result.scalar_one_or_none()

        if existing:
            existing.password_hash = get_password_hash(password)
            existing.role = "admin"
            existing.is_suspended = False
            logger.info("Updated existing admin user: %s", email)
        else:
            session.add(
                User(
                    username=username,
                    email=email.lower(),
                    password_hash=get_password_hash(password),
                    role="admin",
                )
            )
            logger.info("Created admin user: %s", email)


if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(description="Create an admin user")
    parser.add_argument("--email", default="admin@gmail.com", help="Admin email")
    parser.add_argument("--password", default="Admin12345", help="Admin password")
    parser.add_argument("--username", default="admin", help="Display name")

    args = parser.parse_args()

    configure_logging()
    asyncio.run(
        create_admin(
            email=args.email,
            password=args.password,
            username=args.username,
        )
    )
