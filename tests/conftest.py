"""Shared fixtures: an isolated SQLite database per test and an API client."""

import base64
import os
from datetime import date
from io import BytesIO

# Settings are read at import time
os.environ["DATABASE_URL_OVERRIDE"] = "sqlite+aiosqlite://"
os.environ["ENVIRONMENT"] = "development"
os.environ["SENDGRID_API_KEY"] = ""
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")

import pytest
from httpx import ASGITransport, AsyncClient
from PIL import Image
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

import app.models  # noqa: F401
from app.core.security import create_user_token, get_password_hash
from app.database import Base, get_db
from app.main import app as fastapi_app
from app.models.booking import Booking
from app.models.user import User

DEFAULT_PASSWORD = "Password123"


@pytest.fixture
async def engine(tmp_path):
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        poolclass=NullPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
async def client(session_factory):
    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    fastapi_app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=fastapi_app), base_url="http://test") as ac:
        yield ac
    fastapi_app.dependency_overrides.clear()


async def _create_user(db: AsyncSession, email: str, role: str = "user", **overrides) -> User:
    user = User(
        username=overrides.pop("username", email.split("@")[0]),
        email=email,
        password_hash=get_password_hash(overrides.pop("password", DEFAULT_PASSWORD)),
        role=role,
        **overrides,
    )
    db.add(user)
    await db.commit()
    return user


@pytest.fixture
async def user(db):
    return await _create_user(db, "traveler@example.com")


@pytest.fixture
async def other_user(db):
    return await _create_user(db, "someone@example.com")


@pytest.fixture
async def admin(db):
    return await _create_user(db, "admin@example.com", role="admin")


@pytest.fixture
def create_user(db):
    async def _create(email: str, role: str = "user", **overrides) -> User:
        return await _create_user(db, email, role, **overrides)

    return _create


@pytest.fixture
def auth_headers():
    def _headers(user: User) -> dict[str, str]:
        return {"Authorization": f"Bearer {create_user_token(str(user.id), user.role)}"}

    return _headers


@pytest.fixture
def png_data_url() -> str:
    buffer = BytesIO()
    Image.new("RGB", (8, 8), color=(200, 30, 30)).save(buffer, format="PNG")
    return "data:image/png;base64," + base64.b64encode(buffer.getvalue()).decode("ascii")


@pytest.fixture
def booking_details() -> dict:
    """Two people to Hunza for three days at 5000 per person per day."""
    return {
        "traveler_name": "Ali Khan",
        "contact_email": "ali@example.com",
        "destination": "Hunza",
        "start_date": "2025-06-01",
        "end_date": "2025-06-04",
        "people": 2,
        "price_per_person": 5000,
    }


@pytest.fixture
def make_booking(db):
    """Insert a booking row directly, bypassing the service."""

    async def _make(owner: User, reference: str | None = None, **overrides) -> Booking:
        values = {
            "traveler_name": "Ali Khan",
            "contact_email": "ali@example.com",
            "destination": "Hunza",
            "start_date": date(2025, 6, 1),
            "end_date": date(2025, 6, 4),
            "duration": 3,
            "people": 2,
            "price_per_person": 5000,
            "total_amount": 30000,
            "verification_status": "pending",
        }
        values.update(overrides)
        booking = Booking(booking_reference=reference, user_id=owner.id, **values)
        db.add(booking)
        await db.commit()
        return booking

    return _make
