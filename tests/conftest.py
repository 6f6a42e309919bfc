"""
Pytest Configuration and Fixtures

Shared test fixtures for unit, integration and API tests.

Tests run against an in-memory SQLite database unless TEST_DATABASE_URL
points at a PostgreSQL instance.
"""

import os

# Must be set before the application (and its engine) is imported
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")

from collections.abc import Callable  # noqa: E402
from datetime import UTC, datetime, timedelta  # noqa: E402
from uuid import UUID  # noqa: E402

import jwt  # noqa: E402
import pytest  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.orm import configure_mappers  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from disciplinetracker.config import settings  # noqa: E402
from disciplinetracker.core.models import Base, StaffUser, Student  # noqa: E402

# Ensure all mappers are configured
configure_mappers()

TEST_DATABASE_URL = os.getenv("TEST_DATABASE_URL", "sqlite+aiosqlite://")
TEST_JWT_SECRET = "test-secret-for-discipline-tracker"


@pytest.fixture
async def async_engine():
    """Create async engine for testing."""
    kwargs: dict = {"echo": False}
    if TEST_DATABASE_URL.startswith("sqlite"):
        # One shared connection so every session sees the same in-memory DB
        kwargs.update(poolclass=StaticPool, connect_args={"check_same_thread": False})

    engine = create_async_engine(TEST_DATABASE_URL, **kwargs)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
async def db_session(async_engine) -> AsyncSession:
    """Create database session for testing."""
    session_factory = async_sessionmaker(async_engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session


@pytest.fixture
async def staff_user(db_session: AsyncSession) -> StaffUser:
    """The signed-in staff member."""
    user = StaffUser(email="ms.appiah@school.test", full_name="Ms. Appiah")
    db_session.add(user)
    await db_session.commit()
    return user


@pytest.fixture
async def other_staff(db_session: AsyncSession) -> StaffUser:
    """A second staff member, used to attempt impersonation."""
    user = StaffUser(email="mr.boateng@school.test", full_name="Mr. Boateng")
    db_session.add(user)
    await db_session.commit()
    return user


@pytest.fixture
async def student(db_session: AsyncSession) -> Student:
    """A provisioned student."""
    alice = Student(student_id="STU-1001", name="Alice Mensah", class_name="8", section="B")
    db_session.add(alice)
    await db_session.commit()
    return alice


@pytest.fixture
async def second_student(db_session: AsyncSession) -> Student:
    """Another provisioned student."""
    kofi = Student(student_id="STU-1002", name="Kofi Asante", class_name="7", section="A")
    db_session.add(kofi)
    await db_session.commit()
    return kofi


@pytest.fixture
def jwt_secret(monkeypatch: pytest.MonkeyPatch) -> str:
    """Configure the token signing secret for the duration of a test."""
    monkeypatch.setattr(settings, "AUTH_JWT_SECRET", TEST_JWT_SECRET)
    return TEST_JWT_SECRET


@pytest.fixture
def make_token(jwt_secret: str) -> Callable[..., str]:
    """Build signed access tokens the way the identity provider does."""

    def _make(actor_id: UUID | str, *, expires_in: int = 3600, **claims) -> str:
        payload = {
            "sub": str(actor_id),
            "aud": settings.AUTH_JWT_AUDIENCE,
            "exp": datetime.now(UTC) + timedelta(seconds=expires_in),
            **claims,
        }
        return jwt.encode(payload, jwt_secret, algorithm="HS256")

    return _make
