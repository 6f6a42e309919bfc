"""
API test fixtures: an HTTP client wired to the test database session.
"""

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from disciplinetracker.core.database import get_db
from disciplinetracker.core.models import StaffUser
from disciplinetracker.main import app


@pytest.fixture
async def client(db_session: AsyncSession) -> AsyncClient:
    """Create test client with database dependency override."""

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers(staff_user: StaffUser, make_token) -> dict[str, str]:
    """Authorization header for the signed-in staff member."""
    return {"Authorization": f"Bearer {make_token(staff_user.id)}"}
