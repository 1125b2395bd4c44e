"""
SubTrack Backend — Test Configuration (conftest.py)
====================================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy:
    Function-scoped (created fresh for each test):
    ├── mock_db_session: Mock async database session (no real DB needed)
    ├── user_id / other_user_id: Owner identities
    ├── make_subscription: Factory for unsaved Subscription rows
    ├── auth_headers: Bearer header with a valid access token
    └── test_client: HTTPX AsyncClient with the session and "today" overridden
"""

import os
import time
from datetime import date
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

# ══════════════════════════════════════════════════════════════════════════
# Environment Setup
# ══════════════════════════════════════════════════════════════════════════

# Must run before any subtrack import reads the settings
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///./test.db"
os.environ["AUTH_JWT_SECRET"] = "test-secret-not-real-0123456789abcdef"
os.environ["LOG_LEVEL"] = "WARNING"

import jwt  # noqa: E402
import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from subtrack.config import settings  # noqa: E402
from subtrack.models.subscription import Subscription  # noqa: E402

FIXED_TODAY = date(2026, 10, 19)


def make_token(sub: str, email: str = "user@example.com", **overrides) -> str:
    """Sign an access token the way the auth provider does."""
    claims = {
        "sub": sub,
        "email": email,
        "aud": settings.auth_jwt_audience,
        "role": "authenticated",
        "exp": int(time.time()) + 3600,
    }
    claims.update(overrides)
    return jwt.encode(claims, settings.auth_jwt_secret, algorithm=settings.auth_jwt_algorithm)


# ══════════════════════════════════════════════════════════════════════════
# Function-Scoped Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def mock_db_session():
    """
    Provides a mock async database session.

    Usage:
        result = MagicMock()
        result.scalar_one_or_none.return_value = subscription
        mock_db_session.execute.return_value = result
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.refresh = AsyncMock()
    session.delete = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    return session


@pytest.fixture
def user_id():
    return uuid4()


@pytest.fixture
def other_user_id():
    return uuid4()


@pytest.fixture
def make_subscription(user_id):
    """
    Factory for Subscription rows as the database would return them.

    Defaults describe a ₹499 monthly streaming plan billed on the 5th.
    """
    def _make(**overrides) -> Subscription:
        values = {
            "id": uuid4(),
            "user_id": user_id,
            "name": "Netflix",
            "amount": Decimal("499.00"),
            "actual_amount": Decimal("499.00"),
            "billing_frequency": "monthly",
            "start_date": date(2026, 1, 5),
            "billing_date": 5,
            "category": "Streaming",
            "reminder_days": 3,
            "is_shared": False,
            "total_amount": None,
            "shared_with": None,
        }
        values.update(overrides)
        return Subscription(**values)

    return _make


@pytest.fixture
def auth_headers(user_id):
    return {"Authorization": f"Bearer {make_token(str(user_id))}"}


@pytest_asyncio.fixture
async def test_client(mock_db_session):
    """
    Provides an async HTTP test client for endpoint testing.

    The database session is the mock_db_session fixture and "today" is
    pinned to FIXED_TODAY.
    """
    from subtrack.database import get_db_session
    from subtrack.dependencies import get_today
    from subtrack.main import app

    async def _session_override():
        yield mock_db_session

    app.dependency_overrides[get_db_session] = _session_override
    app.dependency_overrides[get_today] = lambda: FIXED_TODAY

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()
