"""
Test configuration and fixtures.

Each test gets a fresh in-memory SQLite database (aiosqlite) shared by all
sessions through a StaticPool, and an httpx client bound to the ASGI app
with the database session and the "today" clock overridden.
"""

from datetime import date
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.api.deps import get_today_provider
from app.db.async_session import get_async_db
from app.db.base_class import Base
from app.main import app
from app.models import User, WeightEntry  # noqa: F401  (registers tables on Base)
from tests.utils_jwt import generate_test_jwt

TEST_TODAY = date(2025, 8, 1)


@pytest.fixture
def today() -> date:
    """Server date seen by the weight service. Override in a test module to move it."""
    return TEST_TODAY


@pytest_asyncio.fixture
async def async_engine():
    """Create an in-memory async engine with all tables."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(async_engine):
    return async_sessionmaker(bind=async_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def async_db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def test_user(session_factory) -> User:
    """A user born 1990-01-01."""
    async with session_factory() as session:
        user = User(name="Test User", email="testuser@example.com", date_of_birth=date(1990, 1, 1))
        session.add(user)
        await session.commit()
        await session.refresh(user)
        return user


@pytest.fixture
def auth_header(test_user):
    """Authorization header with a valid token for the test user."""
    token = generate_test_jwt(user_id=test_user.id, email=test_user.email)
    return {"Authorization": f"Bearer {token}"}


@pytest_asyncio.fixture
async def async_client(session_factory, today):
    """FastAPI client with the database session and clock overridden."""

    async def override_get_async_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_async_db] = override_get_async_db
    app.dependency_overrides[get_today_provider] = lambda: (lambda: today)

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    # Clear dependency overrides
    app.dependency_overrides = {}
