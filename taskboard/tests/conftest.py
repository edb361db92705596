"""Async test fixtures for Taskboard tests using SQLite."""

from __future__ import annotations

from datetime import timedelta

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from taskboard.config import settings
from taskboard.database import get_db
from taskboard.models.base import Base, utcnow
from taskboard.models.enums import UserRole
from taskboard.models.user import User

TEST_SECRET = "test-signing-secret-with-enough-length"


@pytest.fixture(autouse=True)
def token_settings(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setattr(settings, "jwt_secret", TEST_SECRET)
    monkeypatch.setattr(settings, "jwt_issuer", "taskboard-tests")
    monkeypatch.setattr(settings, "jwt_audience", "taskboard-test-clients")
    monkeypatch.setattr(settings, "jwt_expiration_minutes", 60)
    monkeypatch.setattr(settings, "auth_required", False)
    monkeypatch.setattr(settings, "default_actor", "admin")
    return settings


@pytest.fixture
def now():
    return utcnow()


@pytest.fixture
def yesterday(now):
    return now - timedelta(days=1)


@pytest.fixture
def tomorrow(now):
    return now + timedelta(days=1)


@pytest_asyncio.fixture
async def engine():
    eng = create_async_engine("sqlite+aiosqlite:///:memory:", echo=False)
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield eng
    await eng.dispose()


@pytest_asyncio.fixture
async def db(engine):
    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def owner(db: AsyncSession) -> User:
    user = User(
        username="owner",
        email="owner@example.com",
        first_name="Olive",
        last_name="Owner",
        role=UserRole.Admin,
        is_active=True,
        created_at=utcnow(),
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


@pytest_asyncio.fixture
async def client(engine):
    """HTTPX async test client against the Taskboard app."""
    from taskboard.app import app

    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c

    app.dependency_overrides.clear()
