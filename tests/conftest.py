"""
B.I Booster Backend — Test Configuration (conftest.py)
========================================================

Shared pytest fixtures for the entire test suite.

Fixture Hierarchy (all function-scoped):
    ├── mock_db_session: AsyncMock session for pure service unit tests
    ├── temp_storage: Temporary directory for file operations
    ├── db_engine / session_factory: fresh in-memory SQLite schema per test
    ├── db_session: a session on that schema for seeding rows
    ├── test_client: HTTPX AsyncClient wired to the app and the test schema
    ├── admin_headers: X-Admin-Key header for admin/CMS endpoints
    └── create_member: async factory for verified, paying members + auth headers
"""

import os
import tempfile

# Override settings for testing BEFORE any bibooster imports
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["JWT_SECRET"] = "test-secret-key-for-bibooster-session-tokens"
os.environ["ADMIN_API_KEY"] = "test-admin-key"
os.environ["STORAGE_ROOT"] = tempfile.mkdtemp(prefix="bibooster_test_")
os.environ["PUBLIC_BASE_URL"] = "http://test"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["RATE_LIMIT_REQUESTS"] = "10000"
os.environ["RATE_LIMIT_FORM_REQUESTS"] = "10000"

from typing import Optional  # noqa: E402
from unittest.mock import AsyncMock, MagicMock  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool  # noqa: E402

import bibooster.models  # noqa: E402,F401
from bibooster.config import settings  # noqa: E402
from bibooster.database import Base, get_db_session  # noqa: E402
from bibooster.models.user import USER_STATUS_ACTIVE, User  # noqa: E402
from bibooster.security import create_session_token, hash_password  # noqa: E402


# ══════════════════════════════════════════════════════════════════════════
# Unit-test Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def mock_db_session():
    """
    Provides a mock async database session.

    Usage:
        async def test_lookup(mock_db_session):
            mock_db_session.execute.return_value.scalar_one_or_none.return_value = user
            result = await account_service.find_by_email(mock_db_session, "a@example.com")
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.get = AsyncMock()
    session.add = MagicMock()
    return session


@pytest.fixture
def temp_storage(tmp_path):
    storage_dir = tmp_path / "storage"
    storage_dir.mkdir()
    return str(storage_dir)


# ══════════════════════════════════════════════════════════════════════════
# Database Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def db_engine():
    """
    A fresh in-memory SQLite database with every table created.

    StaticPool keeps the single connection alive, so every session in the
    test sees the same database.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def test_client(session_factory):
    """
    HTTPX AsyncClient talking to the app over ASGITransport.

    get_db_session is overridden to hand out sessions on the test database,
    with the same commit/rollback behaviour as the real dependency.
    """
    from bibooster.main import app

    async def _override_db_session():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db_session] = _override_db_session
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


# ══════════════════════════════════════════════════════════════════════════
# Auth Helpers
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def admin_headers():
    return {"X-Admin-Key": settings.admin_api_key}


def auth_headers_for(user: User) -> dict:
    token = create_session_token(
        {
            "sub": str(user.id),
            "name": user.name,
            "email": user.email,
            "package_access": user.effective_tier,
        }
    )
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def create_member(session_factory):
    """
    Async factory: insert an active, verified, paying member.

    Usage:
        user, headers = await create_member(tier="medium")
        user, _ = await create_member(verified=True, paid=False)

    `paid` follows `verified` unless given.
    """
    counter = {"n": 0}

    async def _create(
        tier: str = "small",
        email: Optional[str] = None,
        password: str = "rahasia123",
        package_access: Optional[str] = None,
        verified: bool = True,
        paid: Optional[bool] = None,
    ):
        paid = verified if paid is None else paid
        counter["n"] += 1
        async with session_factory() as session:
            user = User(
                name=f"Member {counter['n']}",
                email=email or f"member{counter['n']}@example.com",
                phone="081234567890",
                password_hash=hash_password(password),
                status=USER_STATUS_ACTIVE if verified and paid else "pending",
                access_tier=tier,
                package_access=package_access,
                is_verified=verified,
                has_paid=paid,
            )
            session.add(user)
            await session.commit()
        return user, auth_headers_for(user)

    return _create
