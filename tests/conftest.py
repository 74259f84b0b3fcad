"""
Ledger Engine - Test Configuration

Pytest fixtures and configuration.

Tests run against an in-memory SQLite database (aiosqlite) so no PostgreSQL
or Redis server is needed; the exchange-rate cache is switched off.
"""

import os

os.environ.setdefault("FX_RATE_CACHE_ENABLED", "false")
os.environ.setdefault("APP_ENV", "testing")

from typing import AsyncGenerator
from uuid import uuid4

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool

import ledger_engine.models  # noqa: F401
from ledger_engine.database import Base, get_async_session
from ledger_engine.services.accounting_service import AccountingService
from main import app


TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest_asyncio.fixture(scope="function")
async def test_engine():
    """Fresh in-memory database per test."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def db_session(test_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create a fresh database session for each test."""
    session_factory = async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest_asyncio.fixture(scope="function")
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Create a test client with database session override."""

    async def override_get_session():
        yield db_session

    app.dependency_overrides[get_async_session] = override_get_session

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


# ===========================================
# DATA FIXTURES
# ===========================================

@pytest.fixture
def tenant_id():
    return uuid4()


@pytest.fixture
def user_id():
    return uuid4()


@pytest.fixture
def headers(tenant_id, user_id):
    """Request headers identifying the tenant and acting user."""
    return {"X-Tenant-ID": str(tenant_id), "X-User-ID": str(user_id)}


@pytest_asyncio.fixture
async def chart(db_session: AsyncSession, tenant_id):
    """Default chart of accounts, keyed by account code."""
    accounts = await AccountingService(db_session).create_default_chart_of_accounts(tenant_id)
    return {account.account_code: account for account in accounts}
