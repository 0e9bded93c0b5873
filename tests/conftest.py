"""
Configuration for pytest.

This module provides fixtures and configuration for running tests.
"""

import os

os.environ.setdefault("ENVIRONMENT", "testing")

import pytest
from httpx import ASGITransport, AsyncClient
from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from household_budget.core.config import BudgetSettings
from household_budget.db.session import get_db
from household_budget.main import app
from household_budget.models import Base
from household_budget.services.budget import BudgetService

from fakes import FIXED_NOW, FakeLedger, InMemoryBudgetStore

# Test database URL
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest.fixture
def store() -> InMemoryBudgetStore:
    return InMemoryBudgetStore()


@pytest.fixture
def ledger() -> FakeLedger:
    return FakeLedger()


@pytest.fixture
def thresholds() -> BudgetSettings:
    return BudgetSettings()


@pytest.fixture
def service(store, ledger, thresholds) -> BudgetService:
    """Budget engine over in-memory collaborators with a fixed clock."""
    return BudgetService(store, ledger, thresholds=thresholds, clock=lambda: FIXED_NOW)


@pytest.fixture
def captured_logs():
    """Collect loguru records emitted during the test."""
    records = []
    handler_id = logger.add(lambda message: records.append(message.record), level="DEBUG")
    yield records
    logger.remove(handler_id)


@pytest.fixture
async def test_engine():
    """In-memory SQLite engine with all tables created."""
    engine = create_async_engine(TEST_DATABASE_URL, poolclass=StaticPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
async def db_session(test_engine):
    """Create a test database session."""
    session_factory = async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
async def async_client(db_session):
    """Create an async test client."""
    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
