"""Service test fixtures — handler collaborators as fakes, plus an async SQLite DB.

Invariants:
    - Every test gets a fresh in-memory SQLite database
    - Handler fixtures share one fake repository/sink per test
    - get_db overridden for the API client; db_manager patched for readiness
    - API client sends the wildcard test key unless a test overrides the header

Design Decisions:
    - SQLite in-memory: fast, no external dependency, sufficient for repository tests
"""

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (
    AsyncSession, create_async_engine, async_sessionmaker,
)

from transfer_service.core.domain_types import Currency
from transfer_service.db.base import Base
import transfer_service.models  # noqa: F401
import transfer_service.infrastructure.database as db_module
from transfer_service.infrastructure.database import DatabaseSessionManager, get_db
from transfer_service.main import app
from tests.services.fakes import (
    FixedRateConverter, InMemoryTransferRepository, RecordingEventSink,
    StaticAuthorizer,
)


@pytest.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:", echo=False,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def test_session_factory(test_engine):
    return async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False,
    )


@pytest.fixture
async def test_db(test_session_factory):
    async with test_session_factory() as session:
        yield session


@pytest.fixture
def repository():
    return InMemoryTransferRepository()


@pytest.fixture
def sink():
    return RecordingEventSink()


@pytest.fixture
def authorizer():
    return StaticAuthorizer()


@pytest.fixture
def converter():
    return FixedRateConverter({(Currency.USD, Currency.EUR): "0.9"})


@pytest.fixture
async def client(test_engine, test_session_factory):
    """FastAPI test client with DB dependency overridden."""
    async def override_get_db():
        async with test_session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db

    # Patch db_manager for the readiness probe
    original_manager = db_module.db_manager
    fake_manager = DatabaseSessionManager.__new__(DatabaseSessionManager)
    fake_manager.engine = test_engine
    fake_manager._session_factory = test_session_factory
    db_module.db_manager = fake_manager

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
        headers={"X-Api-Key": "test-key"},
    ) as c:
        yield c

    app.dependency_overrides.clear()
    db_module.db_manager = original_manager
