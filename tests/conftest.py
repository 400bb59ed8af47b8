"""
Shared test configuration and fixtures for the auth info store tests.

Provides database setup, session management, the secrets service and a store wired
against them. Tests run against a per-test SQLite database by default; set
TEST_DB_HOST to run them against PostgreSQL instead.
"""

import os
import uuid
import pytest
import pytest_asyncio
from cryptography.fernet import Fernet
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker

from social.graze.authinfo.database import Database
from social.graze.authinfo.encryption import FernetSecretsService
from social.graze.authinfo.model.base import Base
from social.graze.authinfo.model import user, user_auth  # noqa: F401
from social.graze.authinfo.store import AuthInfoStore
from social.graze.authinfo.users import SQLUserStore
from tests.test_helpers import FakeClock, MockMetricsClient, SpySecretsService


# PostgreSQL test database configuration
TEST_DB_HOST = os.getenv("TEST_DB_HOST", "")
TEST_DB_PORT = os.getenv("TEST_DB_PORT", "5432")
TEST_DB_USER = os.getenv("TEST_DB_USER", "postgres")
TEST_DB_PASSWORD = os.getenv("TEST_DB_PASSWORD", "password")

# Admin URL for database creation/deletion (connects to postgres database)
ADMIN_DATABASE_URL = f"postgresql+asyncpg://{TEST_DB_USER}:{TEST_DB_PASSWORD}@{TEST_DB_HOST}:{TEST_DB_PORT}/postgres"


async def check_postgres_available():
    """Check if PostgreSQL is available for testing."""
    try:
        admin_engine = create_async_engine(ADMIN_DATABASE_URL, echo=False)
        async with admin_engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        await admin_engine.dispose()
        return True
    except Exception:
        return False


@pytest_asyncio.fixture(scope="function")
async def test_database(tmp_path):
    """Create and clean up a test database for each test function."""
    if not TEST_DB_HOST:
        yield f"sqlite+aiosqlite:///{tmp_path / 'authinfo_test.db'}"
        return

    if not await check_postgres_available():
        pytest.skip("PostgreSQL database not available for testing")

    # Use a unique database name for each test to avoid conflicts
    unique_db_name = f"authinfo_test_{uuid.uuid4().hex[:8]}"
    unique_db_url = (
        f"postgresql+asyncpg://{TEST_DB_USER}:{TEST_DB_PASSWORD}@"
        f"{TEST_DB_HOST}:{TEST_DB_PORT}/{unique_db_name}"
    )

    admin_engine = create_async_engine(
        ADMIN_DATABASE_URL, echo=False, isolation_level="AUTOCOMMIT"
    )

    try:
        async with admin_engine.connect() as conn:
            await conn.execute(text(f"CREATE DATABASE {unique_db_name}"))

        yield unique_db_url

    finally:
        async with admin_engine.connect() as conn:
            await conn.execute(text(f"DROP DATABASE IF EXISTS {unique_db_name}"))
        await admin_engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def engine(test_database):
    """Create async SQLAlchemy engine with all tables created."""
    engine = create_async_engine(
        test_database,
        echo=False,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def session_maker(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture(scope="function")
async def session(session_maker):
    """Create async database session for direct inspection of tables."""
    async with session_maker() as session:
        yield session


@pytest.fixture
def database(session_maker, engine):
    return Database(session_maker, engine)


@pytest.fixture
def encryption_key():
    return Fernet.generate_key()


@pytest.fixture
def secrets_service(encryption_key):
    """Fernet secrets service wrapped in a spy that records every call."""
    return SpySecretsService(FernetSecretsService(encryption_key))


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def metrics_client():
    return MockMetricsClient()


@pytest.fixture
def store(database, secrets_service, clock, metrics_client):
    return AuthInfoStore(
        database,
        secrets_service,
        SQLUserStore(database),
        metrics_client=metrics_client,
        clock=clock,
    )
