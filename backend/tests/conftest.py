"""Pytest configuration and fixtures."""

import os
import tempfile
from pathlib import Path

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

# Create a temporary directory for test paths
_test_tmp_dir = tempfile.mkdtemp(prefix="assettags_test_")

# Set config paths BEFORE importing app modules
os.environ["ASSETTAGS_CONFIG_PATH"] = _test_tmp_dir

from assettags.db import get_db  # noqa: E402
from assettags.db.base import Base  # noqa: E402
from assettags.main import app  # noqa: E402


@pytest.fixture
async def db_engine():
    """Create an in-memory test database engine."""
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
async def db_session(db_engine):
    """Create a test database session."""
    async_session = async_sessionmaker(
        db_engine, class_=AsyncSession, expire_on_commit=False
    )
    async with async_session() as session:
        yield session


@pytest.fixture
async def client(db_engine):
    """Create a test client with overridden database dependency."""
    async_session = async_sessionmaker(
        db_engine, class_=AsyncSession, expire_on_commit=False
    )

    async def override_get_db():
        async with async_session() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as client:
        yield client

    app.dependency_overrides.clear()


def pytest_sessionfinish(session, exitstatus):
    """Clean up temp directories after test session."""
    import shutil
    if Path(_test_tmp_dir).exists():
        shutil.rmtree(_test_tmp_dir, ignore_errors=True)
