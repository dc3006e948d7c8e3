"""Shared fixtures for HTTP flow tests and tests requiring real PostgreSQL."""

import asyncio
import os
from typing import AsyncGenerator

import asyncpg
import pytest
import pytest_asyncio
from fastapi.testclient import TestClient
from loguru import logger

from hkapi.constants import Database as DatabaseConfig
from hkapi.core.config.settings import HKSettings
from hkapi.storage import PostgresDocumentStore
from web.app import create_app
from web.rate_limit import limiter

DOCUMENTS_DDL = """
    CREATE TABLE IF NOT EXISTS documents (
        collection TEXT NOT NULL,
        id TEXT NOT NULL,
        data JSONB NOT NULL DEFAULT '{}'::jsonb,
        created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
        updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
        PRIMARY KEY (collection, id)
    )
"""


def pytest_collection_modifyitems(config, items):
    """
    Automatically skip PostgreSQL tests if the database is unavailable.

    HTTP flow tests run against the in-memory store and are never skipped.
    """
    test_db_url = os.getenv("TEST_DATABASE_URL")

    if not test_db_url:
        reason = "TEST_DATABASE_URL not set - skipping PostgreSQL tests"
    else:

        async def check_db() -> bool:
            try:
                conn = await asyncio.wait_for(asyncpg.connect(test_db_url), timeout=5.0)
                await conn.close()
                return True
            except (OSError, asyncio.TimeoutError, asyncpg.PostgresError) as e:
                logger.warning(f"Database connection failed: {e}")
                return False

        if asyncio.run(check_db()):
            return
        reason = "PostgreSQL database is not available - skipping PostgreSQL tests"

    skip_postgres = pytest.mark.skip(reason=reason)
    for item in items:
        if "postgres" in item.keywords:
            item.add_marker(skip_postgres)


@pytest.fixture(autouse=True)
def reset_rate_limits():
    """Each test starts with empty rate limit counters."""
    limiter.reset()
    yield
    limiter.reset()


@pytest.fixture
def settings() -> HKSettings:
    return HKSettings()


@pytest.fixture
def app(store, mailer, clock, settings):
    return create_app(store=store, mailer=mailer, settings=settings, clock=clock)


@pytest.fixture
def client(app):
    """TestClient with the application lifespan running."""
    with TestClient(app) as test_client:
        yield test_client


@pytest_asyncio.fixture
async def pg_store() -> AsyncGenerator[PostgresDocumentStore, None]:
    """
    Provide a PostgreSQL document store on the test database.

    Creates the documents table if needed and empties it afterwards.
    """
    database_url = os.getenv("TEST_DATABASE_URL") or DatabaseConfig.TEST_URL
    store = PostgresDocumentStore(database_url, pool_size=2)
    await store.connect()
    async with store.pool.acquire() as conn:
        await conn.execute(DOCUMENTS_DDL)

    try:
        yield store
    finally:
        try:
            async with store.pool.acquire() as conn:
                await conn.execute("TRUNCATE TABLE documents")
        except asyncpg.PostgresError as e:
            logger.warning(f"Failed to truncate documents table: {e}")
        await store.close()
