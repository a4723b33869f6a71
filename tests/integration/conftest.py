"""Integration-test fixtures.

Needs a migrated PostgreSQL behind DATABASE_URL; skipped unless
STAKEX_INTEGRATION=1. All integration tests share a single event loop so the
module-level SQLAlchemy async engine pool (created at import time) stays
valid across the whole session.
"""

import os

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from src.main import app


def pytest_collection_modifyitems(config, items) -> None:
    if os.environ.get("STAKEX_INTEGRATION") == "1":
        return
    skip = pytest.mark.skip(reason="set STAKEX_INTEGRATION=1 to run against PostgreSQL")
    for item in items:
        if "integration" in item.keywords:
            item.add_marker(skip)


@pytest_asyncio.fixture(loop_scope="session", scope="session")
async def client() -> AsyncClient:  # type: ignore[override]
    """Session-scoped async HTTP client; keeps the engine pool alive."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
