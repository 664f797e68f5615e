from __future__ import annotations

import os
import tempfile
from pathlib import Path

_TEST_DB_PATH = Path(tempfile.mkdtemp(prefix="survey-gems-tests-")) / "survey_gems.sqlite3"

os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_TEST_DB_PATH}"
os.environ["INTERNAL_API_TOKEN"] = "test-internal-token"
os.environ["INTERNAL_API_ALLOWLIST"] = "127.0.0.1/32"
os.environ["ADMIN_EMAILS"] = "admin@example.com"
os.environ["ENABLE_OPENAPI_DOCS"] = "true"

import pytest  # noqa: E402

import survey_gems.db.models  # noqa: E402,F401
from survey_gems.db.models.base import Base  # noqa: E402
from survey_gems.db.session import engine  # noqa: E402


@pytest.fixture
async def db_schema():
    # Dispose pooled connections between tests; each test runs on its own event loop.
    await engine.dispose()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    yield
    await engine.dispose()
