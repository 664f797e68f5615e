from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine

from survey_gems.core.config import get_settings


def _build_engine(database_url: str) -> AsyncEngine:
    if database_url.startswith("sqlite"):
        return create_async_engine(database_url, connect_args={"timeout": 30})
    return create_async_engine(database_url, pool_pre_ping=True)


engine = _build_engine(get_settings().database_url)

SessionLocal = async_sessionmaker(engine, expire_on_commit=False)
