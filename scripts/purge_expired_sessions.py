from __future__ import annotations

import asyncio
from datetime import datetime, timezone

import structlog

from survey_gems.core.config import get_settings
from survey_gems.core.logging import configure_logging
from survey_gems.db.session import SessionLocal
from survey_gems.services.auth_sessions import AuthSessionService

logger = structlog.get_logger("scripts.purge_expired_sessions")


async def _run() -> int:
    now_utc = datetime.now(timezone.utc)
    async with SessionLocal.begin() as session:
        deleted = await AuthSessionService.purge_expired(session, now_utc=now_utc)
    logger.info("expired_sessions_purged", deleted=deleted)
    return 0


def main() -> int:
    configure_logging(get_settings().log_level)
    return asyncio.run(_run())


if __name__ == "__main__":
    raise SystemExit(main())
