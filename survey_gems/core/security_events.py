from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from survey_gems.db.repo.security_logs_repo import SecurityLogsRepo

USER_AGENT_MAX_LENGTH = 512


@dataclass(frozen=True, slots=True)
class RequestContext:
    ip_address: str | None = None
    user_agent: str | None = None


async def emit_security_event(
    session: AsyncSession,
    *,
    action: str,
    happened_at: datetime,
    user_id: str | None = None,
    details: dict[str, object] | None = None,
    context: RequestContext | None = None,
) -> None:
    resolved_context = context or RequestContext()
    user_agent = resolved_context.user_agent
    if user_agent is not None:
        user_agent = user_agent[:USER_AGENT_MAX_LENGTH]
    await SecurityLogsRepo.create(
        session,
        user_id=user_id,
        action=action,
        details=details or {},
        ip_address=resolved_context.ip_address,
        user_agent=user_agent,
        created_at=happened_at,
    )
