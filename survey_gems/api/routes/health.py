from __future__ import annotations

import time
from typing import Any

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse
from sqlalchemy import text

from survey_gems.db.session import SessionLocal, engine

router = APIRouter(tags=["health"])


def _check_result(*, ok: bool, **fields: Any) -> dict[str, Any]:
    return {"status": "ok" if ok else "failed", **fields}


async def _check_database() -> dict[str, Any]:
    started = time.perf_counter()
    try:
        async with SessionLocal() as session:
            await session.execute(text("SELECT 1"))
    except Exception as exc:
        return _check_result(ok=False, error=str(exc))
    latency_ms = round((time.perf_counter() - started) * 1000, 2)
    return _check_result(ok=True, dialect=engine.dialect.name, latency_ms=latency_ms)


async def _probe(ok_label: str, failed_label: str) -> JSONResponse:
    checks = {"database": await _check_database()}
    healthy = all(check.get("status") == "ok" for check in checks.values())
    return JSONResponse(
        status_code=status.HTTP_200_OK if healthy else status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"status": ok_label if healthy else failed_label, "checks": checks},
    )


@router.get("/health")
async def health() -> JSONResponse:
    return await _probe("ok", "degraded")


@router.get("/ready")
async def ready() -> JSONResponse:
    return await _probe("ready", "not_ready")


@router.get("/live")
async def live() -> dict[str, str]:
    return {"status": "alive"}
