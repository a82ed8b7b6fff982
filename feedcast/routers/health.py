"""Health check endpoint -- no auth required."""

from __future__ import annotations

import time

from fastapi import APIRouter, Request

from feedcast.models import HealthResponse

router = APIRouter()

_start_time = time.monotonic()


@router.get("", response_model=HealthResponse)
async def health_check(request: Request) -> HealthResponse:
    """Return database status and per-room connection counts."""
    uptime = time.monotonic() - _start_time

    db_status = "ok"
    try:
        db = request.app.state.db
        await db.execute("SELECT 1")
    except Exception:
        db_status = "error"

    rooms = getattr(request.app.state, "rooms", None)

    return HealthResponse(
        status="ok" if db_status == "ok" else "degraded",
        uptime_seconds=round(uptime, 1),
        database=db_status,
        rooms=rooms.stats() if rooms is not None else {},
    )
