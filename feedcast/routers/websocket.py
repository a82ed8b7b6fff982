"""Realtime endpoint.

Provides:
- ``WS /ws``: joins the well-known room and stays registered until the socket ends.
- ``GET /ws``: plain HTTP hits on the realtime endpoint get 426.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request, WebSocket

from feedcast.dependencies import get_upgrade_router
from feedcast.services.upgrade_router import UpgradeRouter

router = APIRouter()


@router.websocket("/ws")
async def websocket_endpoint(
    websocket: WebSocket,
    upgrade_router: UpgradeRouter = Depends(get_upgrade_router),
) -> None:
    """Hand the socket to its room; returns when the connection closes or errors."""
    await upgrade_router.route(websocket)


@router.get("/ws")
async def websocket_http_fallback(
    request: Request,
    upgrade_router: UpgradeRouter = Depends(get_upgrade_router),
) -> None:
    """A plain HTTP request cannot be upgraded here; ``route`` raises ``ProtocolError``."""
    await upgrade_router.route(request)
