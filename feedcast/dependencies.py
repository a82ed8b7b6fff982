"""FastAPI dependency injection functions.

Provides:
- ``get_db(connection)``: The shared aiosqlite connection.
- ``get_rooms(connection)``: The process-wide ``RoomDirectory``.
- ``get_upgrade_router(connection)``: An ``UpgradeRouter`` for the configured room.
"""

from __future__ import annotations

import aiosqlite
from fastapi import Depends
from starlette.requests import HTTPConnection

from feedcast.config import get_settings
from feedcast.services.room import RoomDirectory
from feedcast.services.upgrade_router import UpgradeRouter


def get_db(connection: HTTPConnection) -> aiosqlite.Connection:
    """Return the connection opened in the lifespan (or patched in by tests)."""
    return connection.app.state.db


def get_rooms(connection: HTTPConnection) -> RoomDirectory:
    """Return the ``RoomDirectory`` created in the lifespan."""
    return connection.app.state.rooms


def get_upgrade_router(rooms: RoomDirectory = Depends(get_rooms)) -> UpgradeRouter:
    return UpgradeRouter(rooms, get_settings().room_name)
