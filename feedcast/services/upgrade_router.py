"""Maps inbound realtime requests to a room actor.

Today every connection joins the single well-known room; resolving the room
here keeps the door open for per-channel rooms without touching
``RoomActor``.
"""

from __future__ import annotations

from starlette.requests import HTTPConnection

from feedcast.exceptions import ProtocolError
from feedcast.services.room import RoomActor, RoomDirectory


def is_upgrade_request(connection: HTTPConnection) -> bool:
    """True for ASGI WebSocket scopes or HTTP requests carrying ``Upgrade: websocket``."""
    if connection.scope.get("type") == "websocket":
        return True
    return connection.headers.get("upgrade", "").strip().lower() == "websocket"


class UpgradeRouter:
    """Resolves the room for an upgrade request and hands the socket over."""

    def __init__(self, rooms: RoomDirectory, room_name: str) -> None:
        self.rooms = rooms
        self.room_name = room_name

    def resolve(self, connection: HTTPConnection | None = None) -> RoomActor:
        return self.rooms.get(self.room_name)

    async def route(self, connection: HTTPConnection) -> None:
        """Delegate *connection* to its room's ``handle_upgrade``.

        Raises ``ProtocolError`` if the request is not a WebSocket upgrade.
        """
        if not is_upgrade_request(connection):
            raise ProtocolError()
        room = self.resolve(connection)
        await room.handle_upgrade(connection)
