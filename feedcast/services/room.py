"""Room actor: the single point of mutation for one room's connections.

Every registry change and every broadcast for a room runs while holding that
room's lock, so at most one handler is in flight per room at a time. Lock
waiters are served in arrival order, which keeps back-to-back broadcasts in
the order they were issued.

Provides:
- ``RoomActor``: admit / remove / authenticate / broadcast / handle_upgrade.
- ``RoomDirectory``: lazily creates one ``RoomActor`` per room name.
"""

from __future__ import annotations

import asyncio
import json
import logging

from starlette.requests import HTTPConnection
from starlette.websockets import WebSocket

from feedcast.exceptions import AuthDecodeError, DeliveryError, ProtocolError
from feedcast.services import auth_token
from feedcast.services.connection_registry import (
    ConnectionEntry,
    ConnectionRegistry,
    ConnectionState,
)

logger = logging.getLogger(__name__)

DEFAULT_SEND_TIMEOUT: float = 2.0  # seconds allowed for one send inside a broadcast


class RoomActor:
    """Owns a ``ConnectionRegistry`` and serializes all access to it."""

    def __init__(self, name: str, *, send_timeout: float = DEFAULT_SEND_TIMEOUT) -> None:
        self.name = name
        self.send_timeout = send_timeout
        self._registry = ConnectionRegistry()
        self._lock = asyncio.Lock()

    @property
    def connection_count(self) -> int:
        return len(self._registry)

    def get(self, connection_id: str) -> ConnectionEntry | None:
        """Look up a live entry (read-only view for diagnostics and tests)."""
        return self._registry.get(connection_id)

    # -- Membership ---------------------------------------------------------

    async def admit(self, websocket: WebSocket, auth: str | None = None) -> ConnectionEntry:
        """Register an already-accepted *websocket* and return its entry.

        If *auth* is given it is decoded and the entry tagged with the user id;
        a bad token leaves the connection admitted and unauthenticated.
        """
        entry = ConnectionEntry(handle=websocket)
        async with self._lock:
            self._register(entry)

        if auth:
            await self.authenticate(entry.id, auth)
        return entry

    def _register(self, entry: ConnectionEntry) -> None:
        """Add *entry* to the registry. Caller must hold the room lock."""
        self._registry.register(entry)
        logger.info("Connection %s joined room %s, total: %d", entry.id, self.name, len(self._registry))

    async def remove(self, connection_id: str) -> bool:
        """Unregister *connection_id*. Safe to call more than once."""
        async with self._lock:
            removed = self._registry.unregister(connection_id)
            total = len(self._registry)
        if removed is not None:
            logger.info("Connection %s left room %s, total: %d", connection_id, self.name, total)
        return removed is not None

    async def authenticate(self, connection_id: str, token: str) -> str | None:
        """Tag *connection_id* with the user id carried by *token*.

        Returns the user id, or ``None`` when the token is malformed or the
        connection is no longer registered. Never closes the connection.
        """
        try:
            decoded = auth_token.decode_token(token)
        except AuthDecodeError as exc:
            logger.warning("Ignoring bad auth token on connection %s: %s", connection_id, exc)
            return None

        async with self._lock:
            entry = self._registry.get(connection_id)
            if entry is None:
                return None
            entry.auth_user_id = decoded.user_id

        logger.info("Authenticated connection %s for user %s", connection_id, decoded.user_id)
        return decoded.user_id

    # -- Inbound ------------------------------------------------------------

    async def handle_message(self, entry: ConnectionEntry, data: str | bytes | None) -> None:
        """Process one inbound frame. Only ``auth`` messages have an effect."""
        if data is None:
            return
        try:
            message = json.loads(data)
        except ValueError:
            logger.debug("Ignoring non-JSON frame on connection %s", entry.id)
            return

        if isinstance(message, dict) and message.get("type") == "auth" and message.get("token"):
            await self.authenticate(entry.id, message["token"])

    async def handle_upgrade(self, connection: HTTPConnection) -> None:
        """Complete the handshake, register the connection and serve it until it ends.

        Raises ``ProtocolError`` (before touching the registry) if
        *connection* is not a WebSocket upgrade. The entry is unregistered
        whether the connection closes cleanly or errors out.
        """
        if connection.scope.get("type") != "websocket":
            raise ProtocolError()

        websocket: WebSocket = connection  # type: ignore[assignment]
        entry = ConnectionEntry(handle=websocket)
        # Accept and register under one lock hold: any broadcast issued after
        # the client sees the handshake also sees this entry.
        async with self._lock:
            await websocket.accept()
            self._register(entry)

        try:
            while True:
                message = await websocket.receive()
                if message["type"] == "websocket.disconnect":
                    logger.info("WebSocket connection closed: %s", entry.id)
                    break
                await self.handle_message(entry, message.get("text") or message.get("bytes"))
        except Exception as exc:
            logger.error("WebSocket error on %s: %s", entry.id, exc)
        finally:
            await self.remove(entry.id)

    # -- Outbound -----------------------------------------------------------

    async def broadcast(self, event: dict) -> int:
        """Push *event* to every open connection and return the delivered count.

        The event is serialized once. Connections that are not open, whose
        send raises, or whose send exceeds ``send_timeout`` are pruned; the
        loop always continues to the remaining connections.
        """
        payload = json.dumps(event)
        delivered = 0

        async with self._lock:
            for entry in self._registry.snapshot():
                try:
                    await self._deliver(entry, payload)
                except DeliveryError as exc:
                    logger.warning("%s; pruning connection", exc)
                    await self._prune(entry)
                    continue
                delivered += 1

        logger.info("Broadcast %s to %d connected clients in room %s",
                    event.get("type"), delivered, self.name)
        return delivered

    async def _prune(self, entry: ConnectionEntry) -> None:
        """Unregister *entry* and close its socket so the client sees the drop and can reconnect.

        Caller must hold the room lock. Closing is best-effort and bounded by
        ``send_timeout``.
        """
        self._registry.unregister(entry.id)
        if entry.state is ConnectionState.CLOSED:
            return
        try:
            await asyncio.wait_for(entry.handle.close(code=1011), timeout=self.send_timeout)
        except Exception as exc:
            logger.debug("Closing pruned connection %s failed: %s", entry.id, exc)

    async def _deliver(self, entry: ConnectionEntry, payload: str) -> None:
        if not entry.is_open:
            raise DeliveryError(entry.id, f"connection is {entry.state.value}")
        try:
            await asyncio.wait_for(entry.handle.send_text(payload), timeout=self.send_timeout)
        except asyncio.TimeoutError as exc:
            raise DeliveryError(entry.id, f"send timed out after {self.send_timeout}s") from exc
        except Exception as exc:
            raise DeliveryError(entry.id, str(exc) or type(exc).__name__) from exc


class RoomDirectory:
    """Name -> ``RoomActor`` map. Rooms are created on first reference and never torn down."""

    def __init__(self, *, send_timeout: float = DEFAULT_SEND_TIMEOUT) -> None:
        self.send_timeout = send_timeout
        self._rooms: dict[str, RoomActor] = {}

    def get(self, name: str) -> RoomActor:
        room = self._rooms.get(name)
        if room is None:
            room = RoomActor(name, send_timeout=self.send_timeout)
            self._rooms[name] = room
            logger.info("Created room %s", name)
        return room

    def stats(self) -> dict[str, int]:
        """Return ``{room_name: connection_count}`` for every room created so far."""
        return {name: room.connection_count for name, room in self._rooms.items()}
