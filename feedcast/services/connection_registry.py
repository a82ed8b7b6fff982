"""Per-room registry of live WebSocket connections.

Maps connection ids to ``ConnectionEntry`` records. The registry itself does
no locking: it is owned by exactly one ``RoomActor``, which serializes every
call into it.
"""

from __future__ import annotations

import enum
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timezone
from uuid import uuid4

from starlette.websockets import WebSocket, WebSocketState

from feedcast.exceptions import ConflictError


class ConnectionState(str, enum.Enum):
    """Lifecycle of one connection as seen by the room."""

    CONNECTING = "connecting"
    OPEN = "open"
    CLOSING = "closing"
    CLOSED = "closed"
    ERRORED = "errored"


def new_connection_id() -> str:
    """Return a fresh, process-unique connection id."""
    return str(uuid4())


def handle_state(websocket: WebSocket) -> ConnectionState:
    """Map Starlette's two-sided socket state onto ``ConnectionState``."""
    client = websocket.client_state
    application = websocket.application_state
    if client == WebSocketState.CONNECTED and application == WebSocketState.CONNECTED:
        return ConnectionState.OPEN
    if client == WebSocketState.CONNECTING or application == WebSocketState.CONNECTING:
        return ConnectionState.CONNECTING
    if client == WebSocketState.DISCONNECTED and application == WebSocketState.DISCONNECTED:
        return ConnectionState.CLOSED
    return ConnectionState.CLOSING


@dataclass
class ConnectionEntry:
    """The registry's record for one live connection."""

    handle: WebSocket
    id: str = field(default_factory=new_connection_id)
    auth_user_id: str | None = None
    connected_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def state(self) -> ConnectionState:
        return handle_state(self.handle)

    @property
    def is_open(self) -> bool:
        return self.state is ConnectionState.OPEN


class ConnectionRegistry:
    """Connection id -> ``ConnectionEntry`` mapping for a single room."""

    def __init__(self) -> None:
        self._entries: dict[str, ConnectionEntry] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, connection_id: object) -> bool:
        return connection_id in self._entries

    def register(self, entry: ConnectionEntry) -> None:
        """Add *entry* keyed by its id.

        Raises ``ConflictError`` if an entry with the same id is already live.
        """
        if entry.id in self._entries:
            raise ConflictError(f"Connection {entry.id} is already registered")
        self._entries[entry.id] = entry

    def unregister(self, connection_id: str) -> ConnectionEntry | None:
        """Remove the entry for *connection_id*.

        Idempotent: returns the removed entry, or ``None`` if it was not tracked.
        """
        return self._entries.pop(connection_id, None)

    def get(self, connection_id: str) -> ConnectionEntry | None:
        return self._entries.get(connection_id)

    def snapshot(self) -> list[ConnectionEntry]:
        """Return a copy of the current entries, safe to iterate while mutating."""
        return list(self._entries.values())

    def for_each(self, fn: Callable[[ConnectionEntry], None]) -> None:
        """Apply *fn* to every entry; *fn* may register or unregister entries."""
        for entry in self.snapshot():
            fn(entry)
