"""Domain exception classes for Feedcast.

These exceptions are raised by service-layer code. ``ProtocolError`` is
translated into an HTTP 426 response by the handler registered in
``main.py``; the others are caught and logged at the room or trigger
boundary and never reach a client.
"""

from __future__ import annotations


class ProtocolError(Exception):
    """Raised when a request to the realtime endpoint is not a WebSocket upgrade."""

    status_code = 426

    def __init__(self, message: str = "Expected Upgrade: websocket") -> None:
        super().__init__(message)
        self.message = message


class AuthDecodeError(Exception):
    """Raised when an auth token cannot be decoded."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class DeliveryError(Exception):
    """Raised when a push to a single connection fails or times out."""

    def __init__(self, connection_id: str, reason: str) -> None:
        super().__init__(f"Delivery to {connection_id} failed: {reason}")
        self.connection_id = connection_id
        self.reason = reason
        self.message = str(self)


class BroadcastDispatchError(Exception):
    """Raised when a broadcast cannot be handed to its room."""

    def __init__(self, room_name: str, reason: str) -> None:
        super().__init__(f"Broadcast to room {room_name!r} failed: {reason}")
        self.room_name = room_name
        self.reason = reason
        self.message = str(self)


class ConflictError(Exception):
    """Raised when an action conflicts with current state (e.g., duplicate connection id)."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message
