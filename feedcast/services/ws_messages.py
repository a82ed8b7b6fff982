"""WebSocket message factory functions.

Each function returns a plain dict with a ``type`` field plus data fields.
The room serializes the result once per broadcast and pushes the same text
frame to every open connection.
"""

from __future__ import annotations

from typing import Any


def new_post(*, post: Any) -> dict:
    """A new item was stored and should appear in every client's feed.

    The post payload is opaque here; it is forwarded exactly as given.
    """
    return {"type": "new_post", "post": post}


def broadcast_result(*, delivered: int) -> dict:
    """Outcome of one broadcast, reported back to the trigger."""
    return {"success": True, "broadcastCount": delivered}
