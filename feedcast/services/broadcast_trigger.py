"""Best-effort fan-out of newly stored submissions.

Provides:
- ``dispatch_broadcast(rooms, room_name, submission)``: returns the broadcast
  result or raises ``BroadcastDispatchError``.
- ``broadcast_new_post(rooms, room_name, submission)``: same, but logs and
  swallows dispatch failures.
- ``schedule_broadcast(rooms, room_name, submission)``: runs
  ``broadcast_new_post`` as a background task.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from feedcast.exceptions import BroadcastDispatchError
from feedcast.services import ws_messages
from feedcast.services.room import RoomDirectory

logger = logging.getLogger(__name__)

# Strong references to in-flight broadcast tasks so they are not garbage
# collected before they finish.
_pending: set[asyncio.Task] = set()


async def dispatch_broadcast(rooms: RoomDirectory, room_name: str, submission: Any) -> dict:
    """Ask the room to push *submission* as a ``new_post`` event."""
    try:
        room = rooms.get(room_name)
        delivered = await room.broadcast(ws_messages.new_post(post=submission))
    except Exception as exc:
        raise BroadcastDispatchError(room_name, str(exc) or type(exc).__name__) from exc
    return ws_messages.broadcast_result(delivered=delivered)


async def broadcast_new_post(rooms: RoomDirectory, room_name: str, submission: Any) -> dict | None:
    """Broadcast *submission*; on failure log and return ``None``.

    The submission is already stored when this runs, so a failed
    notification never changes the outcome reported to the submitter.
    """
    try:
        result = await dispatch_broadcast(rooms, room_name, submission)
    except BroadcastDispatchError:
        logger.exception("Error broadcasting new post to room %s", room_name)
        return None
    logger.info("Broadcast result: %s", result)
    return result


def schedule_broadcast(rooms: RoomDirectory, room_name: str, submission: Any) -> asyncio.Task:
    """Fire-and-forget ``broadcast_new_post`` on the running loop.

    Tasks start in creation order, so broadcasts scheduled one after another
    reach the room (and every client) in that order.
    """
    task = asyncio.create_task(broadcast_new_post(rooms, room_name, submission))
    _pending.add(task)
    task.add_done_callback(_pending.discard)
    return task
