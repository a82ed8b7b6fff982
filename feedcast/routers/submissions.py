"""Form submission endpoints.

Provides:
- ``POST /api/submit``: validate, store, then broadcast the new post.
- ``GET /api/submissions``: list stored, non-expired submissions.
"""

from __future__ import annotations

import logging

import aiosqlite
from fastapi import APIRouter, Depends, Form, HTTPException

from feedcast.config import get_settings
from feedcast.dependencies import get_db, get_rooms
from feedcast.models import SubmissionAckResponse, SubmissionListResponse
from feedcast.services import broadcast_trigger, submission_service
from feedcast.services.room import RoomDirectory

logger = logging.getLogger(__name__)

router = APIRouter()


# ---------------------------------------------------------------------------
# POST /api/submit
# ---------------------------------------------------------------------------


@router.post("/submit", response_model=SubmissionAckResponse)
async def submit(
    name: str = Form(default=""),
    email: str = Form(default=""),
    message: str = Form(default=""),
    db: aiosqlite.Connection = Depends(get_db),
    rooms: RoomDirectory = Depends(get_rooms),
) -> SubmissionAckResponse:
    """Store a submission and push it to every connected feed.

    The broadcast is scheduled only after the write succeeds and runs in the
    background; its outcome never changes this response.
    """
    name, email, message = name.strip(), email.strip(), message.strip()
    try:
        submission_service.validate_submission(name, email, message)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    submission = await submission_service.create_submission(
        db, name=name, email=email, message=message
    )
    logger.info("Stored submission %s", submission["id"])

    broadcast_trigger.schedule_broadcast(rooms, get_settings().room_name, submission)

    return SubmissionAckResponse(id=submission["id"])


# ---------------------------------------------------------------------------
# GET /api/submissions
# ---------------------------------------------------------------------------


@router.get("/submissions", response_model=SubmissionListResponse)
async def list_submissions(
    db: aiosqlite.Connection = Depends(get_db),
) -> SubmissionListResponse:
    submissions = await submission_service.list_submissions(
        db, ttl_days=get_settings().submission_ttl_days
    )
    return SubmissionListResponse(count=len(submissions), submissions=submissions)
