"""Pydantic response models for the Feedcast REST API."""

from __future__ import annotations

from pydantic import BaseModel


class Submission(BaseModel):
    """A stored form submission, as pushed to the feed."""

    id: str
    name: str
    email: str
    message: str
    timestamp: str


class SubmissionAckResponse(BaseModel):
    """Response for ``POST /api/submit``."""

    success: bool = True
    id: str
    message: str = "Form submitted successfully"


class SubmissionListResponse(BaseModel):
    """Response for ``GET /api/submissions``."""

    success: bool = True
    count: int
    submissions: list[Submission]


class HealthResponse(BaseModel):
    """Response for ``GET /health``."""

    status: str
    uptime_seconds: float
    database: str
    rooms: dict[str, int]
