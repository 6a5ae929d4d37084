"""Pydantic schemas for processing jobs."""

from datetime import datetime

from app.schemas.base import CamelModel
from app.services.jobs import JobState


class JobResponse(CamelModel):
    id: str
    content_id: str
    state: JobState
    error: str | None
    cancel_requested: bool
    created_at: datetime
    started_at: datetime | None
    finished_at: datetime | None
