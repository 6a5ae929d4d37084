"""Pydantic schemas for audio content endpoints."""

from datetime import datetime

from pydantic import Field

from app.schemas.base import CamelModel
from app.storage.records import SummaryStatus, TranscriptionStatus


class AudioContentResponse(CamelModel):
    id: str
    user_id: str
    title: str
    source: str | None
    file_name: str
    file_size: int | None
    mime_type: str | None
    duration: int | None
    transcription_status: TranscriptionStatus
    transcription_text: str | None
    ai_summary: str | None
    keywords: list[str]
    summary_status: SummaryStatus | None
    summary_error: str | None
    progress: int
    created_at: datetime
    last_accessed_at: datetime


class ProgressUpdate(CamelModel):
    progress: int = Field(ge=0)


class KeyPointsResponse(CamelModel):
    key_points: list[str]
