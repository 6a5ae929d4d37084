"""Pydantic schemas for transcript endpoints."""

from app.schemas.base import CamelModel


class TranscriptSegmentResponse(CamelModel):
    id: str
    audio_content_id: str
    sequence_number: int
    start_time: float
    end_time: float
    text: str
    confidence: int | None
