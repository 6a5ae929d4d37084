"""Transcript segment model."""

from sqlalchemy import Column, Float, Integer, String, Text

from app.database import Base


class TranscriptSegmentRow(Base):
    """Timestamped segment within a transcript."""

    __tablename__ = "transcript_segments"

    id = Column(String(36), primary_key=True)
    audio_content_id = Column(String(36), nullable=False, index=True)
    sequence_number = Column(Integer, nullable=False)
    start_time = Column(Float, nullable=False)
    end_time = Column(Float, nullable=False)
    text = Column(Text, nullable=False)
    confidence = Column(Integer, nullable=True)
