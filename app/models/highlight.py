"""Highlight model."""

from datetime import datetime

from sqlalchemy import Column, DateTime, Float, String, Text

from app.database import Base


class HighlightRow(Base):
    """Time-ranged excerpt of a transcript saved by a user."""

    __tablename__ = "highlights"

    id = Column(String(36), primary_key=True)
    audio_content_id = Column(String(36), nullable=False, index=True)
    user_id = Column(String(36), nullable=False, index=True)
    text = Column(Text, nullable=False)
    start_time = Column(Float, nullable=False)
    end_time = Column(Float, nullable=False)
    color = Column(String(16), nullable=False, default="yellow")
    note = Column(Text, nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
