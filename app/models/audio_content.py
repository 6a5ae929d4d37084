"""Audio content model."""

from datetime import datetime

from sqlalchemy import JSON, Column, DateTime, ForeignKey, Integer, String, Text

from app.database import Base


class AudioContentRow(Base):
    """Uploaded audio file and its transcription results."""

    __tablename__ = "audio_content"

    id = Column(String(36), primary_key=True)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    title = Column(Text, nullable=False)
    source = Column(Text, nullable=True)
    file_name = Column(String(512), nullable=False)
    file_path = Column(String(1024), nullable=False)
    file_size = Column(Integer, nullable=True)
    mime_type = Column(String(128), nullable=True)
    duration = Column(Integer, nullable=True)
    transcription_status = Column(String(32), nullable=False, default="pending")  # see TranscriptionStatus
    transcription_text = Column(Text, nullable=True)
    ai_summary = Column(Text, nullable=True)
    keywords = Column(JSON, nullable=False, default=list)
    summary_status = Column(String(32), nullable=True)
    summary_error = Column(Text, nullable=True)
    progress = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    last_accessed_at = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)
