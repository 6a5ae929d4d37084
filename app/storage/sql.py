"""SQLAlchemy-backed content store."""

import logging
from datetime import datetime
from enum import Enum
from typing import Any

from sqlalchemy import delete, or_
from sqlalchemy.orm import sessionmaker

from app.database import Base
from app.models.audio_content import AudioContentRow
from app.models.highlight import HighlightRow
from app.models.transcript_segment import TranscriptSegmentRow
from app.models.user import UserRow
from app.storage.base import AUDIO_CONTENT_FIELDS, HIGHLIGHT_FIELDS, ContentStore, check_update_fields
from app.storage.records import (
    DEFAULT_HIGHLIGHT_COLOR,
    AudioContent,
    Highlight,
    SummaryStatus,
    TranscriptionStatus,
    TranscriptSegment,
    User,
    new_id,
)

logger = logging.getLogger("audiomind")


def _column_value(value: Any) -> Any:
    return value.value if isinstance(value, Enum) else value


def _to_user(row: UserRow) -> User:
    return User(id=row.id, username=row.username, password=row.password, created_at=row.created_at)


def _to_audio_content(row: AudioContentRow) -> AudioContent:
    return AudioContent(
        id=row.id,
        user_id=row.user_id,
        title=row.title,
        source=row.source,
        file_name=row.file_name,
        file_path=row.file_path,
        file_size=row.file_size,
        mime_type=row.mime_type,
        duration=row.duration,
        transcription_status=TranscriptionStatus(row.transcription_status),
        transcription_text=row.transcription_text,
        ai_summary=row.ai_summary,
        keywords=list(row.keywords or []),
        summary_status=SummaryStatus(row.summary_status) if row.summary_status else None,
        summary_error=row.summary_error,
        progress=row.progress,
        created_at=row.created_at,
        last_accessed_at=row.last_accessed_at,
    )


def _to_highlight(row: HighlightRow) -> Highlight:
    return Highlight(
        id=row.id,
        audio_content_id=row.audio_content_id,
        user_id=row.user_id,
        text=row.text,
        start_time=row.start_time,
        end_time=row.end_time,
        color=row.color,
        note=row.note,
        created_at=row.created_at,
    )


def _to_segment(row: TranscriptSegmentRow) -> TranscriptSegment:
    return TranscriptSegment(
        id=row.id,
        audio_content_id=row.audio_content_id,
        start_time=row.start_time,
        end_time=row.end_time,
        text=row.text,
        sequence_number=row.sequence_number,
        confidence=row.confidence,
    )


class SqlStore(ContentStore):
    """Store backed by a relational database. Each operation runs in its own session."""

    def __init__(self, session_factory: sessionmaker, create_tables: bool = True) -> None:
        self._session_factory = session_factory
        if create_tables:
            Base.metadata.create_all(bind=session_factory.kw["bind"])
            logger.info("Database tables ready")

    # Users

    def get_user(self, user_id: str) -> User | None:
        with self._session_factory() as db:
            row = db.get(UserRow, user_id)
            return _to_user(row) if row else None

    def get_user_by_username(self, username: str) -> User | None:
        with self._session_factory() as db:
            row = db.query(UserRow).filter(UserRow.username == username).first()
            return _to_user(row) if row else None

    def create_user(self, username: str, password: str) -> User:
        with self._session_factory() as db:
            row = UserRow(id=new_id(), username=username, password=password, created_at=datetime.utcnow())
            db.add(row)
            db.commit()
            return _to_user(row)

    # Audio content

    def get_audio_content(self, content_id: str) -> AudioContent | None:
        with self._session_factory() as db:
            row = db.get(AudioContentRow, content_id)
            return _to_audio_content(row) if row else None

    def get_audio_content_by_user(self, user_id: str) -> list[AudioContent]:
        with self._session_factory() as db:
            rows = (
                db.query(AudioContentRow)
                .filter(AudioContentRow.user_id == user_id)
                .order_by(AudioContentRow.last_accessed_at.desc(), AudioContentRow.created_at)
                .all()
            )
            return [_to_audio_content(r) for r in rows]

    def create_audio_content(
        self,
        user_id: str,
        title: str,
        file_name: str,
        file_path: str,
        source: str | None = None,
        file_size: int | None = None,
        mime_type: str | None = None,
        duration: int | None = None,
    ) -> AudioContent:
        # Build through the record so both backends share defaults
        record = AudioContent(
            id=new_id(),
            user_id=user_id,
            title=title,
            source=source,
            file_name=file_name,
            file_path=file_path,
            file_size=file_size,
            mime_type=mime_type,
            duration=duration,
        )
        record.last_accessed_at = record.created_at
        with self._session_factory() as db:
            row = AudioContentRow(
                id=record.id,
                user_id=record.user_id,
                title=record.title,
                source=record.source,
                file_name=record.file_name,
                file_path=record.file_path,
                file_size=record.file_size,
                mime_type=record.mime_type,
                duration=record.duration,
                transcription_status=record.transcription_status.value,
                keywords=[],
                progress=record.progress,
                created_at=record.created_at,
                last_accessed_at=record.last_accessed_at,
            )
            db.add(row)
            db.commit()
            return _to_audio_content(row)

    def update_audio_content(self, content_id: str, **updates: Any) -> AudioContent | None:
        check_update_fields(updates, AUDIO_CONTENT_FIELDS)
        with self._session_factory() as db:
            row = db.get(AudioContentRow, content_id)
            if row is None:
                return None
            for name, value in updates.items():
                if name == "keywords":
                    value = list(value or [])
                setattr(row, name, _column_value(value))
            db.commit()
            return _to_audio_content(row)

    def delete_audio_content(self, content_id: str) -> bool:
        with self._session_factory() as db:
            row = db.get(AudioContentRow, content_id)
            if row is None:
                return False
            db.delete(row)
            db.commit()
            return True

    def search_audio_content(self, user_id: str, query: str) -> list[AudioContent]:
        with self._session_factory() as db:
            rows = (
                db.query(AudioContentRow)
                .filter(
                    AudioContentRow.user_id == user_id,
                    or_(
                        AudioContentRow.title.icontains(query, autoescape=True),
                        AudioContentRow.source.icontains(query, autoescape=True),
                        AudioContentRow.transcription_text.icontains(query, autoescape=True),
                        AudioContentRow.ai_summary.icontains(query, autoescape=True),
                    ),
                )
                .order_by(AudioContentRow.created_at)
                .all()
            )
            return [_to_audio_content(r) for r in rows]

    # Highlights

    def get_highlight(self, highlight_id: str) -> Highlight | None:
        with self._session_factory() as db:
            row = db.get(HighlightRow, highlight_id)
            return _to_highlight(row) if row else None

    def get_highlights_by_audio_content(self, content_id: str) -> list[Highlight]:
        with self._session_factory() as db:
            rows = (
                db.query(HighlightRow)
                .filter(HighlightRow.audio_content_id == content_id)
                .order_by(HighlightRow.start_time, HighlightRow.created_at)
                .all()
            )
            return [_to_highlight(r) for r in rows]

    def get_highlights_by_user(self, user_id: str) -> list[Highlight]:
        with self._session_factory() as db:
            rows = (
                db.query(HighlightRow)
                .filter(HighlightRow.user_id == user_id)
                .order_by(HighlightRow.created_at.desc())
                .all()
            )
            return [_to_highlight(r) for r in rows]

    def create_highlight(
        self,
        user_id: str,
        audio_content_id: str,
        text: str,
        start_time: float,
        end_time: float,
        color: str | None = None,
        note: str | None = None,
    ) -> Highlight:
        with self._session_factory() as db:
            row = HighlightRow(
                id=new_id(),
                audio_content_id=audio_content_id,
                user_id=user_id,
                text=text,
                start_time=start_time,
                end_time=end_time,
                color=color or DEFAULT_HIGHLIGHT_COLOR,
                note=note or None,
                created_at=datetime.utcnow(),
            )
            db.add(row)
            db.commit()
            return _to_highlight(row)

    def update_highlight(self, highlight_id: str, **updates: Any) -> Highlight | None:
        check_update_fields(updates, HIGHLIGHT_FIELDS)
        with self._session_factory() as db:
            row = db.get(HighlightRow, highlight_id)
            if row is None:
                return None
            for name, value in updates.items():
                setattr(row, name, value)
            db.commit()
            return _to_highlight(row)

    def delete_highlight(self, highlight_id: str) -> bool:
        with self._session_factory() as db:
            row = db.get(HighlightRow, highlight_id)
            if row is None:
                return False
            db.delete(row)
            db.commit()
            return True

    def delete_highlights_by_audio_content(self, content_id: str) -> int:
        with self._session_factory() as db:
            result = db.execute(delete(HighlightRow).where(HighlightRow.audio_content_id == content_id))
            db.commit()
            return result.rowcount

    # Transcript segments

    def get_transcript_segments(self, content_id: str) -> list[TranscriptSegment]:
        with self._session_factory() as db:
            rows = (
                db.query(TranscriptSegmentRow)
                .filter(TranscriptSegmentRow.audio_content_id == content_id)
                .order_by(TranscriptSegmentRow.sequence_number)
                .all()
            )
            return [_to_segment(r) for r in rows]

    def create_transcript_segment(
        self,
        audio_content_id: str,
        start_time: float,
        end_time: float,
        text: str,
        sequence_number: int,
        confidence: int | None = None,
    ) -> TranscriptSegment:
        with self._session_factory() as db:
            row = TranscriptSegmentRow(
                id=new_id(),
                audio_content_id=audio_content_id,
                start_time=start_time,
                end_time=end_time,
                text=text,
                sequence_number=sequence_number,
                confidence=confidence,
            )
            db.add(row)
            db.commit()
            return _to_segment(row)

    def delete_transcript_segments(self, content_id: str) -> int:
        with self._session_factory() as db:
            result = db.execute(
                delete(TranscriptSegmentRow).where(TranscriptSegmentRow.audio_content_id == content_id)
            )
            db.commit()
            return result.rowcount
