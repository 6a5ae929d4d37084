"""In-memory content store."""

from dataclasses import replace
from typing import Any

from app.storage.base import AUDIO_CONTENT_FIELDS, HIGHLIGHT_FIELDS, ContentStore, check_update_fields
from app.storage.records import (
    DEFAULT_HIGHLIGHT_COLOR,
    AudioContent,
    Highlight,
    TranscriptSegment,
    User,
    new_id,
)


def _contains(value: str | None, needle: str) -> bool:
    return value is not None and needle in value.lower()


def _copy(record):
    """Detached copy, so callers cannot change stored state without an update."""
    if record is None:
        return None
    if isinstance(record, AudioContent):
        return replace(record, keywords=list(record.keywords))
    return replace(record)


class MemoryStore(ContentStore):
    """Dict-backed store. Queries are linear scans over insertion-ordered maps."""

    def __init__(self) -> None:
        self._users: dict[str, User] = {}
        self._audio_content: dict[str, AudioContent] = {}
        self._highlights: dict[str, Highlight] = {}
        self._segments: dict[str, TranscriptSegment] = {}

    # Users

    def get_user(self, user_id: str) -> User | None:
        return _copy(self._users.get(user_id))

    def get_user_by_username(self, username: str) -> User | None:
        return _copy(next((u for u in self._users.values() if u.username == username), None))

    def create_user(self, username: str, password: str) -> User:
        user = User(id=new_id(), username=username, password=password)
        self._users[user.id] = user
        return _copy(user)

    # Audio content

    def get_audio_content(self, content_id: str) -> AudioContent | None:
        return _copy(self._audio_content.get(content_id))

    def get_audio_content_by_user(self, user_id: str) -> list[AudioContent]:
        items = [_copy(c) for c in self._audio_content.values() if c.user_id == user_id]
        return sorted(items, key=lambda c: c.last_accessed_at, reverse=True)

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
        content = AudioContent(
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
        content.last_accessed_at = content.created_at
        self._audio_content[content.id] = content
        return _copy(content)

    def update_audio_content(self, content_id: str, **updates: Any) -> AudioContent | None:
        check_update_fields(updates, AUDIO_CONTENT_FIELDS)
        content = self._audio_content.get(content_id)
        if content is None:
            return None
        updated = _copy(replace(content, **updates))
        self._audio_content[content_id] = updated
        return _copy(updated)

    def delete_audio_content(self, content_id: str) -> bool:
        return self._audio_content.pop(content_id, None) is not None

    def search_audio_content(self, user_id: str, query: str) -> list[AudioContent]:
        needle = query.lower()
        return [
            _copy(c)
            for c in self._audio_content.values()
            if c.user_id == user_id
            and (
                _contains(c.title, needle)
                or _contains(c.source, needle)
                or _contains(c.transcription_text, needle)
                or _contains(c.ai_summary, needle)
            )
        ]

    # Highlights

    def get_highlight(self, highlight_id: str) -> Highlight | None:
        return _copy(self._highlights.get(highlight_id))

    def get_highlights_by_audio_content(self, content_id: str) -> list[Highlight]:
        items = [_copy(h) for h in self._highlights.values() if h.audio_content_id == content_id]
        return sorted(items, key=lambda h: h.start_time)

    def get_highlights_by_user(self, user_id: str) -> list[Highlight]:
        items = [_copy(h) for h in self._highlights.values() if h.user_id == user_id]
        return sorted(items, key=lambda h: h.created_at, reverse=True)

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
        highlight = Highlight(
            id=new_id(),
            audio_content_id=audio_content_id,
            user_id=user_id,
            text=text,
            start_time=start_time,
            end_time=end_time,
            color=color or DEFAULT_HIGHLIGHT_COLOR,
            note=note or None,
        )
        self._highlights[highlight.id] = highlight
        return _copy(highlight)

    def update_highlight(self, highlight_id: str, **updates: Any) -> Highlight | None:
        check_update_fields(updates, HIGHLIGHT_FIELDS)
        highlight = self._highlights.get(highlight_id)
        if highlight is None:
            return None
        updated = replace(highlight, **updates)
        self._highlights[highlight_id] = updated
        return _copy(updated)

    def delete_highlight(self, highlight_id: str) -> bool:
        return self._highlights.pop(highlight_id, None) is not None

    # Transcript segments

    def get_transcript_segments(self, content_id: str) -> list[TranscriptSegment]:
        items = [_copy(s) for s in self._segments.values() if s.audio_content_id == content_id]
        return sorted(items, key=lambda s: s.sequence_number)

    def create_transcript_segment(
        self,
        audio_content_id: str,
        start_time: float,
        end_time: float,
        text: str,
        sequence_number: int,
        confidence: int | None = None,
    ) -> TranscriptSegment:
        segment = TranscriptSegment(
            id=new_id(),
            audio_content_id=audio_content_id,
            start_time=start_time,
            end_time=end_time,
            text=text,
            sequence_number=sequence_number,
            confidence=confidence,
        )
        self._segments[segment.id] = segment
        return _copy(segment)

    def delete_transcript_segments(self, content_id: str) -> int:
        doomed = [sid for sid, s in self._segments.items() if s.audio_content_id == content_id]
        for sid in doomed:
            del self._segments[sid]
        return len(doomed)
