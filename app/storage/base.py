"""Storage contract for users, audio content, highlights and transcript segments."""

from abc import ABC, abstractmethod
from collections.abc import Iterable
from dataclasses import fields
from typing import Any

from app.storage.records import AudioContent, Highlight, NewTranscriptSegment, TranscriptSegment, User

AUDIO_CONTENT_FIELDS = frozenset(f.name for f in fields(AudioContent)) - {"id"}
HIGHLIGHT_FIELDS = frozenset(f.name for f in fields(Highlight)) - {"id"}


def check_update_fields(updates: dict[str, Any], allowed: frozenset[str]) -> None:
    """Raise ValueError for field names the record does not have."""
    unknown = set(updates) - allowed
    if unknown:
        raise ValueError(f"Unknown fields: {', '.join(sorted(unknown))}")


class ContentStore(ABC):
    """Key-value persistence for the four record kinds.

    Reads of an absent id return None and deletes return False; nothing here
    raises for a missing record. Updates merge the given fields into the
    stored record (last write wins).
    """

    # Users

    @abstractmethod
    def get_user(self, user_id: str) -> User | None: ...

    @abstractmethod
    def get_user_by_username(self, username: str) -> User | None: ...

    @abstractmethod
    def create_user(self, username: str, password: str) -> User: ...

    # Audio content

    @abstractmethod
    def get_audio_content(self, content_id: str) -> AudioContent | None: ...

    @abstractmethod
    def get_audio_content_by_user(self, user_id: str) -> list[AudioContent]:
        """All content for a user, most recently accessed first."""

    @abstractmethod
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
    ) -> AudioContent: ...

    @abstractmethod
    def update_audio_content(self, content_id: str, **updates: Any) -> AudioContent | None:
        """Merge fields into a record. Returns None if the record does not exist."""

    @abstractmethod
    def delete_audio_content(self, content_id: str) -> bool: ...

    @abstractmethod
    def search_audio_content(self, user_id: str, query: str) -> list[AudioContent]:
        """Case-insensitive substring match on title, source, transcript and summary."""

    # Highlights

    @abstractmethod
    def get_highlight(self, highlight_id: str) -> Highlight | None: ...

    @abstractmethod
    def get_highlights_by_audio_content(self, content_id: str) -> list[Highlight]:
        """Highlights of one item ordered by start time."""

    @abstractmethod
    def get_highlights_by_user(self, user_id: str) -> list[Highlight]:
        """Highlights of one user, newest first."""

    @abstractmethod
    def create_highlight(
        self,
        user_id: str,
        audio_content_id: str,
        text: str,
        start_time: float,
        end_time: float,
        color: str | None = None,
        note: str | None = None,
    ) -> Highlight: ...

    @abstractmethod
    def update_highlight(self, highlight_id: str, **updates: Any) -> Highlight | None: ...

    @abstractmethod
    def delete_highlight(self, highlight_id: str) -> bool: ...

    # Transcript segments

    @abstractmethod
    def get_transcript_segments(self, content_id: str) -> list[TranscriptSegment]:
        """Segments of one item ordered by sequence number."""

    @abstractmethod
    def create_transcript_segment(
        self,
        audio_content_id: str,
        start_time: float,
        end_time: float,
        text: str,
        sequence_number: int,
        confidence: int | None = None,
    ) -> TranscriptSegment: ...

    @abstractmethod
    def delete_transcript_segments(self, content_id: str) -> int:
        """Delete every segment of one item. Returns how many were removed."""

    def create_transcript_segments(
        self, content_id: str, segments: Iterable[NewTranscriptSegment]
    ) -> list[TranscriptSegment]:
        """Store segments in order, numbering them from zero."""
        return [
            self.create_transcript_segment(
                audio_content_id=content_id,
                start_time=seg.start_time,
                end_time=seg.end_time,
                text=seg.text,
                sequence_number=idx,
                confidence=seg.confidence,
            )
            for idx, seg in enumerate(segments)
        ]

    def delete_highlights_by_audio_content(self, content_id: str) -> int:
        """Delete every highlight of one item. Returns how many were removed."""
        removed = 0
        for highlight in self.get_highlights_by_audio_content(content_id):
            if self.delete_highlight(highlight.id):
                removed += 1
        return removed
