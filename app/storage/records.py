"""Plain record types shared by every store backend."""

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class TranscriptionStatus(str, Enum):
    """Lifecycle of an audio item's speech-to-text processing."""

    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    ERROR = "error"


class SummaryStatus(str, Enum):
    PROCESSING = "processing"
    COMPLETED = "completed"
    ERROR = "error"


ALLOWED_TRANSITIONS: dict[TranscriptionStatus, set[TranscriptionStatus]] = {
    TranscriptionStatus.PENDING: {TranscriptionStatus.PROCESSING, TranscriptionStatus.ERROR},
    TranscriptionStatus.PROCESSING: {TranscriptionStatus.COMPLETED, TranscriptionStatus.ERROR},
    TranscriptionStatus.COMPLETED: set(),
    TranscriptionStatus.ERROR: set(),
}

HIGHLIGHT_COLORS = ("yellow", "blue", "green", "purple")
DEFAULT_HIGHLIGHT_COLOR = "yellow"


class InvalidStatusTransition(Exception):
    """Raised when a transcription status change would leave a terminal state or skip a step."""

    def __init__(self, current: TranscriptionStatus, target: TranscriptionStatus) -> None:
        super().__init__(f"Cannot move transcription status from '{current.value}' to '{target.value}'")
        self.current = current
        self.target = target


def can_transition(current: TranscriptionStatus, target: TranscriptionStatus) -> bool:
    return target in ALLOWED_TRANSITIONS[current]


def new_id() -> str:
    return str(uuid.uuid4())


@dataclass
class User:
    id: str
    username: str
    password: str
    created_at: datetime = field(default_factory=datetime.utcnow)


@dataclass
class AudioContent:
    """Uploaded audio plus everything derived from it."""

    id: str
    user_id: str
    title: str
    file_name: str
    file_path: str
    source: str | None = None
    file_size: int | None = None
    mime_type: str | None = None
    duration: int | None = None
    transcription_status: TranscriptionStatus = TranscriptionStatus.PENDING
    transcription_text: str | None = None
    ai_summary: str | None = None
    keywords: list[str] = field(default_factory=list)
    summary_status: SummaryStatus | None = None
    summary_error: str | None = None
    progress: int = 0
    created_at: datetime = field(default_factory=datetime.utcnow)
    last_accessed_at: datetime = field(default_factory=datetime.utcnow)


@dataclass
class Highlight:
    id: str
    audio_content_id: str
    user_id: str
    text: str
    start_time: float
    end_time: float
    color: str = DEFAULT_HIGHLIGHT_COLOR
    note: str | None = None
    created_at: datetime = field(default_factory=datetime.utcnow)


@dataclass
class TranscriptSegment:
    """Timed chunk of a transcript, ordered by sequence number."""

    id: str
    audio_content_id: str
    start_time: float
    end_time: float
    text: str
    sequence_number: int
    confidence: int | None = None


@dataclass
class NewTranscriptSegment:
    """Segment data produced by transcription, before it is stored."""

    start_time: float
    end_time: float
    text: str
    confidence: int | None = None
