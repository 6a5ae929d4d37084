"""Byte-range helpers for streaming stored audio back to the player."""

import re
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path

AUDIO_MIME_TYPES = {
    ".mp3": "audio/mpeg",
    ".wav": "audio/wav",
    ".m4a": "audio/mp4",
    ".flac": "audio/flac",
    ".ogg": "audio/ogg",
}
DEFAULT_MIME_TYPE = "audio/mpeg"
CHUNK_SIZE = 1024 * 64

_RANGE_RE = re.compile(r"^bytes=(\d*)-(\d*)$")


class RangeNotSatisfiable(ValueError):
    """The requested range lies outside the file."""

    def __init__(self, file_size: int) -> None:
        super().__init__(f"Requested range not satisfiable for {file_size} bytes")
        self.file_size = file_size


@dataclass(frozen=True)
class ByteRange:
    start: int
    end: int  # inclusive

    @property
    def length(self) -> int:
        return self.end - self.start + 1

    def content_range(self, file_size: int) -> str:
        return f"bytes {self.start}-{self.end}/{file_size}"


def resolve_mime_type(file_name: str | None, stored_mime_type: str | None) -> str:
    """Pick the response MIME type, trusting the file extension over the upload's claim."""
    if file_name:
        mime = AUDIO_MIME_TYPES.get(Path(file_name).suffix.lower())
        if mime:
            return mime
    return stored_mime_type or DEFAULT_MIME_TYPE


def parse_range_header(header: str | None, file_size: int) -> ByteRange | None:
    """Parse a single-range ``Range`` header.

    Returns None when the whole file should be sent: no header, a header that
    does not parse, or a multi-range request. Raises RangeNotSatisfiable when
    the range starts past the end of the file.
    """
    if not header:
        return None
    match = _RANGE_RE.match(header.strip().replace(" ", ""))
    if not match:
        return None
    first, last = match.groups()
    if not first and not last:
        return None

    if not first:
        # Suffix range: the final N bytes
        suffix = int(last)
        if suffix == 0 or file_size == 0:
            raise RangeNotSatisfiable(file_size)
        return ByteRange(start=max(0, file_size - suffix), end=file_size - 1)

    start = int(first)
    end = int(last) if last else file_size - 1
    if end < start:
        return None
    if start >= file_size:
        raise RangeNotSatisfiable(file_size)
    return ByteRange(start=start, end=min(end, file_size - 1))


def iter_file_range(path: Path, start: int, length: int, chunk_size: int = CHUNK_SIZE) -> Iterator[bytes]:
    """Yield ``length`` bytes of a file starting at ``start``."""
    remaining = length
    with open(path, "rb") as f:
        f.seek(start)
        while remaining > 0:
            chunk = f.read(min(chunk_size, remaining))
            if not chunk:
                break
            remaining -= len(chunk)
            yield chunk
