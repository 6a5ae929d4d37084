"""Audio content service for upload validation, storage, and CRUD."""

import logging
import os
import uuid
from datetime import datetime
from pathlib import Path

from fastapi import UploadFile

from app.config import Settings
from app.services.jobs import JobManager
from app.storage.base import ContentStore
from app.storage.records import AudioContent

logger = logging.getLogger("audiomind")

ALLOWED_MIME_TYPES = {
    "audio/mpeg",
    "audio/mp3",
    "audio/wav",
    "audio/x-wav",
    "audio/m4a",
    "audio/x-m4a",
    "audio/mp4",
    "audio/flac",
    "audio/x-flac",
    "audio/ogg",
}


class UploadTooLarge(ValueError):
    """Raised while streaming an upload that exceeds the size ceiling."""


class AudioContentService:
    """Handles audio upload, storage on disk, and record management."""

    def __init__(self, store: ContentStore, settings: Settings) -> None:
        self.store = store
        self.settings = settings

    def validate_upload_metadata(self, content_type: str | None) -> str | None:
        """Validate the upload's MIME type. Returns error message or None if valid."""
        if content_type not in ALLOWED_MIME_TYPES:
            return f"Invalid file type '{content_type or 'unknown'}'. Only audio files are allowed."
        return None

    async def store_file(self, user_id: str, upload: UploadFile) -> tuple[Path, int]:
        """Stream uploaded file to disk with size limit. Returns (file_path, file_size_bytes).

        Raises UploadTooLarge if file exceeds max upload size; the partial file is removed.
        """
        max_bytes = self.settings.max_upload_bytes
        ext = Path(upload.filename or "audio.bin").suffix.lower()
        user_dir = Path(self.settings.UPLOAD_DIR) / user_id
        user_dir.mkdir(parents=True, exist_ok=True)

        file_path = user_dir / f"{uuid.uuid4()}{ext}"
        file_size = 0
        chunk_size = 1024 * 64  # 64KB chunks

        try:
            with open(file_path, "wb") as f:
                while True:
                    chunk = await upload.read(chunk_size)
                    if not chunk:
                        break
                    file_size += len(chunk)
                    if file_size > max_bytes:
                        raise UploadTooLarge(
                            f"File too large (over {self.settings.MAX_UPLOAD_SIZE_MB}MB). "
                            f"Maximum: {self.settings.MAX_UPLOAD_SIZE_MB}MB"
                        )
                    f.write(chunk)
        except UploadTooLarge:
            if file_path.exists():
                os.remove(file_path)
            raise

        return file_path, file_size

    def create_content(
        self,
        user_id: str,
        title: str,
        source: str | None,
        file_name: str,
        file_path: Path,
        file_size: int,
        mime_type: str | None,
    ) -> AudioContent:
        """Create the pending record for a stored upload."""
        content = self.store.create_audio_content(
            user_id=user_id,
            title=title,
            source=source or None,
            file_name=file_name,
            file_path=str(file_path),
            file_size=file_size,
            mime_type=mime_type,
        )
        logger.info("Created audio content %s (%s, %d bytes)", content.id, file_name, file_size)
        return content

    def get_content(self, content_id: str, user_id: str) -> AudioContent | None:
        """Get a single record by ID, scoped to user."""
        content = self.store.get_audio_content(content_id)
        if content is None or content.user_id != user_id:
            return None
        return content

    def update_progress(self, content_id: str, user_id: str, progress: int) -> AudioContent | None:
        """Record the playback position and mark the item as just accessed."""
        if self.get_content(content_id, user_id) is None:
            return None
        return self.store.update_audio_content(content_id, progress=progress, last_accessed_at=datetime.utcnow())

    def delete_content(self, content: AudioContent, jobs: JobManager | None = None) -> None:
        """Delete a record, its highlights and segments, and the stored file.

        Unfinished jobs for the record are cancelled first.
        """
        if jobs is not None:
            for job in jobs.for_content(content.id):
                jobs.cancel(job.id)
        file_path = Path(content.file_path)
        if file_path.exists():
            os.remove(file_path)
        highlights = self.store.delete_highlights_by_audio_content(content.id)
        segments = self.store.delete_transcript_segments(content.id)
        self.store.delete_audio_content(content.id)
        logger.info(
            "Deleted audio content %s with %d highlights and %d segments", content.id, highlights, segments
        )
