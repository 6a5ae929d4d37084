"""Upload-to-insight pipeline: transcription followed by a best-effort summary."""

import logging

from app.services.ai_gateway import AIGateway
from app.services.jobs import Job, JobCancelled, JobFailed
from app.storage.base import ContentStore
from app.storage.records import (
    AudioContent,
    InvalidStatusTransition,
    SummaryStatus,
    TranscriptionStatus,
    can_transition,
)

logger = logging.getLogger("audiomind")

QUOTA_EXCEEDED_MESSAGE = "OpenAI quota exceeded. Please add credits to your OpenAI account."
TRANSCRIPTION_FAILED_MESSAGE = "Transcription failed"
SUMMARY_FAILED_MESSAGE = "Summary generation failed"
CANCELLED_MESSAGE = "Processing cancelled"


class TranscriptionFailed(JobFailed):
    """The provider could not transcribe the file. The record already shows the error."""


def _describe_provider_error(error: Exception, fallback: str) -> str:
    text = str(error)
    if "quota" in text or "429" in text:
        return QUOTA_EXCEEDED_MESSAGE
    return fallback


def describe_transcription_error(error: Exception) -> str:
    """Turn a provider error into the message shown on the record."""
    return _describe_provider_error(error, TRANSCRIPTION_FAILED_MESSAGE)


def describe_summary_error(error: Exception) -> str:
    return _describe_provider_error(error, SUMMARY_FAILED_MESSAGE)


class IngestionPipeline:
    """Moves one audio item through pending -> processing -> completed | error."""

    def __init__(self, store: ContentStore, gateway: AIGateway) -> None:
        self.store = store
        self.gateway = gateway

    def _transition(self, content_id: str, target: TranscriptionStatus, **fields) -> AudioContent:
        content = self.store.get_audio_content(content_id)
        if content is None:
            raise LookupError(f"Audio content {content_id} no longer exists")
        if not can_transition(content.transcription_status, target):
            raise InvalidStatusTransition(content.transcription_status, target)
        updated = self.store.update_audio_content(content_id, transcription_status=target, **fields)
        if updated is None:
            raise LookupError(f"Audio content {content_id} no longer exists")
        logger.info("Content %s: %s -> %s", content_id, content.transcription_status.value, target.value)
        return updated

    def _ensure_exists(self, content_id: str) -> None:
        if self.store.get_audio_content(content_id) is None:
            logger.info("Content %s was deleted, stopping", content_id)
            raise JobCancelled()

    async def run(self, job: Job) -> None:
        """Process the job's audio item. Errors end up on the record, not the caller."""
        self._ensure_exists(job.content_id)
        if job.cancel_requested:
            self._transition(
                job.content_id, TranscriptionStatus.ERROR, transcription_text=f"Error: {CANCELLED_MESSAGE}"
            )
            raise JobCancelled()

        content = self._transition(job.content_id, TranscriptionStatus.PROCESSING)

        try:
            result = await self.gateway.transcribe(content.file_path, content.file_name)
        except Exception as e:
            logger.error("Transcription failed for content %s: %s", content.id, e)
            self._ensure_exists(content.id)
            message = describe_transcription_error(e)
            self._transition(content.id, TranscriptionStatus.ERROR, transcription_text=f"Error: {message}")
            raise TranscriptionFailed(message) from e

        self._ensure_exists(content.id)
        self.store.delete_transcript_segments(content.id)
        self.store.create_transcript_segments(content.id, result.segments)
        try:
            content = self._transition(content.id, TranscriptionStatus.COMPLETED, transcription_text=result.text)
        except LookupError:
            self.store.delete_transcript_segments(content.id)
            raise JobCancelled() from None

        if job.cancel_requested:
            raise JobCancelled()

        await self.summarize(content)

    async def summarize(self, content: AudioContent) -> None:
        """Generate the summary. A failure is recorded on the record but never raised."""
        self.store.update_audio_content(content.id, summary_status=SummaryStatus.PROCESSING, summary_error=None)
        try:
            summary = await self.gateway.generate_summary(content.transcription_text or "")
        except Exception as e:
            logger.error("Failed to generate summary for content %s: %s", content.id, e)
            self.store.update_audio_content(
                content.id, summary_status=SummaryStatus.ERROR, summary_error=describe_summary_error(e)
            )
            return

        self.store.update_audio_content(
            content.id,
            ai_summary=summary.summary,
            keywords=summary.keywords,
            summary_status=SummaryStatus.COMPLETED,
        )
        logger.info("Summary stored for content %s (%d keywords)", content.id, len(summary.keywords))
