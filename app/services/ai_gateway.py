"""Gateway to the OpenAI speech-to-text and chat completion APIs."""

import asyncio
import json
import logging
import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from app.config import Settings
from app.storage.records import NewTranscriptSegment

logger = logging.getLogger("audiomind")

SUMMARY_FALLBACK = "Summary could not be generated"

SUMMARY_SYSTEM_PROMPT = (
    "You are an expert content summarizer. Analyze the provided transcript and create a concise summary "
    "highlighting the key points, themes, and insights. Also extract important keywords and topics. "
    "Respond with JSON in this format: { 'summary': string, 'keywords': string[] }"
)

KEY_POINTS_SYSTEM_PROMPT = (
    "You are an expert at extracting key points from content. Analyze the transcript and identify the most "
    "important points, insights, and takeaways. Return as a JSON array of strings with each key point being "
    "concise but meaningful. Respond with JSON in this format: { 'keyPoints': string[] }"
)


class AIGatewayError(Exception):
    """Raised when a provider call fails for any reason."""


@dataclass
class TranscriptionResult:
    text: str
    segments: list[NewTranscriptSegment] = field(default_factory=list)
    duration: float | None = None


@dataclass
class SummaryResult:
    summary: str
    keywords: list[str]


def _parse_json_object(content: str | None) -> dict[str, Any]:
    """Parse a model reply, treating anything but a JSON object as empty."""
    try:
        parsed = json.loads(content or "{}")
    except json.JSONDecodeError:
        logger.warning("Model returned malformed JSON, using defaults")
        return {}
    return parsed if isinstance(parsed, dict) else {}


def _string_list(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, str)]


def _confidence(avg_logprob: float | None) -> int | None:
    """Map a segment's average log probability onto 0-100."""
    if avg_logprob is None:
        return None
    return max(0, min(100, round(math.exp(avg_logprob) * 100)))


class AIGateway:
    """Thin async wrapper around the provider. No retries, no backoff."""

    def __init__(self, settings: Settings, client: Any | None = None) -> None:
        self.settings = settings
        self._client = client

    def _get_client(self):
        """Lazy-create the OpenAI client."""
        if self._client is None:
            if not self.settings.OPENAI_API_KEY:
                raise AIGatewayError("OPENAI_API_KEY is not configured")
            from openai import AsyncOpenAI

            self._client = AsyncOpenAI(
                api_key=self.settings.OPENAI_API_KEY,
                max_retries=0,
                timeout=self.settings.OPENAI_TIMEOUT_SECONDS,
            )
        return self._client

    async def transcribe(self, file_path: str, original_filename: str | None = None) -> TranscriptionResult:
        """Transcribe an audio file.

        The original filename is sent along with the bytes so the provider can
        tell the audio format; the stored file has no useful extension of its own.
        """
        path = Path(file_path)
        logger.info("Starting transcription for %s (original: %s)", path, original_filename or "-")

        try:
            client = self._get_client()
            if not path.exists():
                raise FileNotFoundError(f"Audio file not found: {path}")
            audio_bytes = await asyncio.to_thread(path.read_bytes)
            transcription = await client.audio.transcriptions.create(
                file=(original_filename or path.name, audio_bytes),
                model=self.settings.OPENAI_TRANSCRIPTION_MODEL,
                response_format="verbose_json",
            )
        except Exception as e:
            raise AIGatewayError(f"Failed to transcribe audio: {e}") from e

        segments = [
            NewTranscriptSegment(
                start_time=float(seg.start),
                end_time=float(seg.end),
                text=seg.text.strip(),
                confidence=_confidence(getattr(seg, "avg_logprob", None)),
            )
            for seg in (getattr(transcription, "segments", None) or [])
            if seg.text and seg.text.strip()
        ]
        logger.info("Transcription completed (%d segments)", len(segments))
        return TranscriptionResult(text=transcription.text, segments=segments)

    async def _complete_json(self, system_prompt: str, user_prompt: str) -> dict[str, Any]:
        client = self._get_client()
        response = await client.chat.completions.create(
            model=self.settings.OPENAI_CHAT_MODEL,
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            response_format={"type": "json_object"},
        )
        return _parse_json_object(response.choices[0].message.content)

    async def generate_summary(self, transcription_text: str) -> SummaryResult:
        """Summarize a transcript and pull out keywords."""
        try:
            result = await self._complete_json(
                SUMMARY_SYSTEM_PROMPT,
                f"Please summarize this audio transcript and extract key topics:\n\n{transcription_text}",
            )
        except Exception as e:
            raise AIGatewayError(f"Failed to generate summary: {e}") from e

        summary = result.get("summary")
        return SummaryResult(
            summary=summary if isinstance(summary, str) and summary else SUMMARY_FALLBACK,
            keywords=_string_list(result.get("keywords")),
        )

    async def extract_key_points(self, transcription_text: str) -> list[str]:
        """Extract the main takeaways of a transcript."""
        try:
            result = await self._complete_json(
                KEY_POINTS_SYSTEM_PROMPT,
                f"Extract the key points from this transcript:\n\n{transcription_text}",
            )
        except Exception as e:
            raise AIGatewayError(f"Failed to extract key points: {e}") from e
        return _string_list(result.get("keyPoints"))
