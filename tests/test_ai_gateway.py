"""Tests for the OpenAI gateway with a mocked client."""

import asyncio
import json
from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest

from app.services.ai_gateway import SUMMARY_FALLBACK, AIGateway, AIGatewayError


def _chat_reply(content: str | None) -> SimpleNamespace:
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


def _segment(start: float, end: float, text: str, avg_logprob: float | None = None) -> SimpleNamespace:
    return SimpleNamespace(start=start, end=end, text=text, avg_logprob=avg_logprob)


@pytest.fixture(name="openai_client")
def openai_client_fixture():
    """Stand-in for AsyncOpenAI exposing only the calls the gateway makes."""
    return SimpleNamespace(
        audio=SimpleNamespace(transcriptions=SimpleNamespace(create=AsyncMock())),
        chat=SimpleNamespace(completions=SimpleNamespace(create=AsyncMock())),
    )


@pytest.fixture(name="ai")
def gateway_fixture(settings, openai_client) -> AIGateway:
    return AIGateway(settings, client=openai_client)


@pytest.fixture(name="audio_file")
def audio_file_fixture(tmp_path):
    path = tmp_path / "3f1c.mp3"
    path.write_bytes(b"ID3" + b"\x00" * 61)
    return path


class TestTranscribe:
    """Speech-to-text calls."""

    def test_returns_text_and_segments(self, ai, openai_client, audio_file, settings):
        openai_client.audio.transcriptions.create.return_value = SimpleNamespace(
            text="Hello there. General remarks.",
            segments=[
                _segment(0.0, 1.2, " Hello there. ", avg_logprob=-0.1),
                _segment(1.2, 3.4, "General remarks.", avg_logprob=None),
                _segment(3.4, 3.5, "   "),
            ],
        )

        result = asyncio.run(ai.transcribe(str(audio_file), "greeting.m4a"))

        assert result.text == "Hello there. General remarks."
        assert [s.text for s in result.segments] == ["Hello there.", "General remarks."]
        assert result.segments[0].start_time == 0.0
        assert result.segments[0].end_time == 1.2
        assert result.segments[0].confidence == 90
        assert result.segments[1].confidence is None
        assert result.duration is None

        kwargs = openai_client.audio.transcriptions.create.await_args.kwargs
        assert kwargs["file"] == ("greeting.m4a", audio_file.read_bytes())
        assert kwargs["model"] == settings.OPENAI_TRANSCRIPTION_MODEL
        assert kwargs["response_format"] == "verbose_json"

    def test_falls_back_to_stored_name(self, ai, openai_client, audio_file):
        openai_client.audio.transcriptions.create.return_value = SimpleNamespace(text="hi", segments=None)
        result = asyncio.run(ai.transcribe(str(audio_file)))
        assert result.segments == []
        assert openai_client.audio.transcriptions.create.await_args.kwargs["file"][0] == "3f1c.mp3"

    def test_confidence_is_clamped(self, ai, openai_client, audio_file):
        openai_client.audio.transcriptions.create.return_value = SimpleNamespace(
            text="x", segments=[_segment(0, 1, "x", avg_logprob=0.5)]
        )
        result = asyncio.run(ai.transcribe(str(audio_file)))
        assert result.segments[0].confidence == 100

    def test_provider_error_is_wrapped(self, ai, openai_client, audio_file):
        openai_client.audio.transcriptions.create.side_effect = RuntimeError("Error code: 429 - insufficient_quota")
        with pytest.raises(AIGatewayError) as exc_info:
            asyncio.run(ai.transcribe(str(audio_file)))
        assert str(exc_info.value) == "Failed to transcribe audio: Error code: 429 - insufficient_quota"
        assert isinstance(exc_info.value.__cause__, RuntimeError)

    def test_missing_file(self, ai, openai_client, tmp_path):
        with pytest.raises(AIGatewayError, match="Audio file not found"):
            asyncio.run(ai.transcribe(str(tmp_path / "gone.mp3")))
        openai_client.audio.transcriptions.create.assert_not_awaited()


class TestSummary:
    """Summary and keyword generation."""

    def test_parses_reply(self, ai, openai_client, settings):
        openai_client.chat.completions.create.return_value = _chat_reply(
            json.dumps({"summary": "A short talk.", "keywords": ["talk", 3, "short"]})
        )

        result = asyncio.run(ai.generate_summary("transcript text"))

        assert result.summary == "A short talk."
        assert result.keywords == ["talk", "short"]
        kwargs = openai_client.chat.completions.create.await_args.kwargs
        assert kwargs["model"] == settings.OPENAI_CHAT_MODEL
        assert kwargs["response_format"] == {"type": "json_object"}
        assert "transcript text" in kwargs["messages"][1]["content"]

    @pytest.mark.parametrize("content", ["not json", None, "[1, 2]", json.dumps({"summary": ""})])
    def test_unusable_reply_uses_defaults(self, ai, openai_client, content):
        openai_client.chat.completions.create.return_value = _chat_reply(content)
        result = asyncio.run(ai.generate_summary("text"))
        assert result.summary == SUMMARY_FALLBACK
        assert result.keywords == []

    def test_provider_error_is_wrapped(self, ai, openai_client):
        openai_client.chat.completions.create.side_effect = TimeoutError("timed out")
        with pytest.raises(AIGatewayError, match="^Failed to generate summary: timed out$"):
            asyncio.run(ai.generate_summary("text"))


class TestKeyPoints:
    """Key point extraction."""

    def test_parses_reply(self, ai, openai_client):
        openai_client.chat.completions.create.return_value = _chat_reply(
            json.dumps({"keyPoints": ["First point", "Second point"]})
        )
        assert asyncio.run(ai.extract_key_points("text")) == ["First point", "Second point"]

    def test_missing_field(self, ai, openai_client):
        openai_client.chat.completions.create.return_value = _chat_reply(json.dumps({"points": ["x"]}))
        assert asyncio.run(ai.extract_key_points("text")) == []

    def test_provider_error_is_wrapped(self, ai, openai_client):
        openai_client.chat.completions.create.side_effect = ConnectionError("reset")
        with pytest.raises(AIGatewayError, match="^Failed to extract key points: reset$"):
            asyncio.run(ai.extract_key_points("text"))


class TestClientSetup:
    """Lazy client creation."""

    def test_missing_api_key(self, settings):
        settings.OPENAI_API_KEY = ""
        ai = AIGateway(settings)
        with pytest.raises(AIGatewayError, match="^Failed to generate summary: OPENAI_API_KEY is not configured$"):
            asyncio.run(ai.generate_summary("text"))
        with pytest.raises(AIGatewayError, match="^Failed to extract key points: OPENAI_API_KEY"):
            asyncio.run(ai.extract_key_points("text"))

    def test_missing_api_key_on_transcribe(self, settings, tmp_path):
        settings.OPENAI_API_KEY = ""
        audio = tmp_path / "a.mp3"
        audio.write_bytes(b"\x00")
        with pytest.raises(AIGatewayError, match="^Failed to transcribe audio: OPENAI_API_KEY"):
            asyncio.run(AIGateway(settings).transcribe(str(audio), "a.mp3"))


    def test_client_built_once(self, settings):
        ai = AIGateway(settings)
        first = ai._get_client()
        assert ai._get_client() is first
        assert first.max_retries == 0
