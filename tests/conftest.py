"""Pytest configuration and fixtures."""

import io
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from app.config import Settings
from app.services.ai_gateway import AIGateway, SummaryResult, TranscriptionResult
from app.services.auth import AuthService
from app.services.jwt import JWTService
from app.storage.memory import MemoryStore
from app.storage.records import NewTranscriptSegment

TRANSCRIPT_TEXT = "Welcome to the lecture on photosynthesis. Plants turn light into sugar."


@pytest.fixture(name="settings")
def settings_fixture(tmp_path):
    """Settings pointing uploads at a temporary directory."""
    settings = Settings()
    settings.STORAGE_BACKEND = "memory"
    settings.UPLOAD_DIR = str(tmp_path / "uploads")
    settings.OPENAI_API_KEY = "test-key"
    settings.JWT_SECRET_KEY = "test-secret"
    return settings


@pytest.fixture(name="store")
def store_fixture() -> MemoryStore:
    return MemoryStore()


@pytest.fixture(name="gateway")
def gateway_fixture():
    """AI gateway whose provider calls succeed with canned results."""
    gateway = MagicMock(spec=AIGateway)
    gateway.transcribe = AsyncMock(
        return_value=TranscriptionResult(
            text=TRANSCRIPT_TEXT,
            segments=[
                NewTranscriptSegment(
                    start_time=0.0, end_time=4.5, text="Welcome to the lecture on photosynthesis.", confidence=93
                ),
                NewTranscriptSegment(
                    start_time=4.5, end_time=9.0, text="Plants turn light into sugar.", confidence=88
                ),
            ],
        )
    )
    gateway.generate_summary = AsyncMock(
        return_value=SummaryResult(summary="An introduction to photosynthesis.", keywords=["photosynthesis", "plants"])
    )
    gateway.extract_key_points = AsyncMock(return_value=["Plants use light", "Sugar is produced"])
    return gateway


@pytest.fixture(name="client")
def client_fixture(settings: Settings, store: MemoryStore, gateway):
    """Create a test client around a fresh app with disabled rate limiting."""
    from app.rate_limit import limiter
    from main import create_app

    app = create_app(settings=settings, store=store, gateway=gateway)
    limiter.enabled = False
    with TestClient(app) as c:
        yield c
    limiter.enabled = True


@pytest.fixture(name="test_user")
def test_user_fixture(store: MemoryStore, settings: Settings):
    """Create a test user and return its id, token and auth headers."""
    result = AuthService(store).register("listener", "password123")
    token = JWTService(settings).create_token(user_id=result.user_id, username=result.username)
    return {
        "user_id": result.user_id,
        "username": result.username,
        "token": token,
        "headers": {"Authorization": f"Bearer {token}"},
    }


@pytest.fixture(name="upload")
def upload_fixture(client: TestClient, test_user: dict):
    """Return a helper that uploads an audio file as the test user."""

    def _upload(
        title: str | None = "Lecture 1",
        content: bytes = b"\x00" * 1024,
        filename: str = "lecture.mp3",
        mime_type: str = "audio/mpeg",
        source: str | None = None,
        headers: dict | None = None,
    ):
        data = {}
        if title is not None:
            data["title"] = title
        if source is not None:
            data["source"] = source
        return client.post(
            "/api/audio-content/upload",
            files={"audioFile": (filename, io.BytesIO(content), mime_type)},
            data=data,
            headers=headers if headers is not None else test_user["headers"],
        )

    return _upload
