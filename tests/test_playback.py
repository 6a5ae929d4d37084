"""Tests for byte-range audio streaming."""

import pytest
from fastapi.testclient import TestClient

from app.services.playback import (
    ByteRange,
    RangeNotSatisfiable,
    iter_file_range,
    parse_range_header,
    resolve_mime_type,
)
from app.storage.memory import MemoryStore

AUDIO_BYTES = bytes(range(256)) * 4
FILE_SIZE = 1000


@pytest.fixture(name="stored_audio")
def stored_audio_fixture(upload):
    """An uploaded 1000-byte file; returns its record id."""
    return upload(content=AUDIO_BYTES[:FILE_SIZE]).json()["id"]


class TestParseRangeHeader:
    """Range header parsing."""

    def test_no_header(self):
        assert parse_range_header(None, FILE_SIZE) is None
        assert parse_range_header("", FILE_SIZE) is None

    def test_closed_range(self):
        assert parse_range_header("bytes=0-99", FILE_SIZE) == ByteRange(0, 99)

    def test_open_ended(self):
        assert parse_range_header("bytes=500-", FILE_SIZE) == ByteRange(500, 999)

    def test_suffix(self):
        assert parse_range_header("bytes=-100", FILE_SIZE) == ByteRange(900, 999)

    def test_suffix_longer_than_file(self):
        assert parse_range_header("bytes=-5000", FILE_SIZE) == ByteRange(0, 999)

    def test_end_clamped(self):
        assert parse_range_header("bytes=990-5000", FILE_SIZE) == ByteRange(990, 999)

    @pytest.mark.parametrize("header", ["items=0-10", "bytes=abc", "bytes=0-1,5-6", "bytes=-", "bytes=50-10"])
    def test_ignored_headers(self, header):
        assert parse_range_header(header, FILE_SIZE) is None

    @pytest.mark.parametrize("header", ["bytes=1000-", "bytes=2000-3000", "bytes=-0"])
    def test_unsatisfiable(self, header):
        with pytest.raises(RangeNotSatisfiable):
            parse_range_header(header, FILE_SIZE)

    def test_byte_range_helpers(self):
        byte_range = ByteRange(10, 19)
        assert byte_range.length == 10
        assert byte_range.content_range(FILE_SIZE) == "bytes 10-19/1000"


class TestMimeType:
    """Response MIME type selection."""

    @pytest.mark.parametrize(
        "file_name,expected",
        [
            ("talk.mp3", "audio/mpeg"),
            ("talk.WAV", "audio/wav"),
            ("talk.m4a", "audio/mp4"),
            ("talk.flac", "audio/flac"),
            ("talk.ogg", "audio/ogg"),
        ],
    )
    def test_extension_wins(self, file_name, expected):
        assert resolve_mime_type(file_name, "application/octet-stream") == expected

    def test_falls_back_to_stored(self):
        assert resolve_mime_type("talk.aac", "audio/aac") == "audio/aac"

    def test_default(self):
        assert resolve_mime_type(None, None) == "audio/mpeg"


def test_iter_file_range(tmp_path):
    path = tmp_path / "a.bin"
    path.write_bytes(AUDIO_BYTES)
    chunks = list(iter_file_range(path, 100, 300, chunk_size=128))
    assert [len(c) for c in chunks] == [128, 128, 44]
    assert b"".join(chunks) == AUDIO_BYTES[100:400]


class TestStreamEndpoint:
    """GET /api/audio/{id}."""

    def test_full_file(self, client: TestClient, test_user: dict, stored_audio: str):
        response = client.get(f"/api/audio/{stored_audio}", headers=test_user["headers"])
        assert response.status_code == 200
        assert response.content == AUDIO_BYTES[:FILE_SIZE]
        assert response.headers["content-length"] == "1000"
        assert response.headers["content-type"] == "audio/mpeg"
        assert response.headers["accept-ranges"] == "bytes"
        assert response.headers["cache-control"] == "no-cache"

    def test_partial_content(self, client: TestClient, test_user: dict, stored_audio: str):
        response = client.get(
            f"/api/audio/{stored_audio}", headers={**test_user["headers"], "Range": "bytes=0-99"}
        )
        assert response.status_code == 206
        assert response.headers["content-range"] == "bytes 0-99/1000"
        assert response.headers["content-length"] == "100"
        assert response.content == AUDIO_BYTES[:100]

    def test_open_ended_range(self, client: TestClient, test_user: dict, stored_audio: str):
        response = client.get(
            f"/api/audio/{stored_audio}", headers={**test_user["headers"], "Range": "bytes=900-"}
        )
        assert response.status_code == 206
        assert response.headers["content-range"] == "bytes 900-999/1000"
        assert response.content == AUDIO_BYTES[900:FILE_SIZE]

    def test_range_not_satisfiable(self, client: TestClient, test_user: dict, stored_audio: str):
        response = client.get(
            f"/api/audio/{stored_audio}", headers={**test_user["headers"], "Range": "bytes=5000-"}
        )
        assert response.status_code == 416
        assert response.headers["content-range"] == "bytes */1000"

    def test_malformed_range_serves_whole_file(self, client: TestClient, test_user: dict, stored_audio: str):
        response = client.get(
            f"/api/audio/{stored_audio}", headers={**test_user["headers"], "Range": "bytes=0-1,4-5"}
        )
        assert response.status_code == 200
        assert len(response.content) == FILE_SIZE

    def test_cookie_auth(self, client: TestClient, test_user: dict, stored_audio: str):
        """Playback also accepts the auth cookie."""
        client.cookies.set("am_auth_token", test_user["token"])
        response = client.get(f"/api/audio/{stored_audio}")
        assert response.status_code == 200

    def test_unknown_content(self, client: TestClient, test_user: dict):
        response = client.get("/api/audio/missing", headers=test_user["headers"])
        assert response.status_code == 404
        assert response.json()["detail"] == "Audio content not found"

    def test_file_missing_on_disk(self, client: TestClient, test_user: dict, store: MemoryStore, stored_audio: str):
        store.update_audio_content(stored_audio, file_path="/nonexistent/audio.mp3")
        response = client.get(f"/api/audio/{stored_audio}", headers=test_user["headers"])
        assert response.status_code == 404
        assert response.json()["detail"] == "Audio file not found"

    def test_requires_auth(self, client: TestClient, stored_audio: str):
        assert client.get(f"/api/audio/{stored_audio}").status_code == 401
