"""Tests for the HTTP trim endpoints."""

from __future__ import annotations

import struct
from urllib.parse import quote

import numpy as np
import pytest
from fastapi.testclient import TestClient

from ai.desilence.errors import DecodeFailure
from ai.desilence.schema import SampleBuffer
from ai.desilence.wav import encode_wav
from main import app
from services.audio_service import AudioService, get_audio_service

SCENARIO_PARAMS = {
    "threshold_db": -20,
    "min_silence_sec": 1.0,
    "padding_sec": 0,
    "new_silence_sec": 0.1,
}


@pytest.fixture
def client():
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def scenario_wav(scenario_buffer: SampleBuffer) -> bytes:
    return encode_wav(scenario_buffer)


def test_health(client: TestClient) -> None:
    response = client.get("/api/health")
    assert response.status_code == 200
    assert response.json() == {"message": "ok"}


def test_defaults(client: TestClient) -> None:
    body = client.get("/api/audio/defaults").json()
    assert body["threshold_db"] < 0
    assert body["ranges"]["threshold_db"] == {"min": -60.0, "max": -20.0}
    assert set(body["ranges"]) == {"threshold_db", "min_silence_sec", "padding_sec", "new_silence_sec"}


def test_trim_returns_wav(client: TestClient, scenario_wav: bytes) -> None:
    response = client.post(
        "/api/audio/trim",
        params=SCENARIO_PARAMS,
        files={"file": ("lecture.wav", scenario_wav, "audio/wav")},
    )

    assert response.status_code == 200
    assert response.headers["content-type"] == "audio/wav"
    assert 'filename="lecture_trimmed.wav"' in response.headers["content-disposition"]
    assert response.headers["x-desilence-chunks"] == "2"
    assert len(response.content) == 44 + 3100 * 2
    assert response.content[:4] == b"RIFF"
    assert struct.unpack("<I", response.content[24:28]) == (1000,)


def test_trim_invalid_options(client: TestClient, scenario_wav: bytes) -> None:
    response = client.post(
        "/api/audio/trim",
        params={**SCENARIO_PARAMS, "threshold_db": 3},
        files={"file": ("lecture.wav", scenario_wav, "audio/wav")},
    )
    assert response.status_code == 422
    assert response.json()["detail"]["error_code"] == "INVALID_CONFIG"


def test_trim_empty_result(client: TestClient) -> None:
    quiet = encode_wav(SampleBuffer.from_array(np.zeros(2000, dtype=np.float32), 1000))
    response = client.post(
        "/api/audio/trim",
        params={**SCENARIO_PARAMS, "min_silence_sec": 0},
        files={"file": ("quiet.wav", quiet, "audio/wav")},
    )
    assert response.status_code == 422
    detail = response.json()["detail"]
    assert detail["success"] is False
    assert detail["error_code"] == "EMPTY_RESULT"


def test_trim_unsupported_upload(client: TestClient) -> None:
    response = client.post(
        "/api/audio/trim",
        files={"file": ("notes.txt", b"not audio", "text/plain")},
    )
    assert response.status_code == 400
    assert response.json()["detail"]["error_code"] == "DECODE_FAILURE"


def test_trim_empty_upload(client: TestClient) -> None:
    response = client.post("/api/audio/trim", files={"file": ("a.wav", b"", "audio/wav")})
    assert response.status_code == 400


def test_trim_with_injected_decoder(client: TestClient, scenario_buffer: SampleBuffer) -> None:
    app.dependency_overrides[get_audio_service] = lambda: AudioService(decoder=lambda path: scenario_buffer)

    response = client.post(
        "/api/audio/trim",
        params=SCENARIO_PARAMS,
        files={"file": ("anything.mp3", b"opaque bytes", "audio/mpeg")},
    )

    assert response.status_code == 200
    assert response.content == encode_wav(
        SampleBuffer.from_array(
            np.concatenate(
                [np.full(1000, 0.5), np.zeros(100), np.full(2000, 0.5)]
            ).astype(np.float32),
            1000,
        )
    )


def test_trim_decoder_failure(client: TestClient) -> None:
    def decoder(path):
        raise DecodeFailure("cannot read")

    app.dependency_overrides[get_audio_service] = lambda: AudioService(decoder=decoder)

    response = client.post("/api/audio/trim", files={"file": ("a.wav", b"xx", "audio/wav")})

    assert response.status_code == 400
    assert response.json()["detail"]["error"] == "cannot read"


def test_analyze_returns_stats(client: TestClient, scenario_wav: bytes) -> None:
    response = client.post(
        "/api/audio/analyze",
        params=SCENARIO_PARAMS,
        files={"file": ("lecture.wav", scenario_wav, "audio/wav")},
    )

    assert response.status_code == 200
    stats = response.json()
    assert stats["chunks_kept"] == 2
    assert stats["processed_frames"] == 3100
    assert stats["original_duration_sec"] == 5.0


def test_analyze_all_silent_is_not_an_error(client: TestClient) -> None:
    quiet = encode_wav(SampleBuffer.from_array(np.zeros(2000, dtype=np.float32), 1000))
    response = client.post(
        "/api/audio/analyze",
        params={**SCENARIO_PARAMS, "min_silence_sec": 0},
        files={"file": ("quiet.wav", quiet, "audio/wav")},
    )
    assert response.status_code == 200
    assert response.json()["processed_frames"] == 0


def test_trim_non_ascii_filename(client: TestClient, scenario_buffer: SampleBuffer) -> None:
    app.dependency_overrides[get_audio_service] = lambda: AudioService(decoder=lambda path: scenario_buffer)

    response = client.post(
        "/api/audio/trim",
        params=SCENARIO_PARAMS,
        files={"file": ("интервью.wav", b"opaque bytes", "audio/wav")},
    )

    assert response.status_code == 200
    disposition = response.headers["content-disposition"]
    assert "filename*=UTF-8''" + quote("интервью_trimmed.wav") in disposition
    assert 'filename="' + "_" * 8 + '_trimmed.wav"' in disposition
    assert len(response.content) == 44 + 3100 * 2


def test_trim_quote_in_filename(client: TestClient, scenario_buffer: SampleBuffer) -> None:
    app.dependency_overrides[get_audio_service] = lambda: AudioService(decoder=lambda path: scenario_buffer)

    response = client.post(
        "/api/audio/trim",
        params=SCENARIO_PARAMS,
        files={"file": ('say "hi".wav', b"opaque bytes", "audio/wav")},
    )

    assert response.status_code == 200
    assert 'filename="say _hi__trimmed.wav"' in response.headers["content-disposition"]


def test_trim_out_of_memory_while_encoding(
    client: TestClient, scenario_buffer: SampleBuffer, monkeypatch: pytest.MonkeyPatch
) -> None:
    def _boom(*args, **kwargs):
        raise MemoryError

    monkeypatch.setattr("ai.desilence.pipeline.to_encoded_audio", _boom)
    app.dependency_overrides[get_audio_service] = lambda: AudioService(decoder=lambda path: scenario_buffer)

    response = client.post(
        "/api/audio/trim",
        params=SCENARIO_PARAMS,
        files={"file": ("lecture.wav", b"opaque bytes", "audio/wav")},
    )

    assert response.status_code == 500
    assert response.json()["detail"]["error_code"] == "PROCESSING_FAILURE"
