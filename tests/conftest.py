"""Shared pytest fixtures for the Vigilis test suite.

Provides explicit Settings objects (no environment mutation), httpx clients
backed by ``httpx.MockTransport``, and small audio fixtures.
"""

import struct
from collections.abc import Callable
from unittest.mock import AsyncMock

import httpx
import pytest

from vigilis.core.config import Settings

STT_URL = "http://stt.test/v1/speech-to-text"
API_BASE_URL = "http://vigilis.test"


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------


@pytest.fixture
def settings(tmp_path):
    """Settings pointing at fake hosts and a per-test device store."""
    return Settings(
        api_base_url=API_BASE_URL,
        stt_url=STT_URL,
        elevenlabs_api_key="test-key",
        device_store_path=str(tmp_path / "device.json"),
    )


# ---------------------------------------------------------------------------
# HTTP
# ---------------------------------------------------------------------------


@pytest.fixture
async def make_http():
    """Factory for AsyncClients whose requests are answered by ``handler``.

    Every request seen by the handler is also appended to ``client.seen``.
    """
    clients: list[httpx.AsyncClient] = []

    def _make(handler: Callable) -> httpx.AsyncClient:
        seen: list[httpx.Request] = []

        async def _recording_handler(request: httpx.Request):
            seen.append(request)
            result = handler(request)
            if hasattr(result, "__await__"):
                result = await result
            return result

        client = httpx.AsyncClient(transport=httpx.MockTransport(_recording_handler))
        client.seen = seen
        clients.append(client)
        return client

    yield _make

    for client in clients:
        await client.aclose()


# ---------------------------------------------------------------------------
# STT
# ---------------------------------------------------------------------------


@pytest.fixture
def mock_stt():
    """Create a mock STT provider returning a fixed statement."""
    from vigilis.services.transcription.base import BaseSTT

    stt = AsyncMock(spec=BaseSTT)
    stt.transcribe_audio.return_value = "test statement"
    return stt


# ---------------------------------------------------------------------------
# Audio
# ---------------------------------------------------------------------------


@pytest.fixture
def silent_pcm_bytes():
    """Generate 1 second of silence as PCM audio (16kHz, 16-bit, mono)."""
    return struct.pack("<h", 0) * 16000


@pytest.fixture
def sample_audio_path(tmp_path, silent_pcm_bytes):
    """Create a temporary WAV file from silent PCM data.

    Returns:
        str: Path to the temporary WAV file.
    """
    import wave

    wav_path = tmp_path / "call.wav"
    with wave.open(str(wav_path), "wb") as wf:
        wf.setnchannels(1)
        wf.setsampwidth(2)
        wf.setframerate(16000)
        wf.writeframes(silent_pcm_bytes)
    return str(wav_path)
