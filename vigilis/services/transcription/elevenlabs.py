"""ElevenLabs STT implementation over plain REST.

Uploads a captured recording as ``multipart/form-data`` together with the
fixed ``model_id`` field and decodes whatever JSON shape comes back.
"""

import asyncio
import logging
from pathlib import Path
from urllib.parse import unquote, urlparse

import httpx

from vigilis.core.config import Settings, get_settings
from vigilis.core.exceptions import ConfigurationError
from vigilis.core.models import AudioResource
from vigilis.services.http import ensure_success, request_with_deadline
from vigilis.services.transcription.base import BaseSTT
from vigilis.services.transcription.decoding import decode_response_body

logger = logging.getLogger(__name__)


def _local_path(uri: str) -> Path:
    """Turn a ``file://`` URI or a plain path into a filesystem path."""
    parsed = urlparse(uri)
    if parsed.scheme == "file":
        return Path(unquote(parsed.path))
    return Path(uri)


class ElevenLabsSTT(BaseSTT):
    """Speech-to-text provider using the ElevenLabs REST endpoint.

    Args:
        api_key: ElevenLabs key (falls back to settings if not provided).
        url: STT endpoint URL.
        model_id: Model identifier sent with every upload.
        client: Optional shared ``httpx.AsyncClient`` (one is created if omitted).
        settings: Optional Settings instance (defaults to get_settings()).
    """

    def __init__(
        self,
        api_key: str | None = None,
        url: str | None = None,
        model_id: str | None = None,
        client: httpx.AsyncClient | None = None,
        settings: Settings | None = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._api_key = api_key or self._settings.elevenlabs_api_key
        self._url = url or self._settings.stt_url
        self._model_id = model_id or self._settings.stt_model_id
        self._timeout = self._settings.transcription_timeout
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient()

    async def _read_payload(self, resource: AudioResource) -> bytes:
        if resource.data is not None:
            return resource.data
        return await asyncio.to_thread(_local_path(resource.uri).read_bytes)

    async def transcribe_audio(self, resource: AudioResource, timeout: float | None = None) -> str:
        """Upload ``resource`` and return the decoded transcript text.

        Raises:
            ConfigurationError: If no API key is configured.
            RequestTimeoutError: If no response arrives within ``timeout``.
            UpstreamError: On a non-2xx status or a network failure.
            OSError: If a file-backed resource cannot be read.
        """
        if not self._api_key:
            raise ConfigurationError(
                "ElevenLabs API key not configured (ELEVENLABS_API_KEY)"
            )

        payload = await self._read_payload(resource)
        files = {"file": (resource.name, payload, resource.mime_type)}
        data = {"model_id": self._model_id}
        logger.debug(
            "Transcription request prepared: url=%s model_id=%s bytes=%d",
            self._url,
            self._model_id,
            len(payload),
        )

        response = await request_with_deadline(
            self._client,
            "post",
            self._url,
            timeout=timeout if timeout is not None else self._timeout,
            timeout_message="Transcription request timed out",
            headers={"xi-api-key": self._api_key},
            data=data,
            files=files,
        )
        ensure_success(response, context="Speech-to-text request failed")

        decoded = decode_response_body(response.content)
        logger.info("Transcription decoded as %s", type(decoded).__name__)
        return decoded.render()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
