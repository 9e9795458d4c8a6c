"""
Async HTTP client for the Vigilis incident-tracking service.

Posts transcripts (creating or appending to an incident keyed by the device
identity) and "call started" events. Older server deployments lack the
``callStarted`` route; a 404 there is answered by an empty transcript update
that creates the incident as a side effect.
"""

import logging
from datetime import UTC, datetime

import httpx

from vigilis.core.config import Settings, get_settings
from vigilis.core.exceptions import FallbackFailedError, UpstreamError, VigilisError
from vigilis.core.models import (
    CallerRole,
    CallStartedAck,
    CallStartedEvent,
    IncidentReference,
    TranscriptUpdate,
)
from vigilis.services.http import ensure_success, request_with_deadline

logger = logging.getLogger(__name__)

UPDATE_TRANSCRIPT_PATH = "/incident/update_transcript"
CALL_STARTED_PATH = "/incident/callStarted"

_JSON_HEADERS = {"Content-Type": "application/json", "Accept": "application/json"}


class IncidentRelayClient:
    """Thin async wrapper around httpx for the incident endpoints.

    All methods return parsed models or raise a ``VigilisError`` subclass
    whose message can be shown to the user as-is.

    Args:
        base_url: Incident service root (falls back to settings).
        client: Optional shared ``httpx.AsyncClient``; when given, its own
            base URL is ignored and ``base_url`` is prepended to every path.
        settings: Optional Settings instance (defaults to get_settings()).
    """

    def __init__(
        self,
        base_url: str | None = None,
        client: httpx.AsyncClient | None = None,
        settings: Settings | None = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._base_url = (base_url or self._settings.api_base_url).rstrip("/")
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient()

    async def __aenter__(self) -> "IncidentRelayClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    def _url(self, path: str) -> str:
        return f"{self._base_url}{path}"

    # -- transcripts --

    async def send_transcript(
        self,
        transcript: str,
        incident_key: str,
        timeout: float | None = None,
        caller: CallerRole | str = CallerRole.unknown,
    ) -> IncidentReference:
        """Post a transcript, creating the incident if ``incident_key`` is new.

        Raises:
            RequestTimeoutError: On client-side timeout.
            UpstreamError: On a non-2xx status or a network failure.
        """
        body = TranscriptUpdate(
            incident_id=incident_key,
            transcript=transcript,
            caller=CallerRole(caller),
        )
        response = await request_with_deadline(
            self._client,
            "post",
            self._url(UPDATE_TRANSCRIPT_PATH),
            timeout=timeout if timeout is not None else self._settings.send_timeout,
            timeout_message="Request timed out sending transcript",
            headers=_JSON_HEADERS,
            json=body.model_dump(mode="json"),
        )
        ensure_success(response, context="Failed to send transcript")

        try:
            incident = IncidentReference.model_validate(response.json())
        except ValueError as exc:
            raise UpstreamError(
                response.status_code,
                response.text,
                context="Unexpected transcript response",
            ) from exc
        logger.info(
            "Transcript sent to incident %s (caller=%s, %d chars)",
            incident.incident_id,
            body.caller,
            len(transcript),
        )
        return incident

    # -- call lifecycle --

    async def notify_civilian_call_started(self, incident_key: str) -> CallStartedAck:
        """Tell the service a civilian call has started.

        A 404 means the route does not exist on this deployment; the incident
        is then created through an empty transcript update instead.

        Raises:
            RequestTimeoutError: On client-side timeout.
            UpstreamError: On a non-2xx status other than 404.
            FallbackFailedError: When the 404 fallback fails as well.
        """
        event = CallStartedEvent(
            incident_id=incident_key,
            caller=CallerRole.civilian,
            timestamp=datetime.now(UTC),
        )
        response = await request_with_deadline(
            self._client,
            "post",
            self._url(CALL_STARTED_PATH),
            timeout=self._settings.notify_timeout,
            timeout_message="Request timed out notifying call started",
            headers=_JSON_HEADERS,
            json=event.model_dump(mode="json"),
        )

        if response.status_code == 404:
            return await self._fallback_call_started(incident_key, response)

        ensure_success(response, context="Failed to notify call started")
        logger.info("Call started for incident %s", incident_key)
        return CallStartedAck(incident_id=incident_key, status_code=response.status_code)

    async def _fallback_call_started(
        self, incident_key: str, response: httpx.Response
    ) -> CallStartedAck:
        primary = UpstreamError(404, response.text, context="Failed to notify call started")
        logger.warning(
            "callStarted route missing (404); creating incident %s via transcript update",
            incident_key,
        )
        try:
            incident = await self.send_transcript(
                "",
                incident_key,
                timeout=self._settings.fallback_timeout,
                caller=CallerRole.civilian,
            )
        except VigilisError as exc:
            raise FallbackFailedError(primary.detail, exc.detail) from exc

        return CallStartedAck(
            incident_id=incident.incident_id,
            status_code=404,
            fallback_used=True,
            incident=incident,
        )
