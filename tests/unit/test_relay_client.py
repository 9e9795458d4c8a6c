"""Unit tests for the incident relay client."""

import asyncio
import json
from unittest.mock import AsyncMock, patch

import httpx
import pytest

from vigilis.core.exceptions import (
    FallbackFailedError,
    RequestTimeoutError,
    UpstreamError,
)
from vigilis.core.models import CallerRole, IncidentReference
from vigilis.services.relay import CALL_STARTED_PATH, UPDATE_TRANSCRIPT_PATH, IncidentRelayClient

DEVICE_ID = "0f8fad5b-d9cb-469f-a165-70867728950e"

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _incident_json(incident_id=DEVICE_ID, caller="civilian"):
    return {
        "status": "success",
        "message": "Transcript added",
        "incident_id": incident_id,
        "caller": caller,
    }


def _route(responses: dict):
    """Build a handler answering by URL path; values are Responses or callables."""

    def handler(request: httpx.Request):
        answer = responses[request.url.path]
        return answer(request) if callable(answer) else answer

    return handler


# ---------------------------------------------------------------------------
# send_transcript
# ---------------------------------------------------------------------------


class TestSendTranscript:
    """Request body construction and error mapping."""

    @pytest.mark.parametrize(
        "transcript",
        ["Someone broke into my car", "  padded  \n", "Ünïcödé \"quotes\" & emoji 🚨"],
    )
    async def test_body_carries_identity_and_exact_text(self, settings, make_http, transcript):
        http = make_http(
            _route({UPDATE_TRANSCRIPT_PATH: httpx.Response(200, json=_incident_json())})
        )
        relay = IncidentRelayClient(client=http, settings=settings)

        await relay.send_transcript(transcript, DEVICE_ID, caller=CallerRole.civilian)

        request = http.seen[0]
        body = json.loads(request.content)
        assert body == {
            "incident_id": DEVICE_ID,
            "transcript": transcript,
            "caller": "civilian",
        }
        assert str(request.url) == "http://vigilis.test/incident/update_transcript"
        assert request.headers["accept"] == "application/json"

    async def test_returns_incident_reference(self, settings, make_http):
        http = make_http(
            _route(
                {
                    UPDATE_TRANSCRIPT_PATH: httpx.Response(
                        200, json=_incident_json(caller="police officer")
                    )
                }
            )
        )
        relay = IncidentRelayClient(client=http, settings=settings)

        result = await relay.send_transcript("report", DEVICE_ID, caller="police officer")

        assert result == IncidentReference(**_incident_json(caller="police officer"))

    async def test_default_caller_is_unknown(self, settings, make_http):
        http = make_http(
            _route({UPDATE_TRANSCRIPT_PATH: httpx.Response(200, json=_incident_json())})
        )
        relay = IncidentRelayClient(client=http, settings=settings)

        await relay.send_transcript("x", DEVICE_ID)

        assert json.loads(http.seen[0].content)["caller"] == "unknown"

    async def test_non_success_status(self, settings, make_http):
        http = make_http(_route({UPDATE_TRANSCRIPT_PATH: httpx.Response(500, text="boom")}))
        relay = IncidentRelayClient(client=http, settings=settings)

        with pytest.raises(UpstreamError, match="Failed to send transcript: 500 boom") as exc_info:
            await relay.send_transcript("x", DEVICE_ID)
        assert exc_info.value.status == 500
        assert exc_info.value.body == "boom"

    async def test_malformed_success_body(self, settings, make_http):
        http = make_http(_route({UPDATE_TRANSCRIPT_PATH: httpx.Response(200, text="ok")}))
        relay = IncidentRelayClient(client=http, settings=settings)

        with pytest.raises(UpstreamError, match="Unexpected transcript response"):
            await relay.send_transcript("x", DEVICE_ID)

    async def test_timeout(self, settings, make_http):
        async def slow(request):
            await asyncio.sleep(5)
            return httpx.Response(200, json=_incident_json())

        relay = IncidentRelayClient(client=make_http(slow), settings=settings)

        with pytest.raises(RequestTimeoutError, match="Request timed out sending transcript"):
            await relay.send_transcript("x", DEVICE_ID, timeout=0.05)


# ---------------------------------------------------------------------------
# notify_civilian_call_started
# ---------------------------------------------------------------------------


class TestNotifyCivilianCallStarted:
    """Call-started event and the 404 fallback."""

    async def test_posts_event(self, settings, make_http):
        http = make_http(_route({CALL_STARTED_PATH: httpx.Response(200, json={"ok": True})}))
        relay = IncidentRelayClient(client=http, settings=settings)

        ack = await relay.notify_civilian_call_started(DEVICE_ID)

        assert ack.fallback_used is False
        assert ack.status_code == 200
        body = json.loads(http.seen[0].content)
        assert body["incident_id"] == DEVICE_ID
        assert body["caller"] == "civilian"
        assert "T" in body["timestamp"]
        assert len(http.seen) == 1

    async def test_404_falls_back_to_empty_transcript(self, settings, make_http):
        http = make_http(_route({CALL_STARTED_PATH: httpx.Response(404, text="Not Found")}))
        relay = IncidentRelayClient(client=http, settings=settings)
        incident = IncidentReference(**_incident_json())
        relay.send_transcript = AsyncMock(return_value=incident)

        ack = await relay.notify_civilian_call_started(DEVICE_ID)

        relay.send_transcript.assert_awaited_once_with(
            "", DEVICE_ID, timeout=5.0, caller=CallerRole.civilian
        )
        assert ack.fallback_used is True
        assert ack.incident == incident

    async def test_404_fallback_over_the_wire(self, settings, make_http):
        http = make_http(
            _route(
                {
                    CALL_STARTED_PATH: httpx.Response(404, text="Not Found"),
                    UPDATE_TRANSCRIPT_PATH: httpx.Response(200, json=_incident_json()),
                }
            )
        )
        relay = IncidentRelayClient(client=http, settings=settings)

        ack = await relay.notify_civilian_call_started(DEVICE_ID)

        assert [r.url.path for r in http.seen] == [CALL_STARTED_PATH, UPDATE_TRANSCRIPT_PATH]
        assert json.loads(http.seen[1].content) == {
            "incident_id": DEVICE_ID,
            "transcript": "",
            "caller": "civilian",
        }
        assert ack.incident_id == DEVICE_ID

    async def test_fallback_failure_reports_both_errors(self, settings, make_http):
        http = make_http(
            _route(
                {
                    CALL_STARTED_PATH: httpx.Response(404, text="route missing"),
                    UPDATE_TRANSCRIPT_PATH: httpx.Response(503, text="db down"),
                }
            )
        )
        relay = IncidentRelayClient(client=http, settings=settings)

        with pytest.raises(FallbackFailedError) as exc_info:
            await relay.notify_civilian_call_started(DEVICE_ID)

        message = str(exc_info.value)
        assert "route missing" in message
        assert "db down" in message
        assert "404" in exc_info.value.primary
        assert "503" in exc_info.value.fallback

    async def test_other_status_does_not_fall_back(self, settings, make_http):
        http = make_http(_route({CALL_STARTED_PATH: httpx.Response(500, text="crash")}))
        relay = IncidentRelayClient(client=http, settings=settings)
        relay.send_transcript = AsyncMock()

        with pytest.raises(UpstreamError) as exc_info:
            await relay.notify_civilian_call_started(DEVICE_ID)

        assert exc_info.value.status == 500
        relay.send_transcript.assert_not_awaited()

    async def test_timeout(self, settings, make_http):
        settings.notify_timeout = 0.05

        async def slow(request):
            await asyncio.sleep(5)
            return httpx.Response(200)

        relay = IncidentRelayClient(client=make_http(slow), settings=settings)

        with pytest.raises(RequestTimeoutError):
            await relay.notify_civilian_call_started(DEVICE_ID)


class TestClientLifecycle:
    async def test_shared_client_is_not_closed(self, settings, make_http):
        http = make_http(lambda request: httpx.Response(200))
        async with IncidentRelayClient(client=http, settings=settings):
            pass
        assert not http.is_closed

    async def test_owned_client_is_closed(self, settings):
        relay = IncidentRelayClient(settings=settings)
        await relay.aclose()
        assert relay._client.is_closed


class TestExplicitTimeout:
    async def test_zero_timeout_is_not_replaced_by_default(self, settings, make_http):
        http = make_http(lambda request: httpx.Response(200))
        relay = IncidentRelayClient(client=http, settings=settings)
        ok = httpx.Response(200, json=_incident_json())

        with patch(
            "vigilis.services.relay.client.request_with_deadline", AsyncMock(return_value=ok)
        ) as mock_request:
            await relay.send_transcript("x", DEVICE_ID, timeout=0)

        assert mock_request.await_args.kwargs["timeout"] == 0

    async def test_none_timeout_uses_settings(self, settings, make_http):
        http = make_http(lambda request: httpx.Response(200))
        relay = IncidentRelayClient(client=http, settings=settings)
        ok = httpx.Response(200, json=_incident_json())

        with patch(
            "vigilis.services.relay.client.request_with_deadline", AsyncMock(return_value=ok)
        ) as mock_request:
            await relay.send_transcript("x", DEVICE_ID)

        assert mock_request.await_args.kwargs["timeout"] == settings.send_timeout
