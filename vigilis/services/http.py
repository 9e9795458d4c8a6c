"""Deadline-bounded httpx requests with errors mapped onto the Vigilis hierarchy."""

import asyncio
import logging

import httpx

from vigilis.core.exceptions import RequestTimeoutError, UpstreamError

logger = logging.getLogger(__name__)


async def request_with_deadline(
    client: httpx.AsyncClient,
    method: str,
    url: str,
    timeout: float,
    timeout_message: str,
    **kwargs,
) -> httpx.Response:
    """Execute one HTTP request that is cancelled once ``timeout`` elapses.

    The deadline covers the whole exchange, not only socket reads, so a
    server that trickles its response still gets aborted.

    Args:
        client: Shared async client.
        method: HTTP method name ("get", "post", ...).
        url: Absolute URL or path relative to the client's base URL.
        timeout: Deadline in seconds.
        timeout_message: Detail for the raised RequestTimeoutError.
        **kwargs: Passed through to httpx (json, data, files, headers, ...).

    Returns:
        The httpx Response, whatever its status code.

    Raises:
        RequestTimeoutError: On client-side timeout.
        UpstreamError: With status 0 when no response was received.
    """
    try:
        return await asyncio.wait_for(
            client.request(method, url, timeout=timeout, **kwargs),
            timeout=timeout,
        )
    except (TimeoutError, httpx.TimeoutException):
        logger.warning("%s %s aborted after %.1fs", method.upper(), url, timeout)
        raise RequestTimeoutError(timeout_message) from None
    except httpx.HTTPError as exc:
        raise UpstreamError(0, f"Network error: {exc}") from exc


def ensure_success(response: httpx.Response, context: str) -> httpx.Response:
    """Raise UpstreamError for any non-2xx response."""
    if not response.is_success:
        raise UpstreamError(response.status_code, response.text, context=context)
    return response
