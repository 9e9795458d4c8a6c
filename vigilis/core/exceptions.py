"""
Vigilis exception hierarchy.

All client-side failures inherit from VigilisError so that screen
controllers can render any of them as a user-visible message.
"""

from datetime import UTC, datetime


class VigilisError(Exception):
    """Base exception for all Vigilis errors."""

    def __init__(
        self,
        detail: str = "An unexpected error occurred",
        code: str = "VIGILIS_ERROR",
    ) -> None:
        self.detail = detail
        self.code = code
        self.timestamp = datetime.now(UTC).isoformat()
        super().__init__(detail)


class ConfigurationError(VigilisError):
    """Raised when a required setting (e.g. the STT API key) is missing."""

    def __init__(self, detail: str) -> None:
        super().__init__(detail=detail, code="CONFIGURATION_ERROR")


class RequestTimeoutError(VigilisError):
    """Raised when a request exceeds its client-side deadline and is aborted."""

    def __init__(self, detail: str = "Request timed out") -> None:
        super().__init__(detail=detail, code="REQUEST_TIMEOUT")


class UpstreamError(VigilisError):
    """Raised on a non-success response from a remote service.

    ``status`` is 0 when the request never produced a response
    (connection refused, DNS failure, ...).
    """

    def __init__(self, status: int, body: str, context: str = "Request failed") -> None:
        self.status = status
        self.body = body
        super().__init__(
            detail=f"{context}: {status} {body}".rstrip(),
            code="UPSTREAM_ERROR",
        )


class StorageError(VigilisError):
    """Raised when the local key-value store cannot be read or written."""

    def __init__(self, detail: str = "Local storage unavailable") -> None:
        super().__init__(detail=detail, code="STORAGE_ERROR")


class FallbackFailedError(VigilisError):
    """Raised when callStarted returned 404 and the fallback send failed too."""

    def __init__(self, primary: str, fallback: str) -> None:
        self.primary = primary
        self.fallback = fallback
        super().__init__(
            detail=(
                f"Call-started notification failed ({primary}); "
                f"fallback transcript update also failed ({fallback})"
            ),
            code="FALLBACK_FAILED",
        )


class MicrophonePermissionError(VigilisError):
    """Raised when microphone access is denied."""

    def __init__(self) -> None:
        super().__init__(
            detail="Microphone permission is required!",
            code="MICROPHONE_PERMISSION_DENIED",
        )


class RecordingAlreadyActiveError(VigilisError):
    """Raised when trying to start a recording while one is already active."""

    def __init__(self) -> None:
        super().__init__(
            detail="A recording is already active",
            code="RECORDING_ALREADY_ACTIVE",
        )
