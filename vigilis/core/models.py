"""
Pydantic v2 models shared by the clients and screen controllers.

Request bodies for the incident service, its responses, and the audio
resource handed from the recorder to the transcription client.
"""

from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, model_validator

# ---------------------------------------------------------------------------
# Roles
# ---------------------------------------------------------------------------


class CallerRole(StrEnum):
    """Caller tag forwarded verbatim to the incident service."""

    civilian = "civilian"
    police_officer = "police officer"
    unknown = "unknown"


# ---------------------------------------------------------------------------
# Audio
# ---------------------------------------------------------------------------


class AudioResource(BaseModel):
    """Captured audio: a local file reference or an in-memory blob.

    Exactly one of ``uri`` and ``data`` must be set.
    """

    model_config = ConfigDict(frozen=True)

    uri: str | None = None
    data: bytes | None = None
    name: str = "recording.m4a"
    mime_type: str = "audio/mp4"

    @model_validator(mode="after")
    def _one_source(self) -> "AudioResource":
        if (self.uri is None) == (self.data is None):
            raise ValueError("AudioResource needs exactly one of 'uri' or 'data'")
        return self


# ---------------------------------------------------------------------------
# Incident service
# ---------------------------------------------------------------------------


class TranscriptUpdate(BaseModel):
    """POST /incident/update_transcript request body."""

    incident_id: str
    transcript: str
    caller: CallerRole = CallerRole.unknown


class CallStartedEvent(BaseModel):
    """POST /incident/callStarted request body."""

    incident_id: str
    caller: CallerRole = CallerRole.civilian
    timestamp: datetime


class IncidentReference(BaseModel):
    """Incident service response to a transcript update."""

    model_config = ConfigDict(extra="ignore")

    status: str
    message: str = ""
    incident_id: str
    caller: str = CallerRole.unknown.value


class CallStartedAck(BaseModel):
    """Outcome of a call-started notification.

    ``fallback_used`` is True when the route was missing (404) and the
    incident was created through an empty transcript update instead.
    """

    incident_id: str
    status_code: int
    fallback_used: bool = False
    incident: IncidentReference | None = None
