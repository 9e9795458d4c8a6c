"""Screen controllers for the civilian and police tabs.

Each controller holds the state a screen renders (transcript text, loading
flag, send banners) and sequences the workflow::

    idle -> recording -> transcribing -> ready -> sending -> sent

A failed send drops back to ``ready`` with ``send_error`` set so the user
can retry. Rendering is left to whatever front end drives the controller.
"""

import logging
from enum import StrEnum

from vigilis.core.exceptions import (
    MicrophonePermissionError,
    RecordingAlreadyActiveError,
    StorageError,
    VigilisError,
)
from vigilis.core.models import CallerRole
from vigilis.services.audio.recorder import BaseRecorder
from vigilis.services.notifier import BackgroundNotifier
from vigilis.services.relay.client import IncidentRelayClient
from vigilis.services.storage.identity import DeviceIdentityProvider
from vigilis.services.transcription.base import BaseSTT

logger = logging.getLogger(__name__)

PLACEHOLDER_TEXT = "Tap 'Start Recording' to begin..."
RECORDING_TEXT = "Recording..."
STOPPING_TEXT = "Stopping recording and preparing for transcription..."
UPLOADING_TEXT = "Uploading audio for transcription..."
TRANSCRIPTION_FAILED_PREFIX = "Transcription failed: "
STATUS_TEXTS = frozenset({PLACEHOLDER_TEXT, RECORDING_TEXT, STOPPING_TEXT, UPLOADING_TEXT})


class ScreenState(StrEnum):
    """Workflow position of a screen."""

    idle = "idle"
    recording = "recording"
    transcribing = "transcribing"
    ready = "ready"
    sending = "sending"
    sent = "sent"


# Recording, transcribing and sending each own the recorder or the screen state.
STARTABLE_STATES = frozenset({ScreenState.idle, ScreenState.ready, ScreenState.sent})


class ScreenController:
    """Capture -> transcribe -> relay workflow for one caller role.

    Args:
        role: Caller tag attached to every transcript.
        recorder: Audio capture adapter.
        stt: Speech-to-text provider.
        relay: Incident service client.
        identity: Device identity provider.
        send_timeout: Deadline for transcript submission in seconds.
    """

    role: CallerRole = CallerRole.unknown

    def __init__(
        self,
        recorder: BaseRecorder,
        stt: BaseSTT,
        relay: IncidentRelayClient,
        identity: DeviceIdentityProvider,
        send_timeout: float = 15.0,
    ) -> None:
        self._recorder = recorder
        self._stt = stt
        self._relay = relay
        self._identity = identity
        self._send_timeout = send_timeout

        self.state = ScreenState.idle
        self.transcript = PLACEHOLDER_TEXT
        self.transcription_failed = False
        self.is_loading = False
        self.device_id: str | None = None
        self.incident_id: str | None = None
        self.send_error: str | None = None
        self.send_success: str | None = None

    async def initialize(self) -> None:
        """Resolve the device identity; failure only disables sending."""
        try:
            self.device_id = await self._identity.get_or_create_device_id()
        except StorageError as exc:
            logger.error("Error initializing device ID: %s", exc)
            self.send_error = "Failed to initialize device ID"

    # -- recording --

    async def _on_recording_started(self) -> None:
        """Hook for role-specific side effects of a new recording."""

    async def start_recording(self) -> None:
        if self.state not in STARTABLE_STATES:
            raise RecordingAlreadyActiveError()

        try:
            if not await self._recorder.request_permission():
                raise MicrophonePermissionError()
            await self._on_recording_started()
            await self._recorder.start()
        except Exception as exc:
            logger.exception("Failed to start recording")
            self.transcript = f"Error starting recording: {exc}"
            self.state = ScreenState.idle
            return

        self.state = ScreenState.recording
        self.transcript = RECORDING_TEXT

    async def stop_recording(self) -> None:
        if self.state != ScreenState.recording:
            return

        self.state = ScreenState.transcribing
        self.is_loading = True
        self.transcript = STOPPING_TEXT
        try:
            resource = await self._recorder.stop()
            if resource is None:
                raise VigilisError("Could not retrieve recorded audio.")
            self.transcript = UPLOADING_TEXT
            text = await self._stt.transcribe_audio(resource)
        except Exception as exc:
            logger.exception("Failed to stop recording or transcribe")
            self.transcript = f"{TRANSCRIPTION_FAILED_PREFIX}{exc}"
            self.transcription_failed = True
        else:
            self.transcript = text
            self.transcription_failed = False
            self.send_error = None
            self.send_success = None
        finally:
            self.is_loading = False
            self.state = ScreenState.ready

    # -- sending --

    def _has_sendable_transcript(self) -> bool:
        if self.transcription_failed or not self.transcript:
            return False
        if self.transcript in STATUS_TEXTS:
            return False
        return not self.transcript.startswith(("Recording", "Tap"))

    async def send(self) -> None:
        sendable_state = self.state in (ScreenState.ready, ScreenState.sent)
        if not sendable_state or not self._has_sendable_transcript():
            self.send_error = "No transcript to send"
            return
        if not self.device_id:
            self.send_error = "Device ID not initialized"
            return

        self.state = ScreenState.sending
        self.send_error = None
        self.send_success = None
        try:
            incident = await self._relay.send_transcript(
                self.transcript,
                self.device_id,
                timeout=self._send_timeout,
                caller=self.role,
            )
        except VigilisError as exc:
            logger.error("Failed to send transcript: %s", exc)
            self.send_error = exc.detail
            self.state = ScreenState.ready
            return

        self.incident_id = incident.incident_id
        self.send_success = f"Transcript sent successfully to incident {incident.incident_id}"
        self.state = ScreenState.sent


class CivilianScreen(ScreenController):
    """Civilian tab: announces each new call before recording starts."""

    role = CallerRole.civilian

    def __init__(self, *args, notifier: BackgroundNotifier | None = None, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._notifier = notifier or BackgroundNotifier()

    @property
    def notifier(self) -> BackgroundNotifier:
        return self._notifier

    async def _on_recording_started(self) -> None:
        if self.device_id:
            self._notifier.spawn(
                self._relay.notify_civilian_call_started(self.device_id),
                name="call-started",
            )


class PoliceScreen(ScreenController):
    """Police tab: same workflow, tagged as a police officer."""

    role = CallerRole.police_officer
