"""Audio capture adapters.

Platform microphone capture lives outside this package; it only has to
implement ``BaseRecorder``. ``FileRecorder`` stands in for a microphone by
handing back an already-recorded file, which is what the CLI and the tests use.
"""

import logging
import mimetypes
from abc import ABC, abstractmethod
from pathlib import Path

from vigilis.core.exceptions import RecordingAlreadyActiveError
from vigilis.core.models import AudioResource

logger = logging.getLogger(__name__)


class BaseRecorder(ABC):
    """Interface that every audio capture adapter must implement."""

    @abstractmethod
    async def request_permission(self) -> bool:
        """Ask for microphone access. Returns True if granted."""

    @abstractmethod
    async def start(self) -> None:
        """Begin capturing audio."""

    @abstractmethod
    async def stop(self) -> AudioResource | None:
        """Finish capturing and return the recorded audio (None if unavailable)."""


class FileRecorder(BaseRecorder):
    """Recorder that "captures" a pre-recorded audio file.

    Args:
        path: Audio file returned by ``stop()``.
        mime_type: Upload mime type (guessed from the extension if omitted).
        permission_granted: Simulated answer to the permission prompt.
    """

    def __init__(
        self,
        path: str | Path,
        mime_type: str | None = None,
        permission_granted: bool = True,
    ) -> None:
        self._path = Path(path)
        self._mime_type = mime_type or mimetypes.guess_type(self._path.name)[0] or "audio/mp4"
        self._permission_granted = permission_granted
        self._active = False

    @property
    def is_recording(self) -> bool:
        return self._active

    async def request_permission(self) -> bool:
        return self._permission_granted

    async def start(self) -> None:
        if self._active:
            raise RecordingAlreadyActiveError()
        self._active = True
        logger.debug("File recorder started (%s)", self._path)

    async def stop(self) -> AudioResource | None:
        if not self._active:
            return None
        self._active = False
        if not self._path.exists():
            logger.error("Recorded file missing: %s", self._path)
            return None
        return AudioResource(
            uri=self._path.resolve().as_uri(),
            name=self._path.name,
            mime_type=self._mime_type,
        )
