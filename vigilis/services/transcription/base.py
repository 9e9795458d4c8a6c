"""
Abstract base class for Speech-to-Text providers.

All STT implementations must implement this interface, enabling
provider-agnostic transcription in the screen controllers.
"""

from abc import ABC, abstractmethod

from vigilis.core.models import AudioResource


class BaseSTT(ABC):
    """Interface that every STT provider must implement."""

    @abstractmethod
    async def transcribe_audio(self, resource: AudioResource, timeout: float | None = None) -> str:
        """Transcribe one captured audio resource to text.

        Args:
            resource: Audio produced by a recorder; consumed once.
            timeout: Client-side deadline in seconds (provider default if None).

        Returns:
            Renderable transcript text. Unknown response shapes produce a
            diagnostic string rather than an exception.
        """

    async def aclose(self) -> None:
        """Release network resources held by the provider."""
