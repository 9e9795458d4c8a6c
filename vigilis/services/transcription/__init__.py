"""
Transcription module - Speech-to-text abstraction layer.

Factory function for creating STT instances based on provider configuration.
"""

from .base import BaseSTT
from .decoding import TranscriptionPayload, decode_transcription

__all__ = ["BaseSTT", "TranscriptionPayload", "create_stt", "decode_transcription"]


def create_stt(provider: str = "elevenlabs", **kwargs) -> BaseSTT:
    """
    Factory function to create STT instance based on provider.

    Args:
        provider: STT provider name ("elevenlabs")
        **kwargs: Provider-specific configuration

    Returns:
        BaseSTT implementation instance

    Raises:
        ValueError: If provider is unknown
    """
    if provider == "elevenlabs":
        from .elevenlabs import ElevenLabsSTT
        return ElevenLabsSTT(**kwargs)
    else:
        raise ValueError(f"Unknown STT provider: {provider}")
