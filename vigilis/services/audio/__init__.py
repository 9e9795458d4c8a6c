"""Audio capture adapters."""

from .recorder import BaseRecorder, FileRecorder

__all__ = ["BaseRecorder", "FileRecorder"]
