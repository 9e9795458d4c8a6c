"""Vigilis: record, transcribe, and relay emergency-call transcripts."""

__version__ = "0.1.0"
