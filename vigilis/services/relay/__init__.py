"""Incident relay module - client for the Vigilis incident service."""

from .client import CALL_STARTED_PATH, UPDATE_TRANSCRIPT_PATH, IncidentRelayClient

__all__ = ["CALL_STARTED_PATH", "UPDATE_TRANSCRIPT_PATH", "IncidentRelayClient"]
