"""Decoding of speech-to-text response bodies.

The upstream response shape is not contractually stable, so the body is
classified into one of a closed set of payload variants. Every variant
renders to displayable text; decoding itself never raises.

Recognition order:

1. the body is a JSON string
2. a string ``text`` / ``content`` / ``transcript`` field (in that order)
3. a ``channels`` array whose items carry ``content|text|transcript``
4. anything else is kept verbatim as ``UnrecognizedPayload``
"""

import json
from dataclasses import dataclass
from typing import Any

TEXT_FIELDS = ("text", "content", "transcript")

NO_TRANSCRIPTION_MESSAGE = "No transcription returned from speech-to-text service."
UNEXPECTED_PREFIX = "Unexpected transcription response: "


@dataclass(frozen=True)
class PlainText:
    """Body was a bare JSON string."""

    text: str

    def render(self) -> str:
        return self.text


@dataclass(frozen=True)
class FieldText:
    """Body was an object with a single top-level text field."""

    field: str
    text: str

    def render(self) -> str:
        return self.text


@dataclass(frozen=True)
class ChannelText:
    """Multi-channel body; one text per channel that produced any."""

    texts: tuple[str, ...]

    def render(self) -> str:
        return " ".join(self.texts)


@dataclass(frozen=True)
class EmptyPayload:
    """Body was missing, null or not JSON."""

    def render(self) -> str:
        return NO_TRANSCRIPTION_MESSAGE


@dataclass(frozen=True)
class UnrecognizedPayload:
    """Body parsed, but matched no known shape."""

    raw: Any

    def render(self) -> str:
        return UNEXPECTED_PREFIX + json.dumps(self.raw, ensure_ascii=False)


TranscriptionPayload = PlainText | FieldText | ChannelText | EmptyPayload | UnrecognizedPayload


def _channel_text(channel: Any) -> str | None:
    if not isinstance(channel, dict):
        return None
    for field in TEXT_FIELDS:
        value = channel.get(field)
        if value:
            return str(value)
    return None


def decode_transcription(data: Any) -> TranscriptionPayload:
    """Classify a parsed response body into a payload variant."""
    if data is None:
        return EmptyPayload()
    if isinstance(data, str):
        return PlainText(data)
    if isinstance(data, dict):
        for field in TEXT_FIELDS:
            if isinstance(data.get(field), str):
                return FieldText(field, data[field])

        channels = data.get("channels")
        if isinstance(channels, list):
            texts = tuple(t for t in (_channel_text(c) for c in channels) if t)
            if texts:
                return ChannelText(texts)

    return UnrecognizedPayload(data)


def decode_response_body(body: bytes | str) -> TranscriptionPayload:
    """Parse raw bytes and classify them; unparseable bodies are empty."""
    if not body:
        return EmptyPayload()
    try:
        data = json.loads(body)
    except ValueError:
        return EmptyPayload()
    return decode_transcription(data)
