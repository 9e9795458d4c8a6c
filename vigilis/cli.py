"""
Vigilis Transcript Relay

Runs one screen's record -> transcribe -> send workflow against an audio
file, the way the mobile tabs do against the microphone.

Usage:
    vigilis-relay call.m4a                    # civilian caller
    vigilis-relay statement.wav --role police
"""

import argparse
import asyncio
import logging
import sys

import httpx

from vigilis.core.config import get_settings
from vigilis.services.audio import FileRecorder
from vigilis.services.relay import IncidentRelayClient
from vigilis.services.storage import create_identity_provider
from vigilis.services.transcription import create_stt
from vigilis.ui import CivilianScreen, PoliceScreen, ScreenState

logger = logging.getLogger(__name__)

SCREENS = {"civilian": CivilianScreen, "police": PoliceScreen}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Transcribe an audio file and relay it to the incident service",
    )
    parser.add_argument("audio_file", help="Recorded audio to transcribe")
    parser.add_argument(
        "--role",
        choices=sorted(SCREENS),
        default="civilian",
        help="Caller role (default: civilian)",
    )
    parser.add_argument("--mime-type", help="Upload mime type (guessed from extension)")
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Transcribe only; do not send the transcript",
    )
    return parser


async def run(args: argparse.Namespace) -> int:
    """Drive one screen through the workflow. Returns the exit code."""
    settings = get_settings()
    recorder = FileRecorder(args.audio_file, mime_type=args.mime_type)

    async with httpx.AsyncClient() as http:
        stt = create_stt("elevenlabs", client=http, settings=settings)
        relay = IncidentRelayClient(client=http, settings=settings)
        screen = SCREENS[args.role](
            recorder,
            stt,
            relay,
            create_identity_provider(settings),
            send_timeout=settings.send_timeout,
        )

        await screen.initialize()
        await screen.start_recording()
        await screen.stop_recording()
        print(f"Transcription: {screen.transcript}")

        if not args.dry_run:
            await screen.send()
        if isinstance(screen, CivilianScreen):
            await screen.notifier.drain()

    if screen.transcription_failed:
        print(f"Error: {screen.transcript}", file=sys.stderr)
        return 1
    if screen.send_error:
        print(f"Error: {screen.send_error}", file=sys.stderr)
        return 1
    if screen.state == ScreenState.sent:
        print(screen.send_success)
    return 0


def main(argv: list[str] | None = None) -> None:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=get_settings().log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    sys.exit(asyncio.run(run(args)))


if __name__ == "__main__":
    main()
