"""
Command-Line Interface for tts-gateway.

Builds and checks speech documents without running the HTTP server, and
optionally synthesizes through the configured connector.

Usage Examples:
    # Print the document the gateway would send upstream
    tts-gateway "Hello world" --voice en-US-JennyNeural --rate 10 --dry-run

    # Speaking style with intensity
    tts-gateway "Great news!" --voice en-US-JennyNeural --style cheerful --styledegree 1.5 --dry-run

    # Synthesize to a file (needs the azure extra and AZURE_SPEECH_KEY)
    tts-gateway --text "Hello" --voice en-US-JennyNeural --out hello.mp3

    # Validate an existing SSML document
    tts-gateway --check story.ssml

Environment Variables:
    TTS_GW_SETTINGS: Settings file (default config/settings.yaml)
    TTS_GW_CONNECTOR: Connector override
    AZURE_SPEECH_KEY / AZURE_SPEECH_REGION: Azure credentials
"""

from __future__ import annotations

import argparse
import json
from pathlib import Path
from typing import Dict, List, Optional
from uuid import uuid4

from tts_gateway.core.config import GatewayConfig, load_settings, settings_path
from tts_gateway.core.logging import configure_logging, get_logger, info, set_request_id
from tts_gateway.services.errors import GatewayError
from tts_gateway.services.speech_service import SpeechService, TextSpeechParams
from tts_gateway.ssml import build_utterance, validate_speech_document


def _parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="tts-gateway CLI (build, check and synthesize SSML)")

    # Input
    parser.add_argument("text_pos", nargs="?", help="Text to speak (positional)")
    parser.add_argument("--text", help="Text to speak")
    parser.add_argument("--check", metavar="FILE", help="Validate an SSML document file and exit")

    # Voice and prosody (same names and ranges as /api/text-to-speech)
    parser.add_argument("--voice", help="Voice short name (default: ssml.default_voice)")
    parser.add_argument("--pitch", help="Pitch offset, -100..100")
    parser.add_argument("--rate", help="Rate offset, -100..100")
    parser.add_argument("--volume", help="Volume, 0..100")
    parser.add_argument("--style", help="Speaking style (express-as)")
    parser.add_argument("--styledegree", help="Style intensity, 0.01..2")
    parser.add_argument("--role", help="Role-play persona")

    # Output
    parser.add_argument("--out", help="Output audio path")
    parser.add_argument("--dry-run", action="store_true",
                        help="Print the SSML document without synthesis")
    parser.add_argument("--json", action="store_true",
                        help="Print JSON summary")
    parser.add_argument("--settings", help="Settings file (overrides TTS_GW_SETTINGS)")

    return parser.parse_args(argv)


def _query_from_args(args: argparse.Namespace, config: GatewayConfig) -> Dict[str, str]:
    """Map CLI options onto the query parameters the HTTP endpoint accepts."""
    query = {
        "text": args.text or args.text_pos,
        "voice": args.voice or config.ssml.default_voice,
        "pitch": args.pitch,
        "rate": args.rate,
        "volume": args.volume,
        "style": args.style,
        "styledegree": args.styledegree,
        "role": args.role,
    }
    return {key: value for key, value in query.items() if value is not None}


def _emit(payload: dict, as_json: bool) -> None:
    if as_json:
        print(json.dumps(payload, ensure_ascii=False))
    else:
        print(payload)


def _check_file(path: str, config: GatewayConfig, as_json: bool) -> int:
    ssml = Path(path).read_text(encoding="utf-8")
    try:
        validate_speech_document(ssml, config.limits.max_ssml_chars)
    except GatewayError as e:
        _emit({**e.to_dict(), "file": path}, as_json)
        return 1
    _emit({"ok": True, "file": path, "chars": len(ssml)}, as_json)
    print("CHECK_OK")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main CLI entry point.

    Returns:
        Exit code: 0 on success, 1 for a rejected document or failed
        synthesis, 2 for invalid arguments.
    """
    args = _parse_args(argv)

    configure_logging()
    log = get_logger("tts-gateway.cli")
    set_request_id(str(uuid4())[:12])

    settings = load_settings(args.settings or settings_path(), missing_ok=True)
    config = settings.get_gateway_config()

    if args.check:
        return _check_file(args.check, config, args.json)

    if not (args.text or args.text_pos):
        raise SystemExit("Provide --text, a positional text, or --check FILE.")

    try:
        params = TextSpeechParams.from_query(_query_from_args(args, config), config.limits.max_text_chars)
    except GatewayError as e:
        _emit(e.to_dict(), args.json)
        return 2

    if args.dry_run:
        ssml = build_utterance(
            params.text,
            params.voice,
            volume=params.volume,
            rate=params.rate,
            pitch=params.pitch,
            style=params.style,
            style_degree=params.style_degree,
            role=params.role,
        )
        info(log, "dry_run", voice=params.voice, chars=len(params.text))
        if args.json:
            _emit({"ok": True, "dry_run": True, "voice": params.voice, "ssml": ssml}, True)
        else:
            print(ssml)
        print("DRY_RUN_OK")
        return 0

    # Connector SDKs are only imported when synthesis is requested
    from tts_gateway.connectors import get_connector

    out_path = Path(args.out or "out.mp3")
    out_path.parent.mkdir(parents=True, exist_ok=True)
    try:
        service = SpeechService(settings, get_connector(settings), config=config)
        speech = service.synthesize_text(params)
    except GatewayError as e:
        _emit(e.to_dict(), args.json)
        return 1

    out_path.write_bytes(speech.audio)
    _emit({
        "ok": True,
        "dry_run": False,
        "out": str(out_path),
        "bytes": len(speech.audio),
        "content_type": speech.content_type,
    }, args.json)
    print("CLI_OK")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
