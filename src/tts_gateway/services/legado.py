"""
Legado reader import record.

Legado (an Android e-book reader) imports an HTTP TTS engine from a JSON
record whose ``url`` is a template the app fills in while reading:

    {{(speakSpeed - 10) * 2}}        reader speed -> gateway rate (-100..100)
    {{java.encodeURI(speakText)}}    the sentence being read

The record points back at this gateway's /api/text-to-speech and carries the
bearer token in ``header`` when a secret is configured.
"""
from __future__ import annotations

import json
import time
from typing import Any, Dict, Optional
from urllib.parse import quote

from tts_gateway.utils.numbers import Number, format_number

RATE_TEMPLATE = "{{(speakSpeed - 10) * 2}}"
TEXT_TEMPLATE = "{{java.encodeURI(speakText)}}"

# Characters encodeURIComponent leaves alone
_URI_COMPONENT_SAFE = "-_.!~*'()"


def encode_uri_component(value: str) -> str:
    return quote(value, safe=_URI_COMPONENT_SAFE)


def build_legado_import(
    host: str,
    voice: str,
    pitch: Number = 0,
    volume: Number = 100,
    personality: Optional[str] = None,
    protocol: str = "http",
    token: Optional[str] = None,
    now_ms: Optional[int] = None,
) -> Dict[str, Any]:
    """
    Build the import record for one voice.

    Args:
        host: Host (and port) the reader should call, from the Host header.
        voice: Voice short name; also the record's display name.
        pitch: Fixed pitch for the imported engine.
        volume: Fixed volume for the imported engine.
        personality: Optional speaking style.
        protocol: "http" or "https".
        token: Shared secret to embed as a bearer header.
        now_ms: Record id; defaults to the current epoch milliseconds.
    """
    options = [("voice", voice), ("volume", format_number(volume)), ("pitch", format_number(pitch))]
    if personality:
        options.append(("personality", personality))

    query = "&".join(f"{key}={encode_uri_component(str(value))}" for key, value in options)
    url = (
        f"{protocol}://{host}/api/text-to-speech?{query}"
        f"&rate={RATE_TEMPLATE}&text={TEXT_TEMPLATE}"
    )
    header = {"Authorization": f"Bearer {token}"} if token else {}

    return {
        "name": voice,
        "contentType": "audio/mpeg",
        "id": now_ms if now_ms is not None else int(time.time() * 1000),
        "loginCheckJs": "",
        "loginUi": "",
        "loginUrl": "",
        "url": url,
        "header": json.dumps(header, separators=(",", ":")),
    }
