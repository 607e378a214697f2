"""
tts-gateway: Rate-limited, authenticated gateway for cloud neural text-to-speech.

Sits between client applications (readers, browser extensions, scripts) and
an upstream speech engine. Every request passes an admission gate (sliding
window rate limit, then shared-secret check), has its parameters validated,
and is turned into an SSML document before the connector forwards it.

Key Features:
    - Plain-text synthesis (/api/text-to-speech) with prosody and speaking styles
    - Caller-supplied SSML passthrough (/api/ssml) with structural checks
    - Voice catalog lookup (/api/voices)
    - Legado reader import record (/api/legado-import)
    - Fluent SSML builder usable as a library
    - Prometheus metrics and JSONL logging

Example Usage:
    >>> from tts_gateway.ssml import SSMLBuilder
    >>> doc = (SSMLBuilder(voice="en-US-JennyNeural")
    ...        .text("Hello")
    ...        .break_("500ms")
    ...        .prosody("world", rate=10)
    ...        .build())
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
