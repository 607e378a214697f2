"""
SSML (Speech Synthesis Markup Language) construction.

    - nodes.py: Node variants and enumerated attribute values
    - builder.py: build_utterance / SSML, SSMLBuilder, document validation

Usage:
    from tts_gateway.ssml import SSMLBuilder, build_utterance, is_speech_document

    doc = build_utterance("Hello", "en-US-JennyNeural", rate=10)
    doc = SSMLBuilder("en-US-JennyNeural").text("Hello").break_("1s").build()
"""
from .builder import (
    SSML,
    SSMLBuilder,
    build_utterance,
    from_string,
    is_speech_document,
    render_document,
    validate_speech_document,
)
from .nodes import (
    BreakNode,
    EmphasisLevel,
    EmphasisNode,
    ExpressAsNode,
    InterpretAs,
    PhonemeAlphabet,
    PhonemeNode,
    ProsodyNode,
    SayAsNode,
    SSMLNode,
    TextNode,
)

__all__ = [
    "SSML",
    "SSMLBuilder",
    "build_utterance",
    "from_string",
    "is_speech_document",
    "render_document",
    "validate_speech_document",
    "BreakNode",
    "EmphasisLevel",
    "EmphasisNode",
    "ExpressAsNode",
    "InterpretAs",
    "PhonemeAlphabet",
    "PhonemeNode",
    "ProsodyNode",
    "SayAsNode",
    "SSMLNode",
    "TextNode",
]
