"""
SSML document construction and validation.

Two ways to build an utterance document:

    Direct:  build_utterance(text, voice, volume, rate, pitch, style, ...)
             <voice> holds one <prosody>, or one <mstts:express-as>
             wrapping that <prosody> when a style is given.

    Fluent:  SSMLBuilder(voice, lang).text(...).break_("500ms").build()
             <voice> holds the added nodes in insertion order.

Both frame the body the same way:

    <speak xmlns="http://www.w3.org/2001/10/synthesis"
           xmlns:mstts="http://www.w3.org/2001/mstts"
           xmlns:emo="http://www.w3.org/2009/10/emotionml"
           version="1.0" xml:lang="en-US"><voice name="...">...</voice></speak>

Caller-supplied documents are only checked structurally
(``is_speech_document``) and against a length ceiling; they are never
parsed or rewritten.
"""
from __future__ import annotations

from typing import List, Optional, Union

from tts_gateway.core.config import Defaults
from tts_gateway.services.errors import MarkupValidationError
from tts_gateway.ssml.nodes import (
    BreakNode,
    EmphasisLevel,
    EmphasisNode,
    ExpressAsNode,
    InterpretAs,
    Node,
    PercentValue,
    PhonemeAlphabet,
    PhonemeNode,
    ProsodyNode,
    SayAsNode,
    TextNode,
    coerce_enum,
    render_attrs,
)

SYNTHESIS_NS = "http://www.w3.org/2001/10/synthesis"
MSTTS_NS = "http://www.w3.org/2001/mstts"
EMOTIONML_NS = "http://www.w3.org/2009/10/emotionml"
SSML_VERSION = "1.0"

# xml:lang of build_utterance documents and the SSMLBuilder default
DEFAULT_LANGUAGE = "en-US"


def render_document(voice: str, body: str, lang: str = DEFAULT_LANGUAGE) -> str:
    """Wrap serialized voice content in the fixed <speak><voice> framing."""
    speak_attrs = render_attrs([
        ("xmlns", SYNTHESIS_NS),
        ("xmlns:mstts", MSTTS_NS),
        ("xmlns:emo", EMOTIONML_NS),
        ("version", SSML_VERSION),
        ("xml:lang", lang),
    ])
    voice_attrs = render_attrs([("name", voice)])
    return f"<speak{speak_attrs}><voice{voice_attrs}>{body}</voice></speak>"


def build_utterance(
    text: str,
    voice: str,
    volume: PercentValue = 100,
    rate: PercentValue = 0,
    pitch: PercentValue = 0,
    style: Optional[str] = None,
    style_degree: Optional[float] = None,
    role: Optional[str] = None,
) -> str:
    """
    Build a single-utterance document.

    Args:
        text: Text to speak (escaped).
        voice: Voice short name, e.g. "en-US-JennyNeural".
        volume: 0-100, rendered "<n>%".
        rate: -100-100, rendered "<n>%".
        pitch: -100-100, rendered "<n>%".
        style: Speaking style; empty or None means no express-as wrapper.
        style_degree: Style intensity, written only with a style.
        role: Role-play persona, written only with a style.

    Returns:
        The serialized SSML document.

    Example:
        >>> build_utterance("Hi", "v1", volume=80, rate=-10, pitch=5)
        '<speak ...><voice name="v1"><prosody volume="80%" rate="-10%" pitch="5%">Hi</prosody></voice></speak>'
    """
    prosody = ProsodyNode(
        content=text,
        rate=rate,
        pitch=pitch,
        volume=volume,
        attribute_order=("volume", "rate", "pitch"),
    )
    body: Node = prosody
    if style:
        body = ExpressAsNode(content=prosody, style=style, style_degree=style_degree, role=role)
    return render_document(voice, body.to_xml(), DEFAULT_LANGUAGE)


class SSML:
    """
    Object form of ``build_utterance``; ``str()`` renders the document.

    Example:
        >>> str(SSML("Hello", "en-US-JennyNeural", style="cheerful"))
    """

    def __init__(
        self,
        text: str,
        voice: str = Defaults.SSML_DEFAULT_VOICE,
        volume: PercentValue = 100,
        rate: PercentValue = 0,
        pitch: PercentValue = 0,
        style: Optional[str] = None,
        style_degree: Optional[float] = None,
        role: Optional[str] = None,
    ):
        self.text = text
        self.voice = voice
        self.volume = volume
        self.rate = rate
        self.pitch = pitch
        self.style = style
        self.style_degree = style_degree
        self.role = role

    def __str__(self) -> str:
        return build_utterance(
            self.text,
            self.voice,
            volume=self.volume,
            rate=self.rate,
            pitch=self.pitch,
            style=self.style,
            style_degree=self.style_degree,
            role=self.role,
        )

    to_string = __str__

    @staticmethod
    def is_ssml(candidate: str) -> bool:
        return is_speech_document(candidate)

    @staticmethod
    def from_string(ssml: str) -> str:
        return from_string(ssml)


class SSMLBuilder:
    """
    Fluent SSML builder.

    Every method except ``build()`` returns the builder, so calls chain.
    ``break_`` has a trailing underscore because ``break`` is a keyword;
    ``pause`` is an alias.

    Example:
        >>> doc = (SSMLBuilder("en-US-AriaNeural")
        ...        .express_as("Great news!", "cheerful", style_degree=1.5)
        ...        .break_("300ms")
        ...        .say_as("2026-01-15", "date", format="ymd")
        ...        .build())
    """

    def __init__(self, voice: str = Defaults.SSML_DEFAULT_VOICE, lang: str = DEFAULT_LANGUAGE):
        self.voice = voice
        self.lang = lang
        self._nodes: List[Node] = []

    @property
    def nodes(self) -> List[Node]:
        return list(self._nodes)

    def text(self, content: str) -> "SSMLBuilder":
        self._nodes.append(TextNode(content))
        return self

    def prosody(
        self,
        content: str,
        rate: Optional[PercentValue] = None,
        pitch: Optional[PercentValue] = None,
        volume: Optional[PercentValue] = None,
    ) -> "SSMLBuilder":
        self._nodes.append(ProsodyNode(content, rate=rate, pitch=pitch, volume=volume))
        return self

    def express_as(
        self,
        content: str,
        style: str,
        style_degree: Optional[float] = None,
        role: Optional[str] = None,
    ) -> "SSMLBuilder":
        if not style:
            raise MarkupValidationError("Invalid style: must not be empty", {"attribute": "style"})
        self._nodes.append(ExpressAsNode(content, style=style, style_degree=style_degree, role=role))
        return self

    def break_(self, time: str) -> "SSMLBuilder":
        self._nodes.append(BreakNode(time))
        return self

    pause = break_

    def emphasis(self, content: str, level: Union[str, EmphasisLevel] = EmphasisLevel.MODERATE) -> "SSMLBuilder":
        self._nodes.append(EmphasisNode(content, coerce_enum(EmphasisLevel, level, "emphasis level")))
        return self

    def phoneme(
        self,
        content: str,
        ph: str,
        alphabet: Union[str, PhonemeAlphabet] = PhonemeAlphabet.IPA,
    ) -> "SSMLBuilder":
        self._nodes.append(PhonemeNode(content, ph, coerce_enum(PhonemeAlphabet, alphabet, "phoneme alphabet")))
        return self

    def say_as(
        self,
        content: str,
        interpret_as: Union[str, InterpretAs],
        format: Optional[str] = None,
    ) -> "SSMLBuilder":
        self._nodes.append(SayAsNode(content, coerce_enum(InterpretAs, interpret_as, "interpret-as"), format))
        return self

    def build(self) -> str:
        """Serialize the document; with no nodes the voice element is empty."""
        body = "".join(node.to_xml() for node in self._nodes)
        return render_document(self.voice, body, self.lang)


def is_speech_document(candidate: Optional[str]) -> bool:
    """True iff the trimmed string starts with ``<speak`` and ends with ``</speak>``."""
    if not isinstance(candidate, str):
        return False
    stripped = candidate.strip()
    return stripped.startswith("<speak") and stripped.endswith("</speak>")


def from_string(ssml: str) -> str:
    """Return ``ssml`` unchanged if it is a speech document, else raise MarkupValidationError."""
    if not is_speech_document(ssml):
        raise MarkupValidationError("Invalid SSML format. Must start with <speak> and end with </speak>")
    return ssml


def validate_speech_document(ssml: str, max_length: int = Defaults.LIMITS_MAX_SSML_CHARS) -> str:
    """
    Accept a caller-supplied document for forwarding.

    The structural check runs before the length ceiling.

    Raises:
        MarkupValidationError: Not a speech document, or longer than ``max_length``.
    """
    from_string(ssml)
    if len(ssml) > max_length:
        raise MarkupValidationError(
            f"SSML too long (max {max_length} characters)",
            {"length": len(ssml), "max_length": max_length},
        )
    return ssml
