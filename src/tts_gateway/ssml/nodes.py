"""
SSML node variants.

The fluent builder keeps an ordered list of nodes drawn from a closed set.
Each node is a frozen dataclass that knows how to serialize itself:

    TextNode        plain text
    ProsodyNode     <prosody rate pitch volume>
    ExpressAsNode   <mstts:express-as style styledegree role>
    BreakNode       <break time/>
    EmphasisNode    <emphasis level>
    PhonemeNode     <phoneme alphabet ph>
    SayAsNode       <say-as interpret-as format>

Text is XML-escaped; so are attribute values. Percent attributes accept a
number (rendered as ``"<n>%"``) or a pre-formatted string passed through
unchanged, e.g. ``"+10%"``, ``"x-slow"``, ``"+2st"``.
"""
from __future__ import annotations

import html
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Tuple, Type, TypeVar, Union

from tts_gateway.services.errors import MarkupValidationError
from tts_gateway.utils.numbers import format_number

PercentValue = Union[int, float, str]

E = TypeVar("E", bound=Enum)


class EmphasisLevel(str, Enum):
    STRONG = "strong"
    MODERATE = "moderate"
    REDUCED = "reduced"


class PhonemeAlphabet(str, Enum):
    IPA = "ipa"
    SAPI = "sapi"


class InterpretAs(str, Enum):
    NUMBER = "number"
    ORDINAL = "ordinal"
    DIGITS = "digits"
    DATE = "date"
    TIME = "time"
    TELEPHONE = "telephone"


def coerce_enum(enum_cls: Type[E], value: Union[str, E], attribute: str) -> E:
    """Convert ``value`` to ``enum_cls`` or raise MarkupValidationError."""
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(str(value).strip().lower())
    except ValueError:
        allowed = ", ".join(m.value for m in enum_cls)
        raise MarkupValidationError(
            f"Invalid {attribute}: {value!r} (expected one of: {allowed})",
            {"attribute": attribute},
        ) from None


def format_percent(value: PercentValue) -> str:
    """5 -> "5%", -10.0 -> "-10%", "+20%" -> "+20%"."""
    if isinstance(value, str):
        return value
    return f"{format_number(value)}%"


def escape_text(text: str) -> str:
    return html.escape(text, quote=False)


def render_attrs(attrs: List[Tuple[str, Optional[str]]]) -> str:
    """Render ``[(name, value)]`` in order, skipping None values."""
    return "".join(
        f' {name}="{html.escape(value, quote=True)}"'
        for name, value in attrs
        if value is not None
    )


class SSMLNode:
    """Base of all node variants."""

    def to_xml(self) -> str:
        raise NotImplementedError


def _render_content(content: Union[str, SSMLNode]) -> str:
    if isinstance(content, SSMLNode):
        return content.to_xml()
    return escape_text(content)


@dataclass(frozen=True)
class TextNode(SSMLNode):
    text: str

    def to_xml(self) -> str:
        return escape_text(self.text)


@dataclass(frozen=True)
class ProsodyNode(SSMLNode):
    """
    Prosody-wrapped text.

    ``attribute_order`` controls serialization order; the direct builder
    writes volume, rate, pitch while the fluent builder writes rate, pitch,
    volume. Unset attributes are omitted.
    """
    content: str
    rate: Optional[PercentValue] = None
    pitch: Optional[PercentValue] = None
    volume: Optional[PercentValue] = None
    attribute_order: Tuple[str, ...] = ("rate", "pitch", "volume")

    def to_xml(self) -> str:
        attrs = []
        for name in self.attribute_order:
            value = getattr(self, name)
            attrs.append((name, format_percent(value) if value is not None else None))
        return f"<prosody{render_attrs(attrs)}>{escape_text(self.content)}</prosody>"


@dataclass(frozen=True)
class ExpressAsNode(SSMLNode):
    """
    Expressive speaking style.

    ``style_degree`` is Azure's intensity multiplier (0.01 to 2) and is
    written as a plain number. ``content`` may be text or a nested node.
    """
    content: Union[str, SSMLNode]
    style: str
    style_degree: Optional[float] = None
    role: Optional[str] = None

    def to_xml(self) -> str:
        attrs = render_attrs([
            ("style", self.style),
            ("styledegree", format_number(self.style_degree) if self.style_degree is not None else None),
            ("role", self.role or None),
        ])
        return f"<mstts:express-as{attrs}>{_render_content(self.content)}</mstts:express-as>"


@dataclass(frozen=True)
class BreakNode(SSMLNode):
    time: str

    def to_xml(self) -> str:
        return f"<break{render_attrs([('time', self.time)])}/>"


@dataclass(frozen=True)
class EmphasisNode(SSMLNode):
    content: str
    level: EmphasisLevel = EmphasisLevel.MODERATE

    def to_xml(self) -> str:
        attrs = render_attrs([("level", self.level.value)])
        return f"<emphasis{attrs}>{escape_text(self.content)}</emphasis>"


@dataclass(frozen=True)
class PhonemeNode(SSMLNode):
    content: str
    ph: str
    alphabet: PhonemeAlphabet = PhonemeAlphabet.IPA

    def to_xml(self) -> str:
        attrs = render_attrs([("alphabet", self.alphabet.value), ("ph", self.ph)])
        return f"<phoneme{attrs}>{escape_text(self.content)}</phoneme>"


@dataclass(frozen=True)
class SayAsNode(SSMLNode):
    content: str
    interpret_as: InterpretAs
    format: Optional[str] = None

    def to_xml(self) -> str:
        attrs = render_attrs([
            ("interpret-as", self.interpret_as.value),
            ("format", self.format or None),
        ])
        return f"<say-as{attrs}>{escape_text(self.content)}</say-as>"


Node = Union[
    TextNode,
    ProsodyNode,
    ExpressAsNode,
    BreakNode,
    EmphasisNode,
    PhonemeNode,
    SayAsNode,
]
