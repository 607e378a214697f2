"""
Speech Service: orchestration between the API and the upstream connector.

The API layer handles admission (rate limit + credential). Everything after
that lives here:

    1. Parameter validation (TextSpeechParams.from_query)
    2. SSML construction (build_utterance) or validation of caller markup
    3. Upstream synthesis through the connector, timed and logged
    4. Connector failures converted to UpstreamError

Usage:
    service = SpeechService(settings, connector)
    params = TextSpeechParams.from_query(request.query_params)
    audio = service.synthesize_text(params)
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Optional, TypeVar

from tts_gateway.connectors.base import BaseConnector, ConnectorError, SpeechAudio
from tts_gateway.core.config import Defaults, GatewayConfig, Settings
from tts_gateway.core.logging import debug, fail, get_logger, info, success, verbose, warn
from tts_gateway.core.metrics import metrics
from tts_gateway.services.errors import MarkupValidationError, UpstreamError
from tts_gateway.services.validators import (
    Number,
    validate_bounded_number,
    validate_required_string,
    validate_text_length,
)
from tts_gateway.ssml import build_utterance, validate_speech_document
from tts_gateway.utils.timeit import timeit

_LOG = get_logger("tts-gateway.service")

T = TypeVar("T")

# Parameter bounds for /api/text-to-speech
PITCH_RANGE = (-100, 100)
RATE_RANGE = (-100, 100)
VOLUME_RANGE = (0, 100)
STYLE_DEGREE_RANGE = (0.01, 2)


@dataclass
class TextSpeechParams:
    """
    Validated parameters of a plain-text synthesis request.

    Attributes:
        text: Text to speak.
        voice: Upstream voice short name.
        pitch: -100..100 percent offset.
        rate: -100..100 percent offset.
        volume: 0..100 percent.
        style: Optional expressive style (``personality`` is accepted as an alias).
        style_degree: Optional style intensity, 0.01..2.
        role: Optional role-play persona.
    """
    text: str
    voice: str
    pitch: Number = 0
    rate: Number = 0
    volume: Number = 100
    style: Optional[str] = None
    style_degree: Optional[Number] = None
    role: Optional[str] = None

    @classmethod
    def from_query(
        cls,
        query: Mapping[str, str],
        max_text_chars: int = Defaults.LIMITS_MAX_TEXT_CHARS,
    ) -> "TextSpeechParams":
        """
        Validate query parameters in a fixed order: text, voice, pitch,
        rate, volume, styledegree, then the text length ceiling.

        Raises:
            ValidationError: On the first failing parameter.
        """
        text = validate_required_string(query.get("text"), "text")
        voice = validate_required_string(query.get("voice"), "voice")
        pitch = validate_bounded_number(query.get("pitch"), "pitch", 0, *PITCH_RANGE)
        rate = validate_bounded_number(query.get("rate"), "rate", 0, *RATE_RANGE)
        volume = validate_bounded_number(query.get("volume"), "volume", 100, *VOLUME_RANGE)
        style_degree = validate_bounded_number(
            query.get("styledegree"), "styledegree", None, *STYLE_DEGREE_RANGE
        )
        validate_text_length(text, max_text_chars)

        return cls(
            text=text,
            voice=voice,
            pitch=pitch,
            rate=rate,
            volume=volume,
            style=query.get("style") or query.get("personality") or None,
            style_degree=style_degree,
            role=query.get("role") or None,
        )


class SpeechService:
    """
    Synthesis orchestration for the gateway.

    The connector is injected so the API layer (and tests) decide which
    upstream engine is used.
    """

    def __init__(self, settings: Settings, connector: BaseConnector, config: Optional[GatewayConfig] = None):
        self._settings = settings
        self._connector = connector
        self._config = config or settings.get_gateway_config()
        self._text_preview_chars = self._config.logging.text_preview_chars

    @property
    def connector(self) -> BaseConnector:
        return self._connector

    @property
    def config(self) -> GatewayConfig:
        return self._config

    def synthesize_text(self, params: TextSpeechParams) -> SpeechAudio:
        """Build an utterance document from ``params`` and synthesize it."""
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
        verbose(_LOG, "params", voice=params.voice, chars=len(params.text), pitch=params.pitch,
                rate=params.rate, volume=params.volume, style=params.style)
        debug(_LOG, "ssml_built", ssml=ssml[: self._text_preview_chars])
        info(_LOG, "synthesis_start", voice=params.voice, chars=len(params.text))
        return self._synthesize(ssml)

    def synthesize_ssml(self, ssml: str) -> SpeechAudio:
        """
        Synthesize a caller-supplied SSML document.

        Raises:
            MarkupValidationError: Not a speech document, or too long.
            UpstreamError: Connector failure.
        """
        try:
            validate_speech_document(ssml, self._config.limits.max_ssml_chars)
        except MarkupValidationError as e:
            warn(_LOG, "ssml_rejected", error=e.message, length=len(ssml),
                 preview=ssml[: self._text_preview_chars])
            raise
        info(_LOG, "synthesis_start", chars=len(ssml), source="ssml")
        return self._synthesize(ssml)

    def list_voices(self) -> List[Dict[str, Any]]:
        voices = self._call_upstream("voices", self._connector.list_voices)
        info(_LOG, "voices_listed", count=len(voices))
        return voices

    def health_info(self) -> Dict[str, Any]:
        return {
            "connector": self._connector.name,
            "connector_loaded": self._connector.is_loaded(),
            "auth_enabled": self._config.auth.enabled,
        }

    def _synthesize(self, ssml: str) -> SpeechAudio:
        with timeit("upstream") as t:
            speech = self._call_upstream("synthesize", lambda: self._connector.synthesize_ssml(ssml))
        metrics.record_audio(len(speech.audio))
        success(_LOG, "synthesis_done", bytes=len(speech.audio), seconds=round(t.seconds, 4))
        return speech

    def _call_upstream(self, operation: str, fn: Callable[[], T]) -> T:
        name = self._connector.name
        try:
            return fn()
        except ConnectorError as e:
            metrics.record_upstream_failure(name)
            fail(_LOG, "upstream_failed", connector=name, operation=operation, error=str(e))
            raise UpstreamError(str(e), {"connector": name}) from e
        except Exception as e:
            metrics.record_upstream_failure(name)
            fail(_LOG, "upstream_failed", connector=name, operation=operation,
                 error=f"{type(e).__name__}: {e}")
            raise UpstreamError(f"Upstream {operation} failed", {"connector": name}) from e
