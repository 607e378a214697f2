"""
Gateway configuration.

Settings come from ``config/settings.yaml`` (path in TTS_GW_SETTINGS) and
are overlaid by environment variables; anything unset falls back to the
``Defaults`` class. ``GatewayConfig.from_settings`` turns the raw mapping
into typed dataclasses and rejects values the gateway cannot run with.

Precedence, highest first:
    1. Environment (MS_RA_FORWARDER_TOKEN, TOKEN, TTS_GW_CONNECTOR,
       AZURE_SPEECH_KEY, AZURE_SPEECH_REGION)
    2. settings.yaml
    3. Defaults

settings.yaml layout:
    auth:
      token: "change-me"

    rate_limits:
      cleanup_interval_s: 300
      tts:
        window_ms: 60000
        max_requests: 60
      voices:
        window_ms: 60000
        max_requests: 30

    connector:
      type: azure
      azure:
        region: westeurope

    logging:
      level: 2  # NORMAL
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from tts_gateway.core.logging.levels import coerce_level


class ConfigValidationError(Exception):
    """A configured value is out of bounds; the message names the setting."""


class Defaults:
    """
    Every default the gateway uses, grouped by settings section.

    Sections:
        - Auth: Shared secret (empty = open mode)
        - Rate limits: Sliding windows for the two endpoint classes
        - Limits: Request size ceilings
        - SSML: Document defaults
        - Connector: Upstream synthesis backend
        - Logging: Log level and formatting
    """

    # ─────────────────────────────────────────────────────────────────────────
    # Auth
    # ─────────────────────────────────────────────────────────────────────────
    AUTH_TOKEN = ""                     # Empty disables credential checks

    # ─────────────────────────────────────────────────────────────────────────
    # Rate Limits
    # ─────────────────────────────────────────────────────────────────────────
    RATE_LIMIT_TTS_WINDOW_MS = 60_000       # Synthesis endpoints window
    RATE_LIMIT_TTS_MAX_REQUESTS = 60        # 60 requests per minute
    RATE_LIMIT_VOICES_WINDOW_MS = 60_000    # Voice listing window
    RATE_LIMIT_VOICES_MAX_REQUESTS = 30     # 30 requests per minute
    RATE_LIMIT_CLEANUP_INTERVAL_S = 300.0   # Stale identifier sweep (5 min)

    # ─────────────────────────────────────────────────────────────────────────
    # Request Limits
    # ─────────────────────────────────────────────────────────────────────────
    LIMITS_MAX_TEXT_CHARS = 10_000      # /api/text-to-speech text ceiling
    LIMITS_MAX_SSML_CHARS = 50_000      # /api/ssml document ceiling

    # ─────────────────────────────────────────────────────────────────────────
    # SSML
    # ─────────────────────────────────────────────────────────────────────────
    SSML_DEFAULT_VOICE = "zh-CN-XiaoxiaoNeural"

    # ─────────────────────────────────────────────────────────────────────────
    # Connector
    # ─────────────────────────────────────────────────────────────────────────
    CONNECTOR_TYPE = "azure"
    CONNECTOR_AZURE_REGION = "eastus"
    CONNECTOR_AZURE_OUTPUT_FORMAT = "Audio24Khz48KBitRateMonoMp3"

    # ─────────────────────────────────────────────────────────────────────────
    # Logging
    # ─────────────────────────────────────────────────────────────────────────
    LOGGING_TEXT_PREVIEW_CHARS = 100    # Characters of SSML shown on rejection
    LOGGING_LEVEL = 2                   # 1=MINIMAL, 2=NORMAL, 3=VERBOSE, 4=DEBUG


@dataclass
class AuthConfig:
    """
    Shared-secret configuration.

    An empty token is the deliberate open mode: every request is authorized.
    """
    token: str = Defaults.AUTH_TOKEN

    @property
    def enabled(self) -> bool:
        return bool(self.token)


@dataclass
class RateLimitConfig:
    """One sliding-window budget."""
    window_ms: int
    max_requests: int


@dataclass
class RateLimitsConfig:
    """
    Rate limiter configuration.

    Two independent limiters exist: a looser one for synthesis endpoints
    and a stricter one for the voice catalog lookup.
    """
    tts: RateLimitConfig = field(default_factory=lambda: RateLimitConfig(
        window_ms=Defaults.RATE_LIMIT_TTS_WINDOW_MS,
        max_requests=Defaults.RATE_LIMIT_TTS_MAX_REQUESTS,
    ))
    voices: RateLimitConfig = field(default_factory=lambda: RateLimitConfig(
        window_ms=Defaults.RATE_LIMIT_VOICES_WINDOW_MS,
        max_requests=Defaults.RATE_LIMIT_VOICES_MAX_REQUESTS,
    ))
    cleanup_interval_s: float = Defaults.RATE_LIMIT_CLEANUP_INTERVAL_S


@dataclass
class LimitsConfig:
    """Request size ceilings."""
    max_text_chars: int = Defaults.LIMITS_MAX_TEXT_CHARS
    max_ssml_chars: int = Defaults.LIMITS_MAX_SSML_CHARS


@dataclass
class SSMLConfig:
    """Defaults for documents built by the gateway."""
    default_voice: str = Defaults.SSML_DEFAULT_VOICE


@dataclass
class LoggingConfig:
    """
    Logging section.

    ``level`` is the numeric verbosity, 1 (MINIMAL) to 4 (DEBUG); see
    tts_gateway.core.logging.levels for what each one prints.
    """
    text_preview_chars: int = Defaults.LOGGING_TEXT_PREVIEW_CHARS
    level: int = Defaults.LOGGING_LEVEL


def _section(raw: Dict[str, Any], *keys: str) -> Dict[str, Any]:
    node: Any = raw
    for key in keys:
        node = (node or {}).get(key) if isinstance(node, dict) else None
    return node if isinstance(node, dict) else {}


def _check(name: str, value: float, low: float, high: Optional[float] = None) -> None:
    if high is None and value < low:
        qualifier = "positive" if low > 0 else "non-negative"
        raise ConfigValidationError(f"{name} must be {qualifier}, got {value}")
    if high is not None and not low <= value <= high:
        raise ConfigValidationError(f"{name} must be between {low} and {high}, got {value}")


def _parse_level(value: Any) -> int:
    # Explicit numbers are range-checked; names go through the logging aliases
    if isinstance(value, str) and not value.strip().isdigit():
        return int(coerce_level(value))
    level = int(value)
    _check("logging.level", level, 1, 4)
    return level


@dataclass
class GatewayConfig:
    """
    Typed, validated view of a Settings mapping.

        config = load_settings("config/settings.yaml").get_gateway_config()
        config.rate_limits.tts.max_requests  # 60
    """
    auth: AuthConfig = field(default_factory=AuthConfig)
    rate_limits: RateLimitsConfig = field(default_factory=RateLimitsConfig)
    limits: LimitsConfig = field(default_factory=LimitsConfig)
    ssml: SSMLConfig = field(default_factory=SSMLConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def from_settings(cls, settings: "Settings") -> "GatewayConfig":
        """
        Build the config, filling gaps from Defaults.

        The shared secret is taken from MS_RA_FORWARDER_TOKEN, then TOKEN,
        then ``auth.token``.

        Raises:
            ConfigValidationError: a window, budget or ceiling is not
                positive, or the log level is outside 1-4.
        """
        raw = settings.raw

        token = (
            os.getenv("MS_RA_FORWARDER_TOKEN")
            or os.getenv("TOKEN")
            or _section(raw, "auth").get("token")
            or Defaults.AUTH_TOKEN
        )

        budgets = {}
        for name, window_default, max_default in (
            ("tts", Defaults.RATE_LIMIT_TTS_WINDOW_MS, Defaults.RATE_LIMIT_TTS_MAX_REQUESTS),
            ("voices", Defaults.RATE_LIMIT_VOICES_WINDOW_MS, Defaults.RATE_LIMIT_VOICES_MAX_REQUESTS),
        ):
            section = _section(raw, "rate_limits", name)
            budget = RateLimitConfig(
                window_ms=int(section.get("window_ms", window_default)),
                max_requests=int(section.get("max_requests", max_default)),
            )
            _check(f"rate_limits.{name}.window_ms", budget.window_ms, 1)
            _check(f"rate_limits.{name}.max_requests", budget.max_requests, 1)
            budgets[name] = budget

        cleanup = float(
            _section(raw, "rate_limits").get("cleanup_interval_s", Defaults.RATE_LIMIT_CLEANUP_INTERVAL_S)
        )
        if cleanup <= 0:
            raise ConfigValidationError(f"rate_limits.cleanup_interval_s must be positive, got {cleanup}")

        limits_raw = _section(raw, "limits")
        limits = LimitsConfig(
            max_text_chars=int(limits_raw.get("max_text_chars", Defaults.LIMITS_MAX_TEXT_CHARS)),
            max_ssml_chars=int(limits_raw.get("max_ssml_chars", Defaults.LIMITS_MAX_SSML_CHARS)),
        )
        _check("limits.max_text_chars", limits.max_text_chars, 1)
        _check("limits.max_ssml_chars", limits.max_ssml_chars, 1)

        ssml_raw = _section(raw, "ssml")
        logging_raw = _section(raw, "logging")
        logging_cfg = LoggingConfig(
            text_preview_chars=int(logging_raw.get("text_preview_chars", Defaults.LOGGING_TEXT_PREVIEW_CHARS)),
            level=_parse_level(logging_raw.get("level", Defaults.LOGGING_LEVEL)),
        )
        _check("logging.text_preview_chars", logging_cfg.text_preview_chars, 0)

        return cls(
            auth=AuthConfig(token=str(token)),
            rate_limits=RateLimitsConfig(cleanup_interval_s=cleanup, **budgets),
            limits=limits,
            ssml=SSMLConfig(default_voice=str(ssml_raw.get("default_voice", Defaults.SSML_DEFAULT_VOICE))),
            logging=logging_cfg,
        )


@dataclass(frozen=True)
class Settings:
    """Parsed settings.yaml plus environment overrides, not yet validated."""
    raw: Dict[str, Any]

    @property
    def connector_type(self) -> str:
        return str(_section(self.raw, "connector").get("type", Defaults.CONNECTOR_TYPE))

    @property
    def connector_options(self) -> Dict[str, Any]:
        """Options block of the selected connector, e.g. ``connector.azure``."""
        return dict(_section(self.raw, "connector", self.connector_type))

    def get_gateway_config(self) -> GatewayConfig:
        return GatewayConfig.from_settings(self)


def load_settings(path: str = "config/settings.yaml", missing_ok: bool = False) -> Settings:
    """
    Read a settings file and apply connector overrides from the environment.

    TTS_GW_CONNECTOR replaces ``connector.type``; AZURE_SPEECH_KEY and
    AZURE_SPEECH_REGION fill ``connector.azure``. A missing file is an
    error unless ``missing_ok``, in which case every value is a default.
    """
    p = Path(path)
    if p.exists():
        raw: Dict[str, Any] = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
    elif missing_ok:
        raw = {}
    else:
        raise FileNotFoundError(f"no settings file at {p.resolve()}")

    connector = os.getenv("TTS_GW_CONNECTOR")
    if connector:
        raw.setdefault("connector", {})["type"] = connector.strip().lower()

    azure_env = {"key": os.getenv("AZURE_SPEECH_KEY"), "region": os.getenv("AZURE_SPEECH_REGION")}
    azure_env = {k: v for k, v in azure_env.items() if v}
    if azure_env:
        raw.setdefault("connector", {}).setdefault("azure", {}).update(azure_env)

    return Settings(raw=raw)


def settings_path() -> str:
    """Settings file location (TTS_GW_SETTINGS, default config/settings.yaml)."""
    return os.getenv("TTS_GW_SETTINGS", "config/settings.yaml")
