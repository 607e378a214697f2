"""
FastAPI Dependency Injection Providers.

Hierarchy:
    get_settings()          settings.yaml (TTS_GW_SETTINGS) + env, cached
    get_gateway_config()    validated GatewayConfig, cached
    get_tts_gate()          AdmissionGate over the synthesis limiter
    get_voices_gate()       AdmissionGate over the voice-list limiter
    get_upstream_connector() process-wide connector (lazy SDK import)
    get_speech_service()    SpeechService bound to the connector

Gates and the connector are process-wide singletons: rate budgets must be
shared by every request of the process.

Testing:
    app.dependency_overrides[get_upstream_connector] = lambda: FakeConnector()
    app.dependency_overrides[get_tts_gate] = lambda: AdmissionGate(RateLimiter(max_requests=2))

    reset_gates() drops the singletons between tests.
"""
from __future__ import annotations

import threading
from functools import lru_cache
from typing import List, Optional

from fastapi import Depends

from tts_gateway.admission import AdmissionGate, RateLimiter
from tts_gateway.connectors import BaseConnector, get_connector
from tts_gateway.core.config import GatewayConfig, RateLimitConfig, Settings, load_settings, settings_path
from tts_gateway.services.speech_service import SpeechService


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Load and cache application settings.

    A missing settings file is not an error; defaults apply.
    """
    return load_settings(settings_path(), missing_ok=True)


@lru_cache(maxsize=1)
def get_gateway_config() -> GatewayConfig:
    return get_settings().get_gateway_config()


_TTS_GATE: Optional[AdmissionGate] = None
_VOICES_GATE: Optional[AdmissionGate] = None
_GATE_LOCK = threading.Lock()


def _make_gate(name: str, limit: RateLimitConfig, config: GatewayConfig) -> AdmissionGate:
    limiter = RateLimiter(
        window_ms=limit.window_ms,
        max_requests=limit.max_requests,
        cleanup_interval_s=config.rate_limits.cleanup_interval_s,
        name=name,
    )
    return AdmissionGate(limiter, secret=config.auth.token, name=name)


def get_tts_gate() -> AdmissionGate:
    """Gate for /api/text-to-speech and /api/ssml (60 requests/minute by default)."""
    global _TTS_GATE
    if _TTS_GATE is None:
        with _GATE_LOCK:
            if _TTS_GATE is None:
                config = get_gateway_config()
                _TTS_GATE = _make_gate("tts", config.rate_limits.tts, config)
    return _TTS_GATE


def get_voices_gate() -> AdmissionGate:
    """Gate for /api/voices (30 requests/minute by default)."""
    global _VOICES_GATE
    if _VOICES_GATE is None:
        with _GATE_LOCK:
            if _VOICES_GATE is None:
                config = get_gateway_config()
                _VOICES_GATE = _make_gate("voices", config.rate_limits.voices, config)
    return _VOICES_GATE


def all_gates() -> List[AdmissionGate]:
    return [get_tts_gate(), get_voices_gate()]


def start_limiters() -> None:
    """Start the background sweep of every limiter (app startup)."""
    for gate in all_gates():
        gate.limiter.start()


def stop_limiters() -> None:
    """Stop limiter sweeps (app shutdown)."""
    for gate in (_TTS_GATE, _VOICES_GATE):
        if gate is not None:
            gate.limiter.close()


def reset_gates() -> None:
    """Stop and drop the gate singletons and cached settings (tests)."""
    global _TTS_GATE
    global _VOICES_GATE
    stop_limiters()
    with _GATE_LOCK:
        _TTS_GATE = None
        _VOICES_GATE = None
    get_gateway_config.cache_clear()
    get_settings.cache_clear()


def get_upstream_connector() -> BaseConnector:
    return get_connector(get_settings())


def get_speech_service(connector: BaseConnector = Depends(get_upstream_connector)) -> SpeechService:
    return SpeechService(get_settings(), connector, config=get_gateway_config())
