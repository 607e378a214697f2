"""Shared fixtures: isolated environment, fake connector, fresh gates."""
from __future__ import annotations

from typing import Any, Dict, List

import pytest

from tts_gateway.connectors import BaseConnector, ConnectorError, SpeechAudio
from tts_gateway.core.config import Settings

_ENV_VARS = (
    "MS_RA_FORWARDER_TOKEN",
    "TOKEN",
    "TTS_GW_CONNECTOR",
    "AZURE_SPEECH_KEY",
    "AZURE_SPEECH_REGION",
    "TTS_GW_LOG_DIR",
)

FAKE_AUDIO = b"ID3\x04\x00fake-mp3-frames"


class FakeConnector(BaseConnector):
    """In-memory connector that records every document it receives."""

    name = "fake"

    def __init__(self, settings: Settings = None, fail: bool = False, voices: List[Dict[str, Any]] = None):
        super().__init__(settings or Settings(raw={}))
        self.fail = fail
        self.voices = voices if voices is not None else [
            {"Name": "Microsoft Server Speech Text to Speech Voice (en-US, JennyNeural)",
             "ShortName": "en-US-JennyNeural", "Gender": "Female", "Locale": "en-US",
             "LocalName": "Jenny", "StyleList": ["cheerful", "sad"]},
        ]
        self.documents: List[str] = []

    def load(self) -> None:
        self._loaded = True

    def synthesize_ssml(self, ssml: str) -> SpeechAudio:
        self.ensure_loaded()
        if self.fail:
            raise ConnectorError("upstream unavailable")
        self.documents.append(ssml)
        return SpeechAudio(audio=FAKE_AUDIO)

    def list_voices(self) -> List[Dict[str, Any]]:
        self.ensure_loaded()
        if self.fail:
            raise ConnectorError("upstream unavailable")
        return list(self.voices)


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path):
    """Point settings at an empty location and clear credential overrides."""
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("TTS_GW_SETTINGS", str(tmp_path / "missing-settings.yaml"))

    from tts_gateway.api.dependencies import reset_gates
    from tts_gateway.connectors import reset_connector

    reset_gates()
    reset_connector()
    yield
    reset_gates()
    reset_connector()


@pytest.fixture
def fake_connector():
    return FakeConnector()


@pytest.fixture
def make_client(fake_connector):
    """
    Build a TestClient with the fake connector injected.

    Environment changes (e.g. TOKEN) must be made before calling it.
    """
    from fastapi.testclient import TestClient

    from tts_gateway.api.dependencies import get_upstream_connector
    from tts_gateway.main import create_app

    def _make(connector: BaseConnector = None) -> TestClient:
        app = create_app()
        app.dependency_overrides[get_upstream_connector] = lambda: connector or fake_connector
        return TestClient(app)

    return _make


@pytest.fixture
def connector_cls():
    """The FakeConnector class, for tests that need a variant."""
    return FakeConnector


@pytest.fixture
def fake_audio():
    return FAKE_AUDIO
