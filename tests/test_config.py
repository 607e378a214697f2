"""Tests for settings loading and GatewayConfig validation."""
from __future__ import annotations

import pytest

from tts_gateway.core.config import (
    ConfigValidationError,
    Defaults,
    GatewayConfig,
    LimitsConfig,
    LoggingConfig,
    Settings,
    SSMLConfig,
    load_settings,
    settings_path,
)


class TestDefaults:
    """Test defaults apply with an empty settings dict."""

    def test_empty_settings(self):
        config = GatewayConfig.from_settings(Settings(raw={}))
        assert config.auth.token == ""
        assert config.auth.enabled is False
        assert config.rate_limits.tts.window_ms == 60_000
        assert config.rate_limits.tts.max_requests == 60
        assert config.rate_limits.voices.max_requests == 30
        assert config.rate_limits.cleanup_interval_s == 300.0
        assert config.limits.max_text_chars == 10_000
        assert config.limits.max_ssml_chars == 50_000
        assert config.ssml.default_voice == Defaults.SSML_DEFAULT_VOICE
        assert config.logging.level == 2

    def test_connector_defaults(self):
        settings = Settings(raw={})
        assert settings.connector_type == "azure"
        assert settings.connector_options == {}


class TestLoadSettings:
    """Test YAML loading and environment overrides."""

    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_settings(str(tmp_path / "nope.yaml"))

    def test_missing_file_ok(self, tmp_path):
        assert load_settings(str(tmp_path / "nope.yaml"), missing_ok=True).raw == {}

    def test_yaml_values(self, tmp_path):
        path = tmp_path / "settings.yaml"
        path.write_text(
            "auth:\n  token: abc\n"
            "rate_limits:\n  tts:\n    max_requests: 5\n"
            "connector:\n  type: azure\n  azure:\n    region: westeurope\n",
            encoding="utf-8",
        )
        settings = load_settings(str(path))
        config = settings.get_gateway_config()
        assert config.auth.token == "abc"
        assert config.auth.enabled
        assert config.rate_limits.tts.max_requests == 5
        assert config.rate_limits.tts.window_ms == 60_000
        assert settings.connector_options == {"region": "westeurope"}

    def test_token_env_precedence(self, monkeypatch):
        settings = Settings(raw={"auth": {"token": "from-file"}})
        assert GatewayConfig.from_settings(settings).auth.token == "from-file"
        monkeypatch.setenv("TOKEN", "from-token")
        assert GatewayConfig.from_settings(settings).auth.token == "from-token"
        monkeypatch.setenv("MS_RA_FORWARDER_TOKEN", "from-forwarder")
        assert GatewayConfig.from_settings(settings).auth.token == "from-forwarder"

    def test_azure_env(self, tmp_path, monkeypatch):
        monkeypatch.setenv("AZURE_SPEECH_KEY", "k")
        monkeypatch.setenv("AZURE_SPEECH_REGION", "japaneast")
        settings = load_settings(str(tmp_path / "nope.yaml"), missing_ok=True)
        assert settings.connector_options == {"key": "k", "region": "japaneast"}

    def test_connector_env(self, tmp_path, monkeypatch):
        monkeypatch.setenv("TTS_GW_CONNECTOR", " Azure ")
        settings = load_settings(str(tmp_path / "nope.yaml"), missing_ok=True)
        assert settings.connector_type == "azure"

    def test_settings_path_env(self, monkeypatch):
        monkeypatch.setenv("TTS_GW_SETTINGS", "/etc/gw.yaml")
        assert settings_path() == "/etc/gw.yaml"
        monkeypatch.delenv("TTS_GW_SETTINGS")
        assert settings_path() == "config/settings.yaml"

    def test_repository_settings_file_is_valid(self):
        """The shipped config/settings.yaml loads and validates."""
        from pathlib import Path

        path = Path(__file__).parent.parent / "config" / "settings.yaml"
        config = load_settings(str(path)).get_gateway_config()
        assert config.rate_limits.tts.max_requests == Defaults.RATE_LIMIT_TTS_MAX_REQUESTS

    def test_repository_settings_keys_are_read(self):
        """Every shipped key of the typed sections maps to a config field."""
        from dataclasses import fields
        from pathlib import Path

        path = Path(__file__).parent.parent / "config" / "settings.yaml"
        raw = load_settings(str(path)).raw
        for section, cls in (("limits", LimitsConfig), ("ssml", SSMLConfig)):
            assert set(raw[section]) <= {f.name for f in fields(cls)}, section
        assert set(raw["logging"]) <= {f.name for f in fields(LoggingConfig)}


class TestValidation:
    """Test rejected configuration values."""

    @pytest.mark.parametrize("raw", [
        {"rate_limits": {"tts": {"window_ms": 0}}},
        {"rate_limits": {"voices": {"max_requests": -1}}},
        {"rate_limits": {"cleanup_interval_s": 0}},
        {"limits": {"max_text_chars": 0}},
        {"logging": {"level": 7}},
        {"logging": {"text_preview_chars": -1}},
    ])
    def test_invalid(self, raw):
        with pytest.raises(ConfigValidationError):
            GatewayConfig.from_settings(Settings(raw=raw))

    def test_string_log_level(self):
        config = GatewayConfig.from_settings(Settings(raw={"logging": {"level": "verbose"}}))
        assert config.logging.level == 3
