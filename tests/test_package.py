"""Tests for pyproject.toml and package installation."""
from __future__ import annotations

import subprocess
import sys
from pathlib import Path

import pytest

PYPROJECT = Path(__file__).parent.parent / "pyproject.toml"


class TestPackage:
    """Test that the package imports cleanly."""

    def test_version_defined(self):
        import tts_gateway

        assert isinstance(tts_gateway.__version__, str)
        assert tts_gateway.__version__

    def test_modules_importable(self):
        from tts_gateway import cli, main
        from tts_gateway.api import dependencies, routes, schemas
        from tts_gateway.services import speech_service

        for module in (cli, main, dependencies, routes, schemas, speech_service):
            assert module is not None


class TestCLIEntryPoint:
    """Test the CLI entry point."""

    def test_cli_help_exits_zero(self):
        result = subprocess.run(
            [sys.executable, "-m", "tts_gateway.cli", "--help"],
            capture_output=True,
            text=True,
        )
        assert result.returncode == 0
        assert "tts-gateway CLI" in result.stdout


class TestPyprojectToml:
    """Test pyproject.toml configuration."""

    @pytest.fixture
    def data(self):
        tomllib = pytest.importorskip("tomllib")
        return tomllib.loads(PYPROJECT.read_text(encoding="utf-8"))

    def test_project_name(self, data):
        assert data["project"]["name"] == "tts-gateway"

    def test_dependencies(self, data):
        names = [d.split(">=")[0].split("[")[0] for d in data["project"]["dependencies"]]
        for required in ("fastapi", "uvicorn", "pydantic", "pyyaml", "prometheus_client"):
            assert required in names

    def test_extras_and_script(self, data):
        extras = data["project"]["optional-dependencies"]
        assert any(d.startswith("azure-cognitiveservices-speech") for d in extras["azure"])
        assert any(d.startswith("pytest") for d in extras["test"])
        assert data["project"]["scripts"]["tts-gateway"] == "tts_gateway.cli:main"
