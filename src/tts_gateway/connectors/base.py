"""
Upstream Connector Base Class.

A connector turns a finished SSML document into audio by calling an external
speech engine, and lists the voices that engine offers. The gateway never
inspects audio; it relays bytes and the content type.

Implementing a New Connector:
    1. Create connectors/<name>_connector.py
    2. Inherit from BaseConnector
    3. Implement load(), synthesize_ssml() and list_voices()
    4. Register in _create_connector() in connectors/__init__.py
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List

from tts_gateway.core.config import Settings
from tts_gateway.core.logging import get_logger


class ConnectorError(Exception):
    """
    Raised by connectors when the upstream engine cannot serve a request.

    The service layer wraps it in UpstreamError before it reaches the API.
    """
    pass


@dataclass
class SpeechAudio:
    """
    Audio returned by a connector.

    Attributes:
        audio: Encoded audio bytes.
        content_type: MIME type of ``audio`` (e.g., "audio/mpeg").
    """
    audio: bytes
    content_type: str = "audio/mpeg"


class BaseConnector:
    """
    Abstract base class for upstream synthesis connectors.

    Attributes:
        name: Connector identifier (e.g., "azure").
        settings: Application settings.
        logger: Logger instance for this connector.
    """

    name: str = "base"

    def __init__(self, settings: Settings):
        self.settings = settings
        self.options: Dict[str, Any] = settings.connector_options
        self.logger = get_logger(f"tts-gateway.connector.{self.name}")
        self._loaded = False

    def load(self) -> None:
        """Prepare the client (import SDKs, build configs). Sets ``_loaded``."""
        raise NotImplementedError

    def is_loaded(self) -> bool:
        return bool(self._loaded)

    def ensure_loaded(self) -> None:
        if not self.is_loaded():
            self.load()

    def synthesize_ssml(self, ssml: str) -> SpeechAudio:
        """
        Synthesize a complete SSML document.

        Raises:
            ConnectorError: If the upstream engine fails.
        """
        raise NotImplementedError

    def list_voices(self) -> List[Dict[str, Any]]:
        """
        Return the upstream voice catalog as plain dicts.

        Raises:
            ConnectorError: If the catalog cannot be fetched.
        """
        raise NotImplementedError
