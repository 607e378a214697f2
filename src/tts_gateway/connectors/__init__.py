"""
Upstream synthesis connectors and their factory.

Connector Selection:
    TTS_GW_CONNECTOR environment variable, else settings connector.type.
    Supported: azure (aliases: azure-speech, microsoft).

Connectors are imported lazily so their SDKs are only needed when selected.
"""
from __future__ import annotations

import os
import threading
from typing import Optional

from tts_gateway.core.config import Settings
from tts_gateway.core.logging import get_logger, warn

from .base import BaseConnector, ConnectorError, SpeechAudio

_CONNECTOR: Optional[BaseConnector] = None
_CONNECTOR_TYPE: Optional[str] = None
_CONNECTOR_LOCK = threading.Lock()

_ALIASES = {
    "azure-speech": "azure",
    "microsoft": "azure",
}


def _resolve_connector_type(settings: Settings) -> str:
    env = os.getenv("TTS_GW_CONNECTOR")
    raw = env if env else settings.connector_type
    name = raw.strip().lower()
    return _ALIASES.get(name, name)


def _create_connector(connector_type: str, settings: Settings) -> BaseConnector:
    if connector_type == "azure":
        from .azure_connector import AzureSpeechConnector
        return AzureSpeechConnector(settings)

    raise ValueError(f"Unknown connector type: {connector_type}")


def get_connector(settings: Settings) -> BaseConnector:
    """
    Get or create the process-wide connector.

    A different connector type in ``settings`` replaces the current one.

    Raises:
        ValueError: If the connector type is unknown.
    """
    global _CONNECTOR
    global _CONNECTOR_TYPE

    connector_type = _resolve_connector_type(settings)

    if _CONNECTOR is None or _CONNECTOR_TYPE != connector_type:
        with _CONNECTOR_LOCK:
            if _CONNECTOR is None or _CONNECTOR_TYPE != connector_type:
                _CONNECTOR = _create_connector(connector_type, settings)
                _CONNECTOR_TYPE = connector_type

    if _CONNECTOR.name != connector_type:
        warn(get_logger("tts-gateway.connector"), "connector_name_mismatch",
             expected=connector_type, actual=_CONNECTOR.name)

    return _CONNECTOR


def reset_connector() -> None:
    """Drop the cached connector (tests)."""
    global _CONNECTOR
    global _CONNECTOR_TYPE
    with _CONNECTOR_LOCK:
        _CONNECTOR = None
        _CONNECTOR_TYPE = None


__all__ = [
    "BaseConnector",
    "ConnectorError",
    "SpeechAudio",
    "get_connector",
    "reset_connector",
]
