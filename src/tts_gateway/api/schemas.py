"""
API Request/Response Schemas.

Query parameters of /api/text-to-speech are validated by
services.validators rather than by FastAPI, so every endpoint reports the
same error messages. The models here describe JSON response bodies.

Models:
    VoicesResponse: Body of GET /api/voices
    LegadoImportRecord: Body of GET /api/legado-import
    HealthResponse: Body of GET /health
    ErrorResponse: Body of every error
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class VoicesResponse(BaseModel):
    success: bool = True
    count: int
    voices: List[Dict[str, Any]]


class LegadoImportRecord(BaseModel):
    """Engine import record understood by the Legado reader."""
    name: str
    contentType: str = "audio/mpeg"
    id: int
    loginCheckJs: str = ""
    loginUi: str = ""
    loginUrl: str = ""
    url: str
    header: str = Field(..., description="JSON-encoded request headers")


class LimiterStats(BaseModel):
    name: str
    window_ms: int
    max_requests: int
    tracked: int


class HealthResponse(BaseModel):
    ok: bool = True
    version: str
    connector: str
    connector_loaded: bool
    auth_enabled: bool
    limiters: List[LimiterStats]


class ErrorResponse(BaseModel):
    """
    Error body.

    Example:
        {"ok": false, "error": "RATE_LIMITED",
         "message": "Rate limit exceeded. Please try again later.",
         "details": {"limit": 60, "reset_at": "2026-01-15T14:31:05.000Z"}}
    """
    ok: bool = False
    error: str
    message: str
    details: Optional[Dict[str, Any]] = None
    request_id: Optional[str] = None
