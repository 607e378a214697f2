"""
Gateway API Routes.

Endpoints:
    GET  /api/text-to-speech  - Plain text -> audio/mpeg        (tts gate)
    POST /api/ssml            - Caller SSML -> audio/mpeg       (tts gate)
    GET  /api/voices          - Upstream voice catalog          (voices gate)
    GET  /api/legado-import   - Legado reader import record     (query token, no rate limit)
    GET  /health              - Health check
    GET  /metrics             - Prometheus metrics

Request Flow (gated endpoints):
    1. Request id assigned, request logged
    2. Rate limit checked (budget consumed even if the credential is bad)
    3. Credential checked
    4. Parameters validated, SSML built or validated
    5. Connector called
    6. Response carries X-RateLimit-* headers, exchange logged and counted

Error Handling:
    All errors are JSON:
    {
        "ok": false,
        "error": "<ERROR_CODE>",
        "message": "<human readable message>",
        "details": {...}
    }

    HTTP status codes are mapped from GatewayError codes:
        - INVALID_PARAMETER -> 400 Bad Request
        - MARKUP_INVALID -> 400 Bad Request
        - UNAUTHORIZED -> 401 Unauthorized
        - RATE_LIMITED -> 429 Too Many Requests
        - UPSTREAM_FAILURE -> 502 Bad Gateway
        - anything else -> 500 (no internal details exposed)

Example Usage:
    curl -H "Authorization: Bearer $TOKEN" \\
        "http://localhost:8000/api/text-to-speech?voice=en-US-JennyNeural&text=Hello&rate=10" \\
        --output hello.mp3
"""
from __future__ import annotations

import json
import math
import time
import uuid
from typing import Callable, Dict, Optional

from fastapi import APIRouter, Depends, Request, Response
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from tts_gateway import __version__
from tts_gateway.admission import AdmissionGate, RateLimitResult, get_client_identifier
from tts_gateway.api.dependencies import all_gates, get_speech_service, get_tts_gate, get_voices_gate
from tts_gateway.api.schemas import (
    ErrorResponse,
    HealthResponse,
    LegadoImportRecord,
    LimiterStats,
    VoicesResponse,
)
from tts_gateway.connectors import SpeechAudio
from tts_gateway.core.logging import error, get_logger, info, log_response, set_request_id
from tts_gateway.core.metrics import metrics
from tts_gateway.services.errors import ErrorCode, GatewayError, RateLimitedError, ValidationError
from tts_gateway.services.legado import build_legado_import
from tts_gateway.services.speech_service import PITCH_RANGE, VOLUME_RANGE, SpeechService, TextSpeechParams
from tts_gateway.services.validators import validate_bounded_number, validate_required_string
from tts_gateway.utils.timeit import timeit

router = APIRouter()

_LOG = get_logger("tts-gateway.api")

AUDIO_CACHE_CONTROL = "public, max-age=31536000, immutable"
VOICES_CACHE_CONTROL = "public, max-age=3600"

_STATUS_MAP = {
    ErrorCode.INVALID_PARAMETER: 400,
    ErrorCode.MARKUP_INVALID: 400,
    ErrorCode.UNAUTHORIZED: 401,
    ErrorCode.RATE_LIMITED: 429,
    ErrorCode.UPSTREAM_FAILURE: 502,
}

_ERROR_RESPONSES = {
    status: {"model": ErrorResponse}
    for status in (400, 401, 429, 500, 502)
}


class _Exchange:
    """Per-request state shared between the dispatcher and a handler."""

    def __init__(self, request: Request, endpoint: str):
        self.request = request
        self.endpoint = endpoint
        self.rid = str(uuid.uuid4())[:12]
        self.rate_limit: Optional[RateLimitResult] = None
        peer = request.client.host if request.client else None
        self.client = get_client_identifier(request.headers, peer)

    @property
    def authorization(self) -> Optional[str]:
        return self.request.headers.get("authorization")


def _rate_headers(result: Optional[RateLimitResult]) -> Dict[str, str]:
    return result.headers() if result is not None else {}


def _error_response(e: GatewayError, ex: _Exchange) -> JSONResponse:
    """Render a GatewayError with its mapped status and any rate-limit headers."""
    status_code = _STATUS_MAP.get(e.code, 500)
    result = getattr(e, "rate_limit", None) or ex.rate_limit
    headers = _rate_headers(result)
    if isinstance(e, RateLimitedError):
        headers["Retry-After"] = str(max(0, math.ceil(e.rate_limit.reset_at - time.time())))
    return JSONResponse(status_code=status_code, content=e.to_dict(), headers=headers)


def _dispatch(request: Request, endpoint: str, handler: Callable[[_Exchange], Response]) -> Response:
    """
    Run one gated exchange: request id, logging, error mapping, metrics.

    Unexpected exceptions become a 500 with INTERNAL_ERROR; the detail is
    logged, never returned.
    """
    ex = _Exchange(request, endpoint)
    set_request_id(ex.rid)
    info(_LOG, "request", method=request.method, path=endpoint, ip=ex.client,
         user_agent=request.headers.get("user-agent", "-"))

    with timeit(endpoint) as t:
        try:
            response = handler(ex)
        except GatewayError as e:
            response = _error_response(e, ex)
        except Exception as e:
            error(_LOG, "unhandled_error", path=endpoint, error=f"{type(e).__name__}: {e}")
            response = JSONResponse(
                status_code=500,
                content={
                    "ok": False,
                    "error": ErrorCode.INTERNAL_ERROR,
                    "message": "Internal server error",
                    "request_id": ex.rid,
                },
            )

    response.headers["X-Request-Id"] = ex.rid
    log_response(_LOG, request.method, endpoint, response.status_code, seconds=round(t.seconds, 4))
    metrics.record_request(endpoint, response.status_code, t.seconds)
    return response


def _audio_response(speech: SpeechAudio, result: Optional[RateLimitResult]) -> Response:
    headers = {"Cache-Control": AUDIO_CACHE_CONTROL, **_rate_headers(result)}
    return Response(content=speech.audio, media_type=speech.content_type, headers=headers)


def _read_ssml(content_type: str, body: bytes) -> str:
    """
    Extract the SSML document from a POST body.

    application/json bodies must be {"ssml": "..."}; any other content type
    (text/xml, application/xml, text/plain, none) is taken as the document.
    """
    if "application/json" in content_type:
        try:
            data = json.loads(body.decode("utf-8") or "null")
        except (UnicodeDecodeError, ValueError):
            raise ValidationError("Invalid JSON body") from None
        ssml = data.get("ssml") if isinstance(data, dict) else None
        if not isinstance(ssml, str) or not ssml:
            raise ValidationError("Missing ssml field in JSON body")
        return ssml
    try:
        return body.decode("utf-8")
    except UnicodeDecodeError:
        raise ValidationError("SSML body must be UTF-8 encoded") from None


@router.get("/api/text-to-speech", response_class=Response, responses=_ERROR_RESPONSES)
def text_to_speech(
    request: Request,
    gate: AdmissionGate = Depends(get_tts_gate),
    service: SpeechService = Depends(get_speech_service),
):
    """
    Synthesize plain text.

    Query parameters:
        text (required), voice (required),
        pitch -100..100 (default 0), rate -100..100 (default 0),
        volume 0..100 (default 100),
        style or personality, styledegree 0.01..2, role.

    Returns audio with a one-year immutable Cache-Control: the same query
    always yields the same audio.
    """
    def handle(ex: _Exchange) -> Response:
        ex.rate_limit = gate.admit(ex.client, ex.authorization)
        params = TextSpeechParams.from_query(request.query_params, service.config.limits.max_text_chars)
        return _audio_response(service.synthesize_text(params), ex.rate_limit)

    return _dispatch(request, "/api/text-to-speech", handle)


@router.post("/api/ssml", response_class=Response, responses=_ERROR_RESPONSES)
async def ssml_to_speech(
    request: Request,
    gate: AdmissionGate = Depends(get_tts_gate),
    service: SpeechService = Depends(get_speech_service),
):
    """
    Synthesize a complete SSML document.

    Body: ``{"ssml": "<speak ...>...</speak>"}`` with application/json, or
    the raw document with any other content type. The document must start
    with ``<speak`` and end with ``</speak>``, and be at most 50 000
    characters.
    """
    body = await request.body()
    content_type = request.headers.get("content-type", "")

    def handle(ex: _Exchange) -> Response:
        ex.rate_limit = gate.admit(ex.client, ex.authorization)
        ssml = _read_ssml(content_type, body)
        return _audio_response(service.synthesize_ssml(ssml), ex.rate_limit)

    # Admission and synthesis block; keep them off the event loop
    return await run_in_threadpool(_dispatch, request, "/api/ssml", handle)


@router.get("/api/voices", responses=_ERROR_RESPONSES)
def list_voices(
    request: Request,
    gate: AdmissionGate = Depends(get_voices_gate),
    service: SpeechService = Depends(get_speech_service),
):
    """List the upstream voice catalog: ``{"success", "count", "voices"}``."""
    def handle(ex: _Exchange) -> Response:
        ex.rate_limit = gate.admit(ex.client, ex.authorization)
        voices = service.list_voices()
        payload = VoicesResponse(count=len(voices), voices=voices)
        headers = {"Cache-Control": VOICES_CACHE_CONTROL, **_rate_headers(ex.rate_limit)}
        return JSONResponse(content=jsonable_encoder(payload), headers=headers)

    return _dispatch(request, "/api/voices", handle)


@router.get("/api/legado-import", responses=_ERROR_RESPONSES)
def legado_import(
    request: Request,
    gate: AdmissionGate = Depends(get_tts_gate),
):
    """
    Build a Legado reader import record for one voice.

    Query parameters: token, voice (required), pitch, volume, personality,
    protocol (default http). Authenticated by the ``token`` query
    parameter; not rate limited.
    """
    def handle(ex: _Exchange) -> Response:
        query = request.query_params
        gate.verify_token(query.get("token"), ex.client)
        voice = validate_required_string(query.get("voice"), "voice")
        pitch = validate_bounded_number(query.get("pitch"), "pitch", 0, *PITCH_RANGE)
        volume = validate_bounded_number(query.get("volume"), "volume", 100, *VOLUME_RANGE)

        record = build_legado_import(
            host=request.headers.get("host") or request.url.netloc,
            voice=voice,
            pitch=pitch,
            volume=volume,
            personality=query.get("personality") or None,
            protocol=query.get("protocol") or "http",
            token=gate.secret or None,
        )
        return JSONResponse(content=jsonable_encoder(LegadoImportRecord(**record)))

    return _dispatch(request, "/api/legado-import", handle)


@router.get("/health", response_model=HealthResponse)
def health(service: SpeechService = Depends(get_speech_service)):
    """Health check: connector state, auth mode and limiter sizes."""
    return HealthResponse(
        version=__version__,
        limiters=[LimiterStats(**gate.limiter.stats()) for gate in all_gates()],
        **service.health_info(),
    )


@router.get("/metrics")
def prometheus_metrics():
    """Prometheus metrics in text exposition format."""
    content, content_type = metrics.get_metrics_response()
    return Response(content=content, media_type=content_type)
