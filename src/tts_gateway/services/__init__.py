"""
tts-gateway Services Layer.

Components:
    - errors.py: ErrorCode and the GatewayError hierarchy
    - validators.py: Transport-independent parameter validation
    - speech_service.py: SpeechService orchestration (import it directly;
      it depends on the ssml and connectors packages, which in turn use
      the errors defined here)
"""
from .errors import (
    ErrorCode,
    GatewayError,
    MarkupValidationError,
    RateLimitedError,
    UnauthorizedError,
    UpstreamError,
    ValidationError,
)
from .validators import (
    validate_bounded_number,
    validate_required_string,
    validate_text_length,
)

__all__ = [
    "ErrorCode",
    "GatewayError",
    "MarkupValidationError",
    "RateLimitedError",
    "UnauthorizedError",
    "UpstreamError",
    "ValidationError",
    "validate_bounded_number",
    "validate_required_string",
    "validate_text_length",
]
