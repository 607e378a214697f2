"""
Gateway error codes and exceptions.

Every failure the gateway reports to a caller is a GatewayError subclass.
The API layer maps ``code`` to an HTTP status and renders ``to_dict()``
as the JSON body:

    ValidationError        INVALID_PARAMETER  -> 400
    MarkupValidationError  MARKUP_INVALID     -> 400
    UnauthorizedError      UNAUTHORIZED       -> 401
    RateLimitedError       RATE_LIMITED       -> 429
    UpstreamError          UPSTREAM_FAILURE   -> 502
    anything else          INTERNAL_ERROR     -> 500

Rejections raised by the admission gate carry the RateLimitResult of the
check that preceded them, so the response still has rate-limit headers.
"""
from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, Optional

if TYPE_CHECKING:
    from tts_gateway.admission.auth import UnauthorizedReason
    from tts_gateway.admission.rate_limiter import RateLimitResult


class ErrorCode:
    """Machine-readable error codes returned in API error bodies."""
    INVALID_PARAMETER = "INVALID_PARAMETER"     # Missing/non-numeric/out-of-range input
    MARKUP_INVALID = "MARKUP_INVALID"           # SSML failed structural or length check
    UNAUTHORIZED = "UNAUTHORIZED"               # Missing/malformed/mismatched credential
    RATE_LIMITED = "RATE_LIMITED"               # Sliding-window budget exhausted
    UPSTREAM_FAILURE = "UPSTREAM_FAILURE"       # Synthesis connector failed
    INTERNAL_ERROR = "INTERNAL_ERROR"           # Unexpected error


class GatewayError(Exception):
    """
    Base exception for gateway errors.

    Attributes:
        message: Human-readable error message.
        code: Error code from ErrorCode.
        details: Optional dictionary with additional context.
    """
    def __init__(self, message: str, code: str = ErrorCode.INTERNAL_ERROR, details: Optional[Dict] = None):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the standard error response body."""
        result: Dict[str, Any] = {
            "ok": False,
            "error": self.code,
            "message": self.message,
        }
        if self.details:
            result["details"] = self.details
        return result


class ValidationError(GatewayError):
    """A request parameter is missing, not a number, or out of range."""
    def __init__(self, message: str, details: Optional[Dict] = None):
        super().__init__(message, ErrorCode.INVALID_PARAMETER, details)


class MarkupValidationError(GatewayError):
    """An SSML document or markup attribute is not acceptable."""
    def __init__(self, message: str, details: Optional[Dict] = None):
        super().__init__(message, ErrorCode.MARKUP_INVALID, details)


class UnauthorizedError(GatewayError):
    """
    The caller's credential was rejected.

    Attributes:
        reason: Which rule rejected the credential.
        rate_limit: Result of the rate check that ran first, if any.
    """
    def __init__(
        self,
        message: str,
        reason: "UnauthorizedReason",
        rate_limit: Optional["RateLimitResult"] = None,
    ):
        super().__init__(message, ErrorCode.UNAUTHORIZED, {"reason": reason.value})
        self.reason = reason
        self.rate_limit = rate_limit


class RateLimitedError(GatewayError):
    """The caller exhausted its budget for the current window."""
    def __init__(self, rate_limit: "RateLimitResult", limiter: str = "default"):
        super().__init__(
            "Rate limit exceeded. Please try again later.",
            ErrorCode.RATE_LIMITED,
            {"limit": rate_limit.limit, "reset_at": rate_limit.reset_at_iso},
        )
        self.rate_limit = rate_limit
        self.limiter = limiter


class UpstreamError(GatewayError):
    """The synthesis connector failed."""
    def __init__(self, message: str, details: Optional[Dict] = None):
        super().__init__(message, ErrorCode.UPSTREAM_FAILURE, details)
