"""
Admission Gate: rate limit first, then credential.

One gate exists per rate-limited endpoint class (``tts`` and ``voices``),
each wrapping its own RateLimiter and sharing the configured secret.

Order is fixed: the limiter runs before the credential check, so a caller
that is both over budget and unauthenticated receives 429, and every
request (authenticated or not) consumes budget. Both rejections carry the
RateLimitResult so the response still has X-RateLimit-* headers.

Usage:
    gate = AdmissionGate(RateLimiter(name="tts"), secret="s3cret", name="tts")
    result = gate.admit(client_ip, request.headers.get("authorization"))
    response.headers.update(result.headers())
"""
from __future__ import annotations

from typing import Mapping, Optional

from tts_gateway.admission.auth import AuthResult, authorize
from tts_gateway.admission.rate_limiter import RateLimiter, RateLimitResult
from tts_gateway.core.logging import get_logger, verbose, warn
from tts_gateway.core.metrics import metrics
from tts_gateway.services.errors import RateLimitedError, UnauthorizedError

_LOG = get_logger("tts-gateway.admission")


class AdmissionGate:
    """
    Combined rate-limit and credential decision for one endpoint class.

    Attributes:
        limiter: The sliding-window limiter consulted first.
        secret: Shared secret; empty means open mode.
        name: Label for logs and metrics.
    """

    def __init__(self, limiter: RateLimiter, secret: Optional[str] = None, name: Optional[str] = None):
        self.limiter = limiter
        self.secret = secret or ""
        self.name = name or limiter.name

    def admit(self, identifier: str, authorization: Optional[str] = None) -> RateLimitResult:
        """
        Admit one request or raise.

        Args:
            identifier: Caller key (usually the client IP).
            authorization: Raw Authorization header value.

        Returns:
            The RateLimitResult of the admitted request.

        Raises:
            RateLimitedError: Budget exhausted.
            UnauthorizedError: Credential missing, malformed or wrong.
        """
        result = self.limiter.check(identifier)
        metrics.set_tracked_identifiers(self.name, self.limiter.tracked_count)
        if not result.allowed:
            metrics.record_rate_limited(self.name)
            warn(_LOG, "rate_limited", limiter=self.name, client=identifier, remaining=result.remaining)
            raise RateLimitedError(result, limiter=self.name)

        self._raise_if_rejected(authorize(authorization, self.secret), identifier, result)
        verbose(_LOG, "admitted", limiter=self.name, client=identifier, remaining=result.remaining)
        return result

    def verify_token(self, token: Optional[str], identifier: str = "unknown") -> None:
        """
        Verify a query-parameter token without consulting the limiter.

        Raises:
            UnauthorizedError: Token missing or wrong.
        """
        self._raise_if_rejected(authorize(token, self.secret, scheme=None), identifier, None)

    def _raise_if_rejected(
        self,
        auth: AuthResult,
        identifier: str,
        result: Optional[RateLimitResult],
    ) -> None:
        if auth.authorized:
            return
        metrics.record_auth_rejection(auth.reason_code)
        warn(_LOG, "unauthorized", limiter=self.name, client=identifier, reason=auth.reason_code)
        raise UnauthorizedError(auth.message or "Unauthorized", reason=auth.reason, rate_limit=result)


def get_client_identifier(headers: Mapping[str, str], fallback: Optional[str] = None) -> str:
    """
    Derive the rate-limit key for a request.

    Checks, in order: ``cf-connecting-ip``, ``x-real-ip``, the first entry
    of ``x-forwarded-for``, the socket peer address (``fallback``), and
    finally the literal ``"unknown"``. Header lookups use lowercase names;
    Starlette's Headers are case-insensitive.
    """
    cf_ip = headers.get("cf-connecting-ip")
    if cf_ip:
        return cf_ip.strip()

    real_ip = headers.get("x-real-ip")
    if real_ip:
        return real_ip.strip()

    forwarded = headers.get("x-forwarded-for")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first

    if fallback:
        return fallback
    return "unknown"
