"""
Admission control for the gateway.

Components:
    - rate_limiter.py: RateLimiter (per-identifier sliding window) and RateLimitResult
    - auth.py: authorize() shared-secret check and UnauthorizedReason
    - gate.py: AdmissionGate combining both, and get_client_identifier()
"""
from .auth import AuthResult, UnauthorizedReason, authorize
from .gate import AdmissionGate, get_client_identifier
from .rate_limiter import RateLimiter, RateLimitResult

__all__ = [
    "AdmissionGate",
    "AuthResult",
    "RateLimitResult",
    "RateLimiter",
    "UnauthorizedReason",
    "authorize",
    "get_client_identifier",
]
