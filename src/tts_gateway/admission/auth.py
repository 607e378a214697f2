"""
Shared-secret credential verification.

A credential arrives either as an ``Authorization: Bearer <token>`` header
or as a bare ``token`` query parameter. With no secret configured the
gateway runs in open mode and every caller is authorized.

Rules, in order:
    1. No secret configured          -> authorized
    2. No credential presented       -> MISSING_CREDENTIAL
    3. Scheme prefix absent (header) -> MALFORMED_CREDENTIAL
    4. Token differs from the secret -> CREDENTIAL_MISMATCH
    5. Otherwise                     -> authorized

Tokens are compared with ``hmac.compare_digest``.
"""
from __future__ import annotations

import hmac
from dataclasses import dataclass
from enum import Enum
from typing import Optional


class UnauthorizedReason(str, Enum):
    MISSING_CREDENTIAL = "missing_credential"
    MALFORMED_CREDENTIAL = "malformed_credential"
    CREDENTIAL_MISMATCH = "credential_mismatch"


@dataclass(frozen=True)
class AuthResult:
    """Outcome of ``authorize``; ``reason`` and ``message`` are set on rejection."""
    authorized: bool
    reason: Optional[UnauthorizedReason] = None
    message: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.authorized and self.reason is None:
            raise ValueError("a rejected AuthResult needs a reason")

    @property
    def reason_code(self) -> str:
        """Metric and log label of the rejection; empty when authorized."""
        return self.reason.value if self.reason is not None else ""


_AUTHORIZED = AuthResult(authorized=True)


def authorize(
    presented: Optional[str],
    secret: Optional[str],
    scheme: Optional[str] = "Bearer",
) -> AuthResult:
    """
    Verify a presented credential against the configured secret.

    Args:
        presented: Raw header value, or the query token when ``scheme`` is None.
        secret: Configured shared secret; empty or None means open mode.
        scheme: Required header scheme prefix. None for query-token transport.

    Returns:
        AuthResult describing the decision.
    """
    if not secret:
        return _AUTHORIZED

    if not presented:
        message = "Missing Authorization header" if scheme is not None else "Missing token parameter"
        return AuthResult(False, UnauthorizedReason.MISSING_CREDENTIAL, message)

    if scheme is not None:
        prefix = f"{scheme} "
        if not presented.startswith(prefix):
            return AuthResult(
                False,
                UnauthorizedReason.MALFORMED_CREDENTIAL,
                f"Invalid Authorization format. Expected: {scheme} <token>",
            )
        token = presented[len(prefix):]
    else:
        token = presented

    if not hmac.compare_digest(token.encode("utf-8"), secret.encode("utf-8")):
        return AuthResult(False, UnauthorizedReason.CREDENTIAL_MISMATCH, "Invalid token")

    return _AUTHORIZED
