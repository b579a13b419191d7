# ============================================================================
# HEALTH CHECK AUTH GATE
# ============================================================================
# STATUS: Infrastructure - Token-based access control
# PURPOSE: Decide whether a request may see the health report
# CREATED: 18 OCT 2026
# ============================================================================
"""
Health Check Auth Gate

Stateless predicate evaluated once per request:

1. custom_validator set     -> its boolean is the decision
2. no token configured      -> deny if auth is required, else allow
3. extract candidate token  -> Bearer, X-Healthcheck-Token, ?token=
                               (opt-in), Basic password; first non-empty wins
4. constant-time compare    -> authorized / denied

Denial reasons distinguish "no token provided" from "invalid token" for
logs and the on_auth_failure hook only. Callers must not show them in
strict mode; create_unauthorized_response() builds the caller-facing body.

Defaults are environment-aware: require_auth and strict_mode are on in
production-like environments and off elsewhere.
"""

import base64
import binascii
import hmac
from dataclasses import dataclass
from typing import Any, Dict, Optional

from core.logging import ComponentType, get_logger
from core.models import AuthConfig
from health.request import get_header, get_query_param

logger = get_logger(__name__, ComponentType.AUTH)


UNAUTHORIZED = "UNAUTHORIZED"
TOKEN_HEADER = "X-Healthcheck-Token"
QUERY_TOKEN_PARAM = "token"

REASON_CUSTOM_REJECTED = "Custom validator rejected request"
REASON_NOT_CONFIGURED = "Authentication token required but not configured"
REASON_NO_TOKEN = "Authentication token required"
REASON_INVALID_TOKEN = "Invalid authentication token"


class UnauthorizedError(Exception):
    """
    Raised by the runner when its own auth backstop denies a request.

    str(error) is always the UNAUTHORIZED sentinel; the internal reason is
    kept on .reason for logging.
    """

    def __init__(self, reason: Optional[str] = None):
        super().__init__(UNAUTHORIZED)
        self.reason = reason


@dataclass(frozen=True)
class AuthResult:
    """Outcome of validate_auth()."""
    authorized: bool
    reason: Optional[str] = None

    def __bool__(self) -> bool:
        return self.authorized


def constant_time_compare(provided: str, expected: str) -> bool:
    """
    Compare two tokens without leaking where they differ.

    Length mismatch is rejected up front; equal-length inputs are compared
    with hmac.compare_digest.
    """
    a = provided.encode("utf-8")
    b = expected.encode("utf-8")
    if len(a) != len(b):
        return False
    return hmac.compare_digest(a, b)


def _basic_auth_password(header: str) -> Optional[str]:
    try:
        decoded = base64.b64decode(header[len("Basic "):].strip(), validate=True)
        credentials = decoded.decode("utf-8")
    except (binascii.Error, UnicodeDecodeError, ValueError):
        return None
    _, sep, password = credentials.partition(":")
    return password if sep else None


def extract_token(request: Any, allow_query_token: bool = False) -> Optional[str]:
    """Extract the first non-empty candidate token from the request."""
    auth_header = (get_header(request, "Authorization") or "").strip()

    if auth_header.startswith("Bearer "):
        token = auth_header[len("Bearer "):].strip()
        if token:
            return token

    token = (get_header(request, TOKEN_HEADER) or "").strip()
    if token:
        return token

    if allow_query_token:
        token = (get_query_param(request, QUERY_TOKEN_PARAM) or "").strip()
        if token:
            return token

    if auth_header.startswith("Basic "):
        token = _basic_auth_password(auth_header)
        if token:
            return token

    return None


def _deny(request: Any, config: Optional[AuthConfig], reason: str) -> AuthResult:
    logger.warning(f"Health check auth denied: {reason}")
    if config is not None and config.on_auth_failure is not None:
        try:
            config.on_auth_failure(request, reason)
        except Exception as e:
            logger.error(f"on_auth_failure hook failed: {e}")
    return AuthResult(authorized=False, reason=reason)


def validate_auth(request: Any, config: Optional[AuthConfig] = None) -> AuthResult:
    """
    Decide whether request may access the health report.

    Args:
        request: Request-like value (see health.request)
        config: Auth configuration; None behaves like an empty AuthConfig

    Returns:
        AuthResult with an internal-only reason on denial
    """
    auth = config if config is not None else AuthConfig()

    if auth.custom_validator is not None:
        try:
            allowed = bool(auth.custom_validator(request))
        except Exception as e:
            logger.error(f"Custom auth validator raised {type(e).__name__}: {e}")
            allowed = False
        if allowed:
            return AuthResult(authorized=True)
        return _deny(request, config, REASON_CUSTOM_REJECTED)

    if not auth.token:
        if auth.resolved_require_auth():
            return _deny(request, config, REASON_NOT_CONFIGURED)
        return AuthResult(authorized=True)

    provided = extract_token(request, auth.allow_query_token)
    if provided and constant_time_compare(provided, auth.token):
        return AuthResult(authorized=True)

    return _deny(request, config, REASON_INVALID_TOKEN if provided else REASON_NO_TOKEN)


def create_unauthorized_response(strict_mode: bool = True) -> Dict[str, Any]:
    """
    Caller-facing 401 payload.

    Strict mode returns only the generic error token.
    """
    body: Dict[str, Any] = {"error": "Unauthorized"}
    if not strict_mode:
        body["message"] = "Health check requires authentication"
    return {"status_code": 401, "body": body}


__all__ = [
    "UNAUTHORIZED",
    "UnauthorizedError",
    "AuthResult",
    "constant_time_compare",
    "extract_token",
    "validate_auth",
    "create_unauthorized_response",
]
