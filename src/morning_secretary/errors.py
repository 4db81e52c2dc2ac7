"""
Error taxonomy for remote calls and delivery.

Provider exceptions (googleapiclient's HttpError, google.auth's RefreshError, or
anything carrying a ``status_code``/``code``) are classified, not wrapped, so the
retry layer can re-raise the original error unmodified.
"""
from __future__ import annotations

from enum import Enum
from typing import Optional

from google.auth.exceptions import RefreshError
from googleapiclient.errors import HttpError


REAUTH_HINT = "Please re-authenticate by running: python scripts/authorize.py"
RATE_LIMIT_HINT = "Google API rate limit exceeded. Please try again later."

# 403 reasons Google uses for quota exhaustion instead of a 429.
_RATE_LIMIT_REASONS = ("ratelimitexceeded", "userratelimitexceeded")


class ErrorKind(str, Enum):
    RATE_LIMITED = "rate_limited"
    AUTH_FAILURE = "auth_failure"
    OTHER = "other"


class ProviderError(RuntimeError):
    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class RateLimitedError(ProviderError):
    pass


class AuthFailureError(ProviderError):
    pass


class MalformedPayloadError(ValueError):
    pass


class DeliveryFailureError(RuntimeError):
    pass


def status_of(exc: BaseException) -> Optional[int]:
    """Best-effort HTTP status for a provider exception."""
    if isinstance(exc, HttpError):
        try:
            return int(exc.resp.status)
        except (AttributeError, TypeError, ValueError):
            return None
    for attr in ("status_code", "code"):
        value = getattr(exc, attr, None)
        if isinstance(value, int):
            return value
    return None


def _reason_of(exc: BaseException) -> str:
    if isinstance(exc, HttpError):
        reason = getattr(exc, "reason", None) or ""
        details = getattr(exc, "error_details", None) or ""
        return f"{reason} {details}".lower()
    return str(exc).lower()


def classify_error(exc: BaseException) -> ErrorKind:
    if isinstance(exc, RateLimitedError):
        return ErrorKind.RATE_LIMITED
    if isinstance(exc, (AuthFailureError, RefreshError)):
        return ErrorKind.AUTH_FAILURE

    status = status_of(exc)
    if status == 429:
        return ErrorKind.RATE_LIMITED
    if status == 403 and any(r in _reason_of(exc) for r in _RATE_LIMIT_REASONS):
        return ErrorKind.RATE_LIMITED
    if status in (401, 403):
        return ErrorKind.AUTH_FAILURE
    return ErrorKind.OTHER


def describe_error(exc: BaseException) -> str:
    """Operator-facing one-liner with guidance for the fatal/limit cases."""
    kind = classify_error(exc)
    if kind is ErrorKind.AUTH_FAILURE:
        return f"Authentication failed or expired. {REAUTH_HINT}"
    if kind is ErrorKind.RATE_LIMITED:
        return RATE_LIMIT_HINT
    return f"{type(exc).__name__}: {exc}"
