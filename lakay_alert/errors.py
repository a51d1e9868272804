"""
Error classification for the incident store and geolocation.

Raw httpx exceptions and HTTP status codes are mapped onto a small taxonomy
so callers can tell a rejected draft from a vanished incident from a
network hiccup.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

import httpx


@dataclass
class StoreError(Exception):
    """Classified incident store failure."""
    error_code: str
    message: str
    status_code: Optional[int] = None
    original: Optional[Exception] = field(default=None, repr=False)

    def __str__(self):
        status = f" (HTTP {self.status_code})" if self.status_code else ""
        return f"{self.error_code}: {self.message}{status}"


class TransportError(StoreError):
    """Network, HTTP or serialization failure reaching the store."""


class ValidationError(StoreError):
    """The store rejected a malformed draft."""


class NotFoundError(StoreError):
    """The incident no longer exists."""


class LocationFailure(str, Enum):
    PERMISSION_DENIED = "permission_denied"
    TIMEOUT = "timeout"
    UNSUPPORTED = "unsupported"
    UNAVAILABLE = "unavailable"


@dataclass
class LocationError(Exception):
    """Geolocation could not produce a position."""
    reason: LocationFailure
    message: str = ""
    original: Optional[Exception] = field(default=None, repr=False)

    def __str__(self):
        return f"{self.reason.value}: {self.message}" if self.message else self.reason.value


def _response_detail(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text[:200] or response.reason_phrase
    if isinstance(body, dict):
        for key in ("message", "detail", "error", "hint"):
            if body.get(key):
                return str(body[key])[:200]
    return str(body)[:200]


def classify_http_error(exc: Exception, operation: str) -> StoreError:
    """Classify an exception raised while talking to the store.

    ``operation`` is one of ``list``, ``create`` or ``vote``; it decides which
    status codes count as validation or not-found failures.
    """
    if isinstance(exc, StoreError):
        return exc

    if isinstance(exc, httpx.HTTPStatusError):
        status = exc.response.status_code
        detail = _response_detail(exc.response)

        if operation == "create" and status in (400, 422):
            return ValidationError(
                error_code="draft_rejected",
                message=detail,
                status_code=status,
                original=exc,
            )
        if operation == "vote" and status == 404:
            return NotFoundError(
                error_code="incident_not_found",
                message=detail,
                status_code=status,
                original=exc,
            )
        return TransportError(
            error_code=f"http_{status}",
            message=detail,
            status_code=status,
            original=exc,
        )

    if isinstance(exc, httpx.TimeoutException):
        return TransportError(error_code="timeout", message=str(exc) or "Request timed out", original=exc)

    if isinstance(exc, httpx.HTTPError):
        return TransportError(error_code="connection_error", message=str(exc) or type(exc).__name__, original=exc)

    # JSON decoding and schema validation of the response body
    return TransportError(error_code="invalid_response", message=str(exc)[:200], original=exc)
