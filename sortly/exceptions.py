from __future__ import annotations
from typing import Any, Optional


class SortlyApiError(Exception):
    """Base error for every failure raised by the connector."""

    def __init__(self, message: str, status_code: Optional[int] = None, raw_body: Any = None,
                 method: Optional[str] = None, url: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.raw_body = raw_body
        self.method = method
        self.url = url


class AuthorizationError(SortlyApiError):
    """Authentication or authorization failure (401/403)."""


class ClientRequestError(SortlyApiError):
    """Request rejected by the API (400 and other 4xx, 404 on non-GET)."""


class ValidationError(ClientRequestError):
    """Caller arguments failed a local precondition; no request was sent."""


class RateLimitExceededError(SortlyApiError):
    """Rate limiting encountered (429)."""


class ServerError(SortlyApiError):
    """Server side failure (5xx)."""


class UnclassifiedError(SortlyApiError):
    """Transport failure, redirect or otherwise unexpected response."""
