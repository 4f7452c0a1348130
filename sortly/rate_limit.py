"""Rate-limit bookkeeping mirrored from Sortly response headers."""
from __future__ import annotations
from dataclasses import dataclass, replace
from typing import Mapping, Optional

LIMIT_HEADER = 'Sortly-Rate-Limit-Max'
REMAINING_HEADER = 'Sortly-Rate-Limit-Remaining'
RESET_HEADER = 'Sortly-Rate-Limit-Reset'
REQUEST_ID_HEADER = 'X-Request-Id'


@dataclass(frozen=True)
class RateLimitState:
    limit: Optional[int] = None
    remaining: Optional[int] = None
    reset_seconds: Optional[int] = None  # seconds until the window resets
    request_id: Optional[str] = None


def _header_int(headers: Mapping[str, str], name: str) -> Optional[int]:
    raw = headers.get(name)
    if raw is None:
        return None
    try:
        return int(str(raw).strip())
    except ValueError:
        return None


def update_from_headers(prior: RateLimitState, headers: Mapping[str, str]) -> RateLimitState:
    """Return a new snapshot built from ``headers``.

    ``headers`` must support case-insensitive lookup (``requests`` gives a
    ``CaseInsensitiveDict``). A header that is missing or not an integer keeps
    the value recorded in ``prior``.
    """
    limit = _header_int(headers, LIMIT_HEADER)
    remaining = _header_int(headers, REMAINING_HEADER)
    reset = _header_int(headers, RESET_HEADER)
    request_id = headers.get(REQUEST_ID_HEADER)
    return replace(
        prior,
        limit=prior.limit if limit is None else limit,
        remaining=prior.remaining if remaining is None else remaining,
        reset_seconds=prior.reset_seconds if reset is None else reset,
        request_id=request_id or prior.request_id,
    )
