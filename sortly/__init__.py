"""Client for the Sortly inventory REST API (items, folders, custom fields, search).

Usage example:
    from sortly import SortlyConnector
    sortly = SortlyConnector.from_env()
    item = sortly.create_item({'name': 'Widget'})
    print(item, sortly.rate_limit_remaining)
"""
from .exceptions import (  # noqa: F401
    SortlyApiError,
    AuthorizationError,
    ClientRequestError,
    ValidationError,
    RateLimitExceededError,
    ServerError,
    UnclassifiedError,
)
from .rate_limit import RateLimitState  # noqa: F401
from .sortly_client import SortlyConnector, DEFAULT_BASE_URL  # noqa: F401

__version__ = '1.0.0'
