from __future__ import annotations
import os
import time
import json
import logging
from typing import Any, Dict, Mapping, Optional
import requests
from requests.structures import CaseInsensitiveDict
from .exceptions import (
    AuthorizationError,
    ClientRequestError,
    RateLimitExceededError,
    ServerError,
    UnclassifiedError,
    ValidationError,
)
from .rate_limit import RateLimitState, update_from_headers

logger = logging.getLogger(__name__)

ALLOWED_METHODS = ('GET', 'POST', 'PUT', 'DELETE')
NO_CONTENT = 204


def _decode_body(resp: requests.Response) -> Any:
    """Decoded JSON body when possible, raw text otherwise (None when empty)."""
    if not resp.content:
        return None
    try:
        return resp.json()
    except ValueError:
        return resp.text


def _error_message(body: Any, default: str) -> str:
    if isinstance(body, dict) and body.get('message'):
        return str(body['message'])
    if isinstance(body, (dict, list)):
        return json.dumps(body)
    if body:
        return str(body)[:500]
    return default


class BaseClient:
    """Base HTTP client with JSON handling, response classification and rate-limit bookkeeping."""
    BASE_URL: str = ''
    USER_AGENT: str = 'python-requests-connector'

    def __init__(self, base_url: Optional[str] = None, timeout: float = 30, session: Optional[requests.Session] = None):
        self._base_url = (base_url or self.BASE_URL).rstrip('/')
        self.session = session if session is not None else requests.Session()
        self.timeout = timeout
        self.rate_limit_state = RateLimitState()

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def rate_limit_max(self) -> Optional[int]:
        return self.rate_limit_state.limit

    @property
    def rate_limit_remaining(self) -> Optional[int]:
        return self.rate_limit_state.remaining

    @property
    def rate_limit_reset(self) -> Optional[int]:
        return self.rate_limit_state.reset_seconds

    @property
    def request_id(self) -> Optional[str]:
        return self.rate_limit_state.request_id

    def _headers(self) -> Dict[str, str]:
        return {
            'Accept': 'application/json',
            'User-Agent': self.USER_AGENT,
        }

    def _request(self, method: str, path: str, *, params: Mapping[str, Any] | None = None,
                 json_body: Any | None = None, headers: Mapping[str, str] | None = None,
                 retries: int = 0, timeout: float | None = None) -> Any:
        """Issue one request and classify its response.

        ``headers`` are merged over the defaults, overriding per key.
        ``retries`` is opt-in: transport failures and 5xx responses are
        re-attempted that many times with exponential backoff. 429 and
        other 4xx responses are never retried.
        """
        method = method.upper()
        if method not in ALLOWED_METHODS:
            raise ValidationError(f"Unsupported HTTP method: {method}")
        url = path if path.startswith('http') else self._base_url + '/' + path.lstrip('/')
        query = {k: v for k, v in (params or {}).items() if v is not None} or None
        req_headers = CaseInsensitiveDict(self._headers())
        if json_body is not None:
            # Same rules requests applies when encoding json=; NaN/Infinity are rejected.
            try:
                json.dumps(json_body, allow_nan=False)
            except (TypeError, ValueError) as e:
                raise ValidationError(f"Payload is not valid JSON: {e}", method=method, url=url) from e
            req_headers['Content-Type'] = 'application/json'
        if headers:
            req_headers.update(headers)

        attempt = 0
        while True:
            logger.debug("%s %s params=%s", method, url, query)
            if json_body is not None:
                logger.debug("  JSON payload: %s", json_body)
            try:
                resp = self.session.request(
                    method, url, params=query, headers=dict(req_headers), json=json_body,
                    timeout=self.timeout if timeout is None else timeout, allow_redirects=False,
                )
            except requests.RequestException as e:
                if attempt < retries:
                    attempt += 1
                    time.sleep(2 ** attempt)
                    continue
                raise UnclassifiedError(f"Network error: {e}", method=method, url=url) from e

            if resp.status_code >= 500 and attempt < retries:
                self._record_rate_limit(resp)
                attempt += 1
                logger.warning("Server error %s on %s %s, retry %s/%s", resp.status_code, method, url, attempt, retries)
                time.sleep(2 ** attempt)
                continue
            return self._handle_response(resp, method, url, json_body)

    def _record_rate_limit(self, resp: requests.Response) -> None:
        self.rate_limit_state = update_from_headers(self.rate_limit_state, resp.headers)

    def _handle_response(self, resp: requests.Response, method: str, url: str, json_body: Any = None) -> Any:
        status = resp.status_code
        self._record_rate_limit(resp)

        if 200 <= status < 300:
            logger.debug("  ...OK HTTP-%s", status)
            if status == NO_CONTENT or not resp.content:
                return {}
            try:
                result = resp.json()
            except ValueError as e:
                raise UnclassifiedError('Failed to decode JSON response', status_code=status,
                                        raw_body=resp.text[:500], method=method, url=url) from e
            logger.debug("  response payload: %s", result)
            return result

        if status == 404 and method == 'GET':
            logger.debug("  ...not found HTTP-404, returning empty result")
            return {}

        body = _decode_body(resp)
        ctx = {'status_code': status, 'raw_body': body, 'method': method, 'url': url}
        logger.warning("%s %s failed with HTTP-%s", method, url, status)

        if 300 <= status < 400:
            location = resp.headers.get('Location', 'unknown location')
            raise UnclassifiedError(f"Unexpected redirect (HTTP-{status}) to {location}", **ctx)
        if status in (401, 403):
            raise AuthorizationError(_error_message(body, f"Authorization error (HTTP-{status})"), **ctx)
        if status == 429:
            raise RateLimitExceededError(
                f"Sortly rate limit exceeded. Try again in {self.rate_limit_state.reset_seconds} seconds.", **ctx)
        if 400 <= status < 500:
            raise ClientRequestError(_error_message(body, f"Client error (HTTP-{status})"), **ctx)
        if 500 <= status < 600:
            payload = json.dumps(json_body) if json_body is not None else '-'
            detail = _error_message(body, 'no details')
            raise ServerError(f"Server error (HTTP-{status}) on {method} {url} payload={payload}. Details: {detail}", **ctx)
        raise UnclassifiedError(f"Unhandled response (HTTP-{status}): {_error_message(body, 'no details')}", **ctx)

    @staticmethod
    def env(name: str, required: bool = True) -> Optional[str]:
        val = os.getenv(name)
        if required and (val is None or val.strip() == ''):
            raise AuthorizationError(f"Missing required environment variable: {name}")
        return val
