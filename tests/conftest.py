import json
import pytest
import requests
from requests.structures import CaseInsensitiveDict
from sortly import SortlyConnector

API_TOKEN = 'test-token'


def make_response(status, body=None, headers=None, text=None):
    resp = requests.Response()
    resp.status_code = status
    resp.headers = CaseInsensitiveDict(headers or {})
    if body is not None:
        resp._content = json.dumps(body).encode('utf-8')
        resp.headers.setdefault('Content-Type', 'application/json')
    elif text is not None:
        resp._content = text.encode('utf-8')
    else:
        resp._content = b''
    resp.encoding = 'utf-8'
    return resp


class FakeSession:
    """Records outgoing requests and replays queued responses or exceptions."""

    def __init__(self):
        self.calls = []
        self.responses = []

    def queue(self, *items):
        self.responses.extend(items)
        return self

    def request(self, method, url, **kwargs):
        self.calls.append(dict(method=method, url=url, **kwargs))
        if not self.responses:
            raise AssertionError(f'unexpected request {method} {url}')
        nxt = self.responses.pop(0)
        if isinstance(nxt, Exception):
            raise nxt
        return nxt

    @property
    def last(self):
        return self.calls[-1]


@pytest.fixture
def session():
    return FakeSession()


@pytest.fixture
def client(session):
    return SortlyConnector(API_TOKEN, session=session)
