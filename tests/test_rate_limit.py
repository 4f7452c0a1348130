import pytest
from requests.structures import CaseInsensitiveDict
from sortly import ClientRequestError, RateLimitState
from sortly.rate_limit import update_from_headers
from conftest import make_response

FULL_HEADERS = {
    'Sortly-Rate-Limit-Max': '1000',
    'Sortly-Rate-Limit-Remaining': '998',
    'Sortly-Rate-Limit-Reset': '3600',
    'X-Request-Id': 'req-1',
}


def test_update_reads_headers_case_insensitively():
    headers = CaseInsensitiveDict({k.lower(): v for k, v in FULL_HEADERS.items()})
    state = update_from_headers(RateLimitState(), headers)
    assert state == RateLimitState(limit=1000, remaining=998, reset_seconds=3600, request_id='req-1')


def test_absent_or_invalid_headers_keep_prior_values():
    prior = RateLimitState(limit=1000, remaining=5, reset_seconds=60, request_id='req-1')
    headers = CaseInsensitiveDict({'Sortly-Rate-Limit-Remaining': '4', 'Sortly-Rate-Limit-Max': 'n/a'})
    state = update_from_headers(prior, headers)
    assert state == RateLimitState(limit=1000, remaining=4, reset_seconds=60, request_id='req-1')
    assert prior.remaining == 5


def test_connector_state_starts_empty(client):
    assert client.rate_limit_state == RateLimitState()
    assert client.rate_limit_max is None
    assert client.rate_limit_remaining is None
    assert client.rate_limit_reset is None
    assert client.request_id is None


def test_state_reflects_latest_response(client, session):
    session.queue(
        make_response(200, {'data': []}, headers=FULL_HEADERS),
        make_response(200, {'data': []}, headers={'Sortly-Rate-Limit-Remaining': '997', 'X-Request-Id': 'req-2'}),
    )
    client.list_items()
    assert client.rate_limit_remaining == 998
    client.list_items()
    assert client.rate_limit_max == 1000
    assert client.rate_limit_remaining == 997
    assert client.rate_limit_reset == 3600
    assert client.request_id == 'req-2'


def test_state_is_updated_on_failed_responses(client, session):
    session.queue(make_response(400, {'message': 'bad'}, headers={**FULL_HEADERS, 'Sortly-Rate-Limit-Remaining': '12'}))
    with pytest.raises(ClientRequestError):
        client.search_items({'name': 'x'})
    assert client.rate_limit_remaining == 12
    assert client.request_id == 'req-1'


def test_state_is_replaced_not_mutated(client, session):
    session.queue(make_response(200, {'data': []}, headers=FULL_HEADERS))
    before = client.rate_limit_state
    client.list_items()
    assert before == RateLimitState()
    assert client.rate_limit_state is not before
