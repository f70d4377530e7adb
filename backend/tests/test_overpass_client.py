import logging

import pytest
import requests

from domain.errors import ExhaustedRetries
from domain.models import Coordinate
from services.overpass_client import RetryingFetcher
from services.overpass_query import QueryBuilder

QUERY = QueryBuilder().build(Coordinate(48.8566, 2.3522))


class DummyResponse:
    def __init__(self, json_data, status_error=None):
        self._json = json_data
        self._status_error = status_error

    def raise_for_status(self):
        if self._status_error:
            raise self._status_error

    def json(self):
        if isinstance(self._json, Exception):
            raise self._json
        return self._json


class FakeSession:
    """Plays back a script of responses or exceptions, one per call."""

    def __init__(self, script):
        self.script = list(script)
        self.calls = []

    def get(self, url, params=None, headers=None, timeout=None):
        self.calls.append({"url": url, "params": params, "headers": headers, "timeout": timeout})
        item = self.script.pop(0)
        if isinstance(item, Exception):
            raise item
        return item


def _fetcher(session, sleeps, **kwargs):
    return RetryingFetcher(base_url="http://overpass.local/api", session=session, sleep=sleeps.append, **kwargs)


def test_success_on_first_attempt_sends_query_text():
    session = FakeSession([DummyResponse({"elements": [{"id": 1}]})])
    sleeps = []

    elements = _fetcher(session, sleeps).fetch(QUERY)

    assert elements == [{"id": 1}]
    assert sleeps == []
    assert session.calls[0]["url"] == "http://overpass.local/api"
    assert session.calls[0]["params"] == {"data": QUERY.to_overpass_ql()}
    assert session.calls[0]["timeout"] == 60.0


def test_empty_elements_is_success():
    session = FakeSession([DummyResponse({"elements": []})])
    sleeps = []

    assert _fetcher(session, sleeps).fetch(QUERY) == []
    assert len(session.calls) == 1


def test_two_failures_then_success(caplog):
    caplog.set_level(logging.WARNING, logger="services.overpass_client")
    session = FakeSession(
        [
            requests.Timeout("slow"),
            DummyResponse({}, status_error=requests.HTTPError("429 Too Many Requests")),
            DummyResponse({"elements": [{"id": 7}]}),
        ]
    )
    sleeps = []

    elements = _fetcher(session, sleeps).fetch(QUERY, max_attempts=3, delay_ms=5000)

    assert elements == [{"id": 7}]
    assert len(session.calls) == 3
    assert sleeps == [5.0, 5.0]
    failed = [r for r in caplog.records if "failed" in r.getMessage()]
    assert len(failed) == 2
    assert "attempt 1/3" in failed[0].getMessage()
    assert "attempt 2/3" in failed[1].getMessage()


def test_always_failing_raises_after_exact_attempts():
    session = FakeSession([requests.ConnectionError("down")] * 5)
    sleeps = []

    with pytest.raises(ExhaustedRetries) as excinfo:
        _fetcher(session, sleeps).fetch(QUERY, max_attempts=3, delay_ms=10)

    assert len(session.calls) == 3
    assert sleeps == [0.01, 0.01]
    assert excinfo.value.attempts == 3
    assert "down" in str(excinfo.value.last_error)


def test_bad_payloads_count_as_failures():
    session = FakeSession(
        [
            DummyResponse(ValueError("not json")),
            DummyResponse({"remark": "runtime error"}),
        ]
    )
    sleeps = []

    with pytest.raises(ExhaustedRetries):
        _fetcher(session, sleeps, max_attempts=2, delay_ms=0).fetch(QUERY)
    assert len(session.calls) == 2


def test_instance_defaults_used_when_not_overridden():
    session = FakeSession([requests.ConnectionError("x"), DummyResponse({"elements": []})])
    sleeps = []

    fetcher = _fetcher(session, sleeps, max_attempts=2, delay_ms=250, timeout_ms=1500)
    assert fetcher.fetch(QUERY) == []
    assert sleeps == [0.25]
    assert session.calls[0]["timeout"] == 1.5


def test_rejects_non_positive_attempts():
    with pytest.raises(ValueError):
        _fetcher(FakeSession([]), []).fetch(QUERY, max_attempts=0)


def test_constructor_rejects_non_positive_attempts():
    with pytest.raises(ValueError):
        RetryingFetcher(max_attempts=0, session=FakeSession([]))


def test_sends_own_user_agent():
    session = FakeSession([DummyResponse({"elements": []})])

    RetryingFetcher(session=session, user_agent="overpass-client/1.0", sleep=lambda s: None).fetch(QUERY)

    assert session.calls[0]["headers"] == {"User-Agent": "overpass-client/1.0"}
