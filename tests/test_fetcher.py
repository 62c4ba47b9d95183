import logging

import pytest
import requests

from catalog.scraping.fetcher import FailureKind, Fetcher, FetchError, backoff_seconds
from conftest import FakeResponse

URL = "https://shop.example.mx/shop"


def _fetcher(session, sleep, **kwargs) -> Fetcher:
    return Fetcher(headers={"User-Agent": "TestAgent/1.0"}, session=session, sleep=sleep, **kwargs)


# ---------------------------------------------------------------------------
# Backoff policy
# ---------------------------------------------------------------------------


class TestBackoffSeconds:
    def test_transient_failures_back_off_on_powers_of_two(self) -> None:
        assert [backoff_seconds(FailureKind.TRANSPORT, n) for n in (1, 2)] == [2.0, 4.0]
        assert backoff_seconds(FailureKind.HTTP_STATUS, 1) == 2.0

    def test_rate_limited_backs_off_on_powers_of_three(self) -> None:
        assert [backoff_seconds(FailureKind.RATE_LIMITED, n) for n in (1, 2)] == [3.0, 9.0]


# ---------------------------------------------------------------------------
# Retries
# ---------------------------------------------------------------------------


class TestFetcher:
    def test_returns_body_and_sends_headers(self, fake_session, recording_sleep) -> None:
        fake_session.add_html(URL, "<html>ok</html>")

        body = _fetcher(fake_session, recording_sleep, timeout_seconds=7.0).fetch(URL)

        assert body == "<html>ok</html>"
        assert fake_session.calls[0]["headers"] == {"User-Agent": "TestAgent/1.0"}
        assert fake_session.calls[0]["timeout"] == 7.0
        assert recording_sleep.calls == []

    def test_retries_transport_error_then_succeeds(self, fake_session, recording_sleep, connection_error) -> None:
        fake_session.add(URL, connection_error, FakeResponse(text="recovered"))

        assert _fetcher(fake_session, recording_sleep).fetch(URL) == "recovered"
        assert fake_session.count(URL) == 2
        assert recording_sleep.calls == [2.0]

    def test_server_errors_exhaust_budget_without_trailing_sleep(self, fake_session, recording_sleep) -> None:
        fake_session.add(URL, FakeResponse(status_code=503))

        with pytest.raises(FetchError) as exc_info:
            _fetcher(fake_session, recording_sleep).fetch(URL)

        assert exc_info.value.kind is FailureKind.HTTP_STATUS
        assert exc_info.value.status_code == 503
        assert exc_info.value.attempts == 3
        assert fake_session.count(URL) == 3
        assert recording_sleep.calls == [2.0, 4.0]

    def test_rate_limit_uses_steeper_backoff(self, fake_session, recording_sleep) -> None:
        fake_session.add(
            URL,
            FakeResponse(status_code=429),
            FakeResponse(status_code=429),
            FakeResponse(text="finally"),
        )

        assert _fetcher(fake_session, recording_sleep).fetch(URL) == "finally"
        assert recording_sleep.calls == [3.0, 9.0]

    def test_rate_limited_attempts_are_logged_as_failures(self, fake_session, recording_sleep, caplog) -> None:
        fake_session.add(URL, FakeResponse(status_code=429), FakeResponse(text="ok"))
        caplog.set_level(logging.ERROR, logger="catalog.scraping.fetcher")

        _fetcher(fake_session, recording_sleep).fetch(URL)

        failures = [record.getMessage() for record in caplog.records if "fetch_failed" in record.getMessage()]
        assert len(failures) == 1
        assert '"reason": "rate_limited"' in failures[0]
        assert '"status_code": 429' in failures[0]

    def test_rate_limit_exhausted_is_classified(self, fake_session, recording_sleep) -> None:
        fake_session.add(URL, FakeResponse(status_code=429))

        with pytest.raises(FetchError) as exc_info:
            _fetcher(fake_session, recording_sleep).fetch(URL)

        assert exc_info.value.kind is FailureKind.RATE_LIMITED

    def test_fetch_json_retries_undecodable_body(self, fake_session, recording_sleep) -> None:
        fake_session.add(URL, FakeResponse(text="<html>maintenance</html>"), FakeResponse(payload=[{"id": 1}]))

        assert _fetcher(fake_session, recording_sleep).fetch_json(URL) == [{"id": 1}]
        assert recording_sleep.calls == [2.0]

    def test_fetch_json_passes_query_params(self, fake_session, recording_sleep) -> None:
        fake_session.add_json(URL, [], params={"page": 2, "per_page": 20})

        assert _fetcher(fake_session, recording_sleep).fetch_json(URL, params={"page": 2, "per_page": 20}) == []

    def test_max_attempts_is_configurable(self, fake_session, recording_sleep) -> None:
        fake_session.add(URL, requests.Timeout("read timed out"))

        with pytest.raises(FetchError) as exc_info:
            _fetcher(fake_session, recording_sleep, max_attempts=1).fetch(URL)

        assert exc_info.value.kind is FailureKind.TRANSPORT
        assert fake_session.count(URL) == 1
        assert recording_sleep.calls == []
