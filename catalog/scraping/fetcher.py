"""
HTTP fetcher with bounded retries and rate-limit aware backoff.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Mapping
from enum import Enum
from typing import Any, TypeVar

import requests

from catalog.scraping.logging_utils import log_event

logger = logging.getLogger(__name__)

MAX_ATTEMPTS = 3
RATE_LIMIT_STATUS_CODE = 429

T = TypeVar("T")


class FailureKind(str, Enum):
    """
    Classification of one failed fetch attempt.
    """

    TRANSPORT = "transport"
    HTTP_STATUS = "http_status"
    RATE_LIMITED = "rate_limited"
    INVALID_PAYLOAD = "invalid_payload"


class FetchError(RuntimeError):
    """
    Raised when a URL cannot be fetched within the retry budget.
    """

    def __init__(
        self,
        message: str,
        *,
        url: str,
        kind: FailureKind,
        attempts: int,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.url = url
        self.kind = kind
        self.attempts = attempts
        self.status_code = status_code


def backoff_seconds(kind: FailureKind, next_attempt: int) -> float:
    """
    Seconds to wait before retry number `next_attempt` (1-based).

    Throttling by the server backs off on powers of three; every other
    failure backs off on powers of two.
    """

    if kind is FailureKind.RATE_LIMITED:
        return float(3**next_attempt)
    return float(2**next_attempt)


class Fetcher:
    """
    Performs GET requests over one shared session for all workers.
    """

    def __init__(
        self,
        *,
        headers: Mapping[str, str],
        session: requests.Session | None = None,
        timeout_seconds: float = 30.0,
        max_attempts: int = MAX_ATTEMPTS,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._session = session or requests.Session()
        self._headers = dict(headers)
        self._timeout_seconds = timeout_seconds
        self._max_attempts = max(1, max_attempts)
        self._sleep = sleep

    def close(self) -> None:
        self._session.close()

    def fetch(self, url: str, *, params: Mapping[str, Any] | None = None) -> str:
        """
        Return the body of `url` as text.
        """

        return self._fetch(url, params=params, decode=lambda response: response.text)

    def fetch_json(self, url: str, *, params: Mapping[str, Any] | None = None) -> Any:
        """
        Return the decoded JSON body of `url`; undecodable bodies are retried.
        """

        return self._fetch(url, params=params, decode=lambda response: response.json())

    def _fetch(
        self,
        url: str,
        *,
        params: Mapping[str, Any] | None,
        decode: Callable[[requests.Response], T],
    ) -> T:
        last_kind = FailureKind.TRANSPORT
        last_error = ""
        last_status: int | None = None

        for attempt in range(self._max_attempts):
            if attempt > 0:
                wait_seconds = backoff_seconds(last_kind, attempt)
                log_event(
                    logger,
                    logging.WARNING,
                    "fetch_retry",
                    url=url,
                    attempt=attempt + 1,
                    max_attempts=self._max_attempts,
                    wait_seconds=wait_seconds,
                    reason=last_kind.value,
                    status_code=last_status,
                )
                self._sleep(wait_seconds)

            log_event(
                logger,
                logging.DEBUG,
                "http_request",
                method="GET",
                url=url,
                params=dict(params) if params else None,
                attempt=attempt + 1,
            )
            try:
                response = self._session.get(
                    url,
                    params=params,
                    headers=self._headers,
                    timeout=self._timeout_seconds,
                )
            except requests.RequestException as exc:
                last_kind, last_error, last_status = FailureKind.TRANSPORT, str(exc), None
                log_event(logger, logging.ERROR, "fetch_failed", url=url, reason=last_kind.value, error=last_error)
                continue

            last_status = response.status_code
            if response.status_code == RATE_LIMIT_STATUS_CODE:
                last_kind, last_error = FailureKind.RATE_LIMITED, "HTTP 429 rate limited"
                log_event(
                    logger,
                    logging.ERROR,
                    "fetch_failed",
                    url=url,
                    reason=last_kind.value,
                    status_code=response.status_code,
                )
                continue
            if not 200 <= response.status_code < 300:
                last_kind, last_error = FailureKind.HTTP_STATUS, f"HTTP {response.status_code}"
                log_event(
                    logger,
                    logging.ERROR,
                    "fetch_failed",
                    url=url,
                    reason=last_kind.value,
                    status_code=response.status_code,
                )
                continue

            try:
                return decode(response)
            except ValueError as exc:
                last_kind, last_error = FailureKind.INVALID_PAYLOAD, f"undecodable body: {exc}"
                log_event(logger, logging.ERROR, "fetch_failed", url=url, reason=last_kind.value, error=str(exc))

        raise FetchError(
            f"Failed to fetch {url} after {self._max_attempts} attempts: {last_error}",
            url=url,
            kind=last_kind,
            attempts=self._max_attempts,
            status_code=last_status,
        )
