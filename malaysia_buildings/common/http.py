"""Shared requests session for the Overpass and Nominatim endpoints.

Each source gets one token bucket regardless of which mirror it points at,
since both public services publish per-client limits rather than per-host
ones. Transient failures are retried with jittered backoff and every retry
is logged with its attempt number.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from types import TracebackType
from typing import Any

import requests
from tenacity import RetryCallState, Retrying, retry_if_exception_type, stop_after_attempt, wait_exponential_jitter

from malaysia_buildings.common.constants import USER_AGENT
from malaysia_buildings.common.errors import TransportError
from malaysia_buildings.common.logging import log_event

RETRYABLE_STATUS_CODES = {408, 425, 429, 500, 502, 503, 504}
SOURCE_RATES_PER_SEC = {
    "overpass": 1.0,
    "nominatim": 1.0,
}
STATUS_HINTS = {
    429: "rate limited, too many queries from this client",
    504: "server busy, query timed out at the gateway",
}


@dataclass(frozen=True)
class TimeoutConfig:
    connect: float = 20.0
    read: float = 120.0


@dataclass(frozen=True)
class RetryConfig:
    max_attempts: int = 4
    multiplier: float = 1.0
    max_wait: float = 30.0


class HttpRequestError(TransportError):
    error_code = "HTTP_ERROR"

    def __init__(self, message: str, *, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status


class RetryableHttpError(HttpRequestError):
    pass


def describe_status(source_type: str, status: int) -> str:
    hint = STATUS_HINTS.get(status)
    if hint:
        return f"{source_type} returned HTTP {status} ({hint})"
    return f"{source_type} returned HTTP {status}"


class TokenBucket:
    def __init__(self, rate_per_sec: float, capacity: float | None = None) -> None:
        self.rate_per_sec = rate_per_sec
        self.capacity = capacity if capacity is not None else rate_per_sec
        self.tokens = self.capacity
        self.updated_at = time.monotonic()
        self.lock = threading.Lock()

    def acquire(self, tokens: float = 1.0) -> float:
        """Block until `tokens` are available; returns seconds spent waiting."""
        waited = 0.0
        while True:
            with self.lock:
                now = time.monotonic()
                self.tokens = min(self.capacity, self.tokens + (now - self.updated_at) * self.rate_per_sec)
                self.updated_at = now
                if self.tokens >= tokens:
                    self.tokens -= tokens
                    return waited
                wait_for = max((tokens - self.tokens) / self.rate_per_sec, 0.01)
            time.sleep(wait_for)
            waited += wait_for


class HttpClient:
    def __init__(
        self,
        *,
        timeout: TimeoutConfig | None = None,
        retry: RetryConfig | None = None,
        source_rates: dict[str, float] | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.timeout = timeout or TimeoutConfig()
        self.retry = retry or RetryConfig()
        self.logger = logger
        self.session = requests.Session()
        self.session.headers.update({"User-Agent": USER_AGENT, "Accept": "application/json"})
        rates = source_rates if source_rates is not None else SOURCE_RATES_PER_SEC
        self.buckets = {source: TokenBucket(rate_per_sec=rate) for source, rate in rates.items()}

    def close(self) -> None:
        self.session.close()

    def __enter__(self) -> "HttpClient":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def _throttle(self, source_type: str) -> None:
        bucket = self.buckets.get(source_type)
        if bucket is None:
            return
        waited = bucket.acquire()
        if waited:
            log_event(
                self.logger,
                f"throttled {source_type} request for {waited:.2f}s",
                level=logging.DEBUG,
                stage="http",
                source=source_type,
                event="THROTTLE",
                duration_ms=int(waited * 1000),
            )

    def _send(
        self,
        method: str,
        url: str,
        *,
        source_type: str,
        params: dict[str, Any] | None,
        data: dict[str, Any] | None,
        headers: dict[str, str] | None,
        timeout: TimeoutConfig,
    ) -> Any:
        self._throttle(source_type)
        try:
            response = self.session.request(
                method=method,
                url=url,
                params=params,
                data=data,
                headers=headers,
                timeout=(timeout.connect, timeout.read),
            )
        except (requests.ConnectionError, requests.Timeout) as exc:
            raise RetryableHttpError(f"{source_type} unreachable at {url}: {exc}") from exc
        except requests.RequestException as exc:
            raise HttpRequestError(f"{source_type} request failed for {url}: {exc}") from exc

        status = response.status_code
        if status in RETRYABLE_STATUS_CODES:
            raise RetryableHttpError(describe_status(source_type, status), status=status)
        if status >= 400:
            raise HttpRequestError(describe_status(source_type, status), status=status)

        try:
            return response.json()
        except ValueError as exc:
            raise HttpRequestError(f"{source_type} sent a non-JSON body from {url}", status=status) from exc

    def _log_retry(self, source_type: str, retry_state: RetryCallState) -> None:
        exc = retry_state.outcome.exception() if retry_state.outcome else None
        log_event(
            self.logger,
            f"retrying {source_type} after attempt {retry_state.attempt_number}: {exc}",
            level=logging.WARNING,
            stage="http",
            source=source_type,
            event="RETRY",
            status="retry",
            attempt=retry_state.attempt_number,
            error_code=getattr(exc, "error_code", None),
        )

    def request_json(
        self,
        method: str,
        url: str,
        *,
        source_type: str,
        params: dict[str, Any] | None = None,
        data: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        timeout: TimeoutConfig | None = None,
    ) -> Any:
        retrying = Retrying(
            stop=stop_after_attempt(self.retry.max_attempts),
            wait=wait_exponential_jitter(initial=self.retry.multiplier, max=self.retry.max_wait, jitter=1.0),
            retry=retry_if_exception_type(RetryableHttpError),
            before_sleep=lambda state: self._log_retry(source_type, state),
            reraise=True,
        )
        return retrying(
            self._send,
            method,
            url,
            source_type=source_type,
            params=params,
            data=data,
            headers=headers,
            timeout=timeout or self.timeout,
        )

    def get_json(
        self,
        url: str,
        *,
        source_type: str,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        timeout: TimeoutConfig | None = None,
    ) -> Any:
        return self.request_json("GET", url, source_type=source_type, params=params, headers=headers, timeout=timeout)

    def post_form_json(
        self,
        url: str,
        *,
        source_type: str,
        data: dict[str, Any],
        headers: dict[str, str] | None = None,
        timeout: TimeoutConfig | None = None,
    ) -> Any:
        # requests sets the urlencoded content type itself for dict bodies.
        return self.request_json("POST", url, source_type=source_type, data=data, headers=headers, timeout=timeout)
