"""Thin JSON-over-HTTP client shared by every rate feed and catalog loader."""

from __future__ import annotations

import random
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Mapping

import requests

from eve_value.errors import FetchError, ParseError
from eve_value.utils.logger import get_logger

LOGGER = get_logger(__name__)

DEFAULT_USER_AGENT = "eve-value/0.1 (+https://github.com/eve-value/eve-value)"
RETRYABLE_STATUSES = frozenset({429, 500, 502, 503, 504})


@dataclass(frozen=True)
class JsonResponse:
    """Decoded JSON body plus the response headers (used for pagination)."""

    payload: Any
    headers: Mapping[str, str] = field(default_factory=dict)
    url: str = ""


class JsonHttpClient:
    """GET JSON documents with a per-call timeout and bounded retries."""

    def __init__(
        self,
        *,
        session: requests.Session | None = None,
        timeout: float = 15.0,
        max_attempts: int = 2,
        backoff_seconds: float = 1.0,
        user_agent: str = DEFAULT_USER_AGENT,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.session = session or requests.Session()
        self.session.headers.setdefault("User-Agent", user_agent)
        self.session.headers.setdefault("Accept", "application/json")
        self.timeout = timeout
        self.max_attempts = max_attempts
        self.backoff_seconds = backoff_seconds
        self._sleep = sleep

    def get_json(self, url: str, params: Mapping[str, Any] | None = None) -> JsonResponse:
        """Fetch ``url`` and decode its JSON body.

        Transport errors and retryable statuses are retried up to
        ``max_attempts`` times; anything else raises :class:`FetchError`
        immediately. A body that is not valid JSON raises :class:`ParseError`.
        """

        attempt = 0
        while True:
            attempt += 1
            try:
                response = self.session.get(
                    url,
                    params=dict(params) if params else None,
                    headers={"Cache-Control": "no-store"},
                    timeout=self.timeout,
                )
            except requests.RequestException as exc:
                if attempt >= self.max_attempts:
                    raise FetchError(f"request to {url} failed: {exc}", url=url) from exc
                LOGGER.warning(
                    "Attempt %s/%s for %s failed: %s", attempt, self.max_attempts, url, exc
                )
                self._backoff(attempt)
                continue

            if response.status_code in RETRYABLE_STATUSES and attempt < self.max_attempts:
                LOGGER.warning(
                    "Attempt %s/%s for %s returned HTTP %s",
                    attempt,
                    self.max_attempts,
                    url,
                    response.status_code,
                )
                self._backoff(attempt)
                continue

            self._raise_with_context(response, url)
            try:
                payload = response.json()
            except ValueError as exc:
                raise ParseError(f"{url} did not return valid JSON: {exc}") from exc
            return JsonResponse(payload=payload, headers=response.headers, url=url)

    def _backoff(self, attempt: int) -> None:
        jitter = random.uniform(0.5, 1.5)
        self._sleep(self.backoff_seconds * attempt * jitter)

    @staticmethod
    def _raise_with_context(response: requests.Response, url: str) -> None:
        try:
            response.raise_for_status()
        except requests.HTTPError as exc:
            status = response.status_code
            raise FetchError(f"{url} responded with HTTP {status}", url=url, status=status) from exc

    def close(self) -> None:
        self.session.close()

    def __enter__(self) -> "JsonHttpClient":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


__all__ = ["DEFAULT_USER_AGENT", "JsonHttpClient", "JsonResponse"]
