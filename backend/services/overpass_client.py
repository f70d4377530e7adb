"""
Overpass API client with bounded, constant-delay retries.
"""
from __future__ import annotations

import logging
import time
from typing import Any, Callable, List, Optional

import requests

from domain.errors import ExhaustedRetries, TransportError
from services.overpass_query import SpatialQuery
from settings import settings

logger = logging.getLogger(__name__)


class RetryingFetcher:
    def __init__(
        self,
        base_url: Optional[str] = None,
        max_attempts: Optional[int] = None,
        delay_ms: Optional[int] = None,
        timeout_ms: Optional[int] = None,
        session: Optional[requests.Session] = None,
        sleep: Callable[[float], None] = time.sleep,
        user_agent: Optional[str] = None,
    ):
        self.base_url = base_url or settings.OVERPASS_URL
        self.max_attempts = max_attempts if max_attempts is not None else settings.RETRY_ATTEMPTS
        if self.max_attempts < 1:
            raise ValueError(f"max_attempts must be at least 1, got {self.max_attempts}")
        self.delay_ms = delay_ms if delay_ms is not None else settings.RETRY_DELAY_MS
        self.timeout_ms = timeout_ms if timeout_ms is not None else settings.FETCH_TIMEOUT_MS
        self.session = session or requests.Session()
        self.sleep = sleep
        self.headers = {"User-Agent": user_agent or settings.OVERPASS_USER_AGENT}

    def _fetch_once(self, query_text: str) -> List[dict[str, Any]]:
        try:
            resp = self.session.get(
                self.base_url,
                params={"data": query_text},
                headers=self.headers,
                timeout=self.timeout_ms / 1000.0,
            )
            resp.raise_for_status()
            payload = resp.json()
        except requests.RequestException as exc:
            raise TransportError(f"Overpass request failed: {exc}") from exc
        except ValueError as exc:
            raise TransportError("Overpass returned invalid JSON") from exc

        elements = payload.get("elements") if isinstance(payload, dict) else None
        if not isinstance(elements, list):
            raise TransportError("Overpass payload has no 'elements' list")
        return elements

    def fetch(
        self,
        query: SpatialQuery,
        max_attempts: Optional[int] = None,
        delay_ms: Optional[int] = None,
    ) -> List[dict[str, Any]]:
        """
        Run `query` against Overpass and return its raw elements.

        An empty element list is a successful result. Each failed attempt is
        logged and followed by a fixed `delay_ms` wait, except the last one,
        after which ExhaustedRetries is raised with the last error.
        """
        attempts = max_attempts if max_attempts is not None else self.max_attempts
        delay = delay_ms if delay_ms is not None else self.delay_ms
        if attempts < 1:
            raise ValueError("max_attempts must be at least 1")

        query_text = query.to_overpass_ql()
        last_error: Optional[Exception] = None
        for attempt in range(1, attempts + 1):
            try:
                elements = self._fetch_once(query_text)
            except TransportError as exc:
                last_error = exc
                logger.warning("[overpass] attempt %d/%d failed: %s", attempt, attempts, exc)
                if attempt < attempts:
                    self.sleep(delay / 1000.0)
                continue
            logger.debug("[overpass] attempt %d returned %d elements", attempt, len(elements))
            return elements
        raise ExhaustedRetries(attempts, last_error)


_default_fetcher: Optional[RetryingFetcher] = None


def get_default_fetcher() -> RetryingFetcher:
    global _default_fetcher
    if _default_fetcher is None:
        _default_fetcher = RetryingFetcher()
    return _default_fetcher
