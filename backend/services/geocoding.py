"""City geocoding using OpenStreetMap Nominatim search.

Maps a free-text city name to one representative coordinate. There is no
caching and no retry here: results are cached per city by the resolver, and a
failed call is reported to it as a TransportError.
"""

from __future__ import annotations

import logging
import re
import threading
import time
from typing import Any, Callable, Optional

import requests

from domain.errors import TransportError
from domain.models import Coordinate
from settings import DEFAULT_USER_AGENT, settings

logger = logging.getLogger(__name__)
_session = requests.Session()
_last_request_ts: float = 0.0
_lock = threading.Lock()
_MIN_INTERVAL_SEC = settings.NOMINATIM_MIN_INTERVAL
_logged_ua = False

if settings.NOMINATIM_USER_AGENT is None:
    logger.warning(
        "NOMINATIM_USER_AGENT not set in environment; using fallback UA. "
        "This may violate Nominatim usage policy."
    )


def _redact_email(ua: str) -> str:
    if "@" not in ua:
        return ua
    return re.sub(r"\S+@\S+", "<redacted>", ua)


_ua_value = settings.NOMINATIM_USER_AGENT or DEFAULT_USER_AGENT
NOMINATIM_HEADERS = {
    "User-Agent": _ua_value,
}
if settings.NOMINATIM_REFERER:
    NOMINATIM_HEADERS["Referer"] = settings.NOMINATIM_REFERER


def _throttled_get(
    url: str,
    *,
    params: dict[str, Any],
    headers: dict[str, str],
    timeout: float,
) -> requests.Response:
    """Perform a GET request with a simple global rate limit."""
    global _last_request_ts
    with _lock:
        now = time.time()
        delta = now - _last_request_ts
        if delta < _MIN_INTERVAL_SEC:
            time.sleep(_MIN_INTERVAL_SEC - delta)
        _last_request_ts = time.time()
    return _session.get(url, params=params, headers=headers, timeout=timeout)


def _parse_coordinate(entry: Any) -> Coordinate:
    """Nominatim returns lat/lon as strings; anything unparseable is a bad payload."""
    try:
        return Coordinate(latitude=float(entry["lat"]), longitude=float(entry["lon"]))
    except (KeyError, TypeError, ValueError) as exc:
        raise TransportError(f"Malformed Nominatim match: {entry!r}") from exc


class CityGeocoder:
    """Resolve a city name to a single Coordinate via Nominatim search."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        headers: Optional[dict[str, str]] = None,
        timeout: Optional[float] = None,
        http_get: Optional[Callable[..., requests.Response]] = None,
    ):
        self.base_url = base_url or settings.NOMINATIM_SEARCH_URL
        self.headers = dict(headers or NOMINATIM_HEADERS)
        self.timeout = timeout if timeout is not None else settings.NOMINATIM_TIMEOUT_SECONDS
        self._http_get = http_get

    def geocode(self, city: str) -> Optional[Coordinate]:
        """Return the best match for `city`, or None when Nominatim has no match.

        Raises TransportError for network failures, HTTP errors and payloads
        that are not a JSON list of matches.
        """
        global _logged_ua
        if not _logged_ua:
            logger.debug("Nominatim User-Agent: %s", _redact_email(self.headers.get("User-Agent", "")))
            _logged_ua = True

        params = {"q": city, "format": "json", "limit": 1}
        http_get = self._http_get or _throttled_get
        try:
            resp = http_get(self.base_url, params=params, headers=self.headers, timeout=self.timeout)
            resp.raise_for_status()
            data = resp.json()
        except requests.RequestException as exc:
            raise TransportError(f"Nominatim request failed for {city!r}: {exc}") from exc
        except ValueError as exc:
            raise TransportError(f"Nominatim returned invalid JSON for {city!r}") from exc

        if not isinstance(data, list):
            raise TransportError(f"Unexpected Nominatim payload for {city!r}: {type(data).__name__}")
        if not data:
            logger.info("[geocode] no match for %r", city)
            return None

        coordinate = _parse_coordinate(data[0])
        logger.debug(
            "[geocode] %r -> lat=%.6f lon=%.6f", city, coordinate.latitude, coordinate.longitude
        )
        return coordinate


_default_geocoder: Optional[CityGeocoder] = None


def get_default_geocoder() -> CityGeocoder:
    global _default_geocoder
    if _default_geocoder is None:
        _default_geocoder = CityGeocoder()
    return _default_geocoder
