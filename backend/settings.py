import os
from typing import List, Optional

# Basic settings helper to read environment configuration.

DEFAULT_AMENITY_DENYLIST = (
    "school",
    "bank",
    "bicycle_parking",
    "waste_basket",
    "university",
    "hospital",
    "parking",
    "fuel",
    "ferry_terminal",
    "post_office",
    "library",
    "clinic",
    "post_box",
    "place_of_worship",
    "police",
)


DEFAULT_USER_AGENT = "city-destinations/0.1 (contact: example@example.com)"


def _as_int(val: Optional[str], default: int) -> int:
    if val is None or not val.strip():
        return default
    return int(val)


def _as_float(val: Optional[str], default: float) -> float:
    if val is None or not val.strip():
        return default
    return float(val)


def _as_list(val: Optional[str], default: tuple) -> List[str]:
    """Split a comma separated env value, ignoring blanks."""
    if val is None:
        return list(default)
    return [item.strip() for item in val.split(",") if item.strip()]


class Settings:
    def __init__(self) -> None:
        # Geocoding (Nominatim search)
        self.NOMINATIM_SEARCH_URL: str = os.getenv(
            "NOMINATIM_SEARCH_URL", "https://nominatim.openstreetmap.org/search"
        )
        self.NOMINATIM_USER_AGENT: Optional[str] = os.getenv("NOMINATIM_USER_AGENT")
        self.NOMINATIM_REFERER: Optional[str] = os.getenv("NOMINATIM_REFERER")
        self.NOMINATIM_TIMEOUT_SECONDS: float = _as_float(os.getenv("NOMINATIM_TIMEOUT_SECONDS"), 10.0)
        self.NOMINATIM_MIN_INTERVAL: float = _as_float(os.getenv("NOMINATIM_MIN_INTERVAL"), 1.1)

        # Spatial query (Overpass)
        self.OVERPASS_URL: str = os.getenv("OVERPASS_URL", "https://overpass-api.de/api/interpreter")
        self.OVERPASS_USER_AGENT: str = (
            os.getenv("OVERPASS_USER_AGENT") or self.NOMINATIM_USER_AGENT or DEFAULT_USER_AGENT
        )
        self.SEARCH_RADIUS_M: int = _as_int(os.getenv("SEARCH_RADIUS_M"), 50000)
        self.RESULT_LIMIT: int = _as_int(os.getenv("RESULT_LIMIT"), 20)
        self.OVERPASS_QUERY_TIMEOUT_SECONDS: int = _as_int(os.getenv("OVERPASS_QUERY_TIMEOUT_SECONDS"), 60)
        self.AMENITY_DENYLIST: List[str] = _as_list(os.getenv("AMENITY_DENYLIST"), DEFAULT_AMENITY_DENYLIST)

        # Retry policy for the spatial query
        self.RETRY_ATTEMPTS: int = _as_int(os.getenv("RETRY_ATTEMPTS"), 3)
        self.RETRY_DELAY_MS: int = _as_int(os.getenv("RETRY_DELAY_MS"), 5000)
        self.FETCH_TIMEOUT_MS: int = _as_int(os.getenv("FETCH_TIMEOUT_MS"), 60000)

        # Presentation
        self.PAGE_SIZE: int = _as_int(os.getenv("PAGE_SIZE"), 21)


settings = Settings()
