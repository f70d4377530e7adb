from __future__ import annotations

from typing import Any, Iterable, List, Mapping, Optional

from domain.models import UNKNOWN, Destination, GeoCode
from services.overpass_query import CATEGORY_KEYS


def _as_float(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _pick_geo_code(element: Mapping[str, Any]) -> GeoCode:
    """Prefer the element's own position, then the `out center` position of ways."""
    lat = _as_float(element.get("lat"))
    lon = _as_float(element.get("lon"))
    center = element.get("center")
    if isinstance(center, Mapping):
        if lat is None:
            lat = _as_float(center.get("lat"))
        if lon is None:
            lon = _as_float(center.get("lon"))
    return GeoCode(latitude=lat, longitude=lon)


def _pick_category(tags: Mapping[str, Any]) -> str:
    for key in CATEGORY_KEYS:
        value = tags.get(key)
        if value:
            return str(value)
    return UNKNOWN


def normalize_element(element: Mapping[str, Any]) -> Destination:
    """Map one raw Overpass element to a Destination; missing fields fall back to defaults."""
    tags = element.get("tags")
    if not isinstance(tags, Mapping):
        tags = {}
    name = tags.get("name")
    return Destination(
        id=element.get("id"),
        name=str(name) if name else UNKNOWN,
        category=_pick_category(tags),
        geo_code=_pick_geo_code(element),
        tags=tuple(str(k) for k in tags.keys()),
    )


def normalize(elements: Iterable[Any]) -> List[Destination]:
    """
    Normalize raw elements in input order.

    Never raises: non-mapping entries are skipped, and an element whose
    (type, id) pair was already seen in the batch is dropped.
    """
    seen: set[tuple[str, str]] = set()
    results: List[Destination] = []
    for element in elements or []:
        if not isinstance(element, Mapping):
            continue
        raw_id = element.get("id")
        if raw_id is not None:
            # OSM numbers nodes, ways and relations independently.
            key = (str(element.get("type")), str(raw_id))
            if key in seen:
                continue
            seen.add(key)
        results.append(normalize_element(element))
    return results
