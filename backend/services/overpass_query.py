"""
Structured Overpass queries for points of interest around a coordinate.

QueryBuilder produces a SpatialQuery value; the Overpass QL text is only
rendered by SpatialQuery.to_overpass_ql() when the fetcher sends it.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import FrozenSet, Iterable, Optional, Sequence, Tuple

from domain.models import Coordinate
from settings import settings

CATEGORY_KEYS: Tuple[str, ...] = ("tourism", "historic", "leisure", "amenity")
DEFAULT_ELEMENT_TYPES: Tuple[str, ...] = ("node", "way")


@dataclass(frozen=True)
class TagClause:
    """Select elements carrying `key`, minus those whose value is in `excluded`."""
    key: str
    excluded: FrozenSet[str] = frozenset()

    def to_overpass_ql(self) -> str:
        ql = f'["{_escape(self.key)}"]'
        if self.excluded:
            # Sorted so the rendered text is stable across runs.
            alternatives = "|".join(_escape(v) for v in sorted(self.excluded))
            ql += f'["{_escape(self.key)}"!~"^({alternatives})$"]'
        return ql


@dataclass(frozen=True)
class SpatialQuery:
    center: Coordinate
    radius_m: int
    clauses: Tuple[TagClause, ...]
    element_types: Tuple[str, ...] = DEFAULT_ELEMENT_TYPES
    limit: int = 20
    timeout_s: int = 60

    def excluded_values(self, key: str) -> FrozenSet[str]:
        for clause in self.clauses:
            if clause.key == key:
                return clause.excluded
        return frozenset()

    def to_overpass_ql(self) -> str:
        """Render the query as Overpass QL (union of clauses, `out center`)."""
        around = (
            f"(around:{self.radius_m},"
            f"{_format_coord(self.center.latitude)},{_format_coord(self.center.longitude)})"
        )
        statements = [
            f"  {element_type}{around}{clause.to_overpass_ql()};"
            for clause in self.clauses
            for element_type in self.element_types
        ]
        return "\n".join(
            [
                f"[out:json][timeout:{self.timeout_s}];",
                "(",
                *statements,
                ");",
                f"out center {self.limit};",
            ]
        )


def _format_coord(value: float) -> str:
    """Fixed-point degrees (never exponent notation), trailing zeros dropped."""
    text = f"{value:.7f}".rstrip("0").rstrip(".")
    return "0" if text in ("", "-0") else text


def _escape(value: str) -> str:
    return value.replace("\\", "\\\\").replace('"', '\\"')


class QueryBuilder:
    """
    Build the point-of-interest query for a city center.

    Includes every element tagged with one of CATEGORY_KEYS within the search
    radius. The amenity key is broad, so its values in the denylist (schools,
    banks, parking, ...) are excluded.
    """

    def __init__(
        self,
        radius_m: Optional[int] = None,
        limit: Optional[int] = None,
        amenity_denylist: Optional[Iterable[str]] = None,
        timeout_s: Optional[int] = None,
        element_types: Sequence[str] = DEFAULT_ELEMENT_TYPES,
    ):
        self.radius_m = radius_m if radius_m is not None else settings.SEARCH_RADIUS_M
        self.limit = limit if limit is not None else settings.RESULT_LIMIT
        self.timeout_s = timeout_s if timeout_s is not None else settings.OVERPASS_QUERY_TIMEOUT_SECONDS
        denylist = amenity_denylist if amenity_denylist is not None else settings.AMENITY_DENYLIST
        self.amenity_denylist: FrozenSet[str] = frozenset(v.strip() for v in denylist if v.strip())
        self.element_types = tuple(element_types)

    def build(self, coordinate: Coordinate) -> SpatialQuery:
        clauses = tuple(
            TagClause(key, self.amenity_denylist if key == "amenity" else frozenset())
            for key in CATEGORY_KEYS
        )
        return SpatialQuery(
            center=coordinate,
            radius_m=self.radius_m,
            clauses=clauses,
            element_types=self.element_types,
            limit=self.limit,
            timeout_s=self.timeout_s,
        )
