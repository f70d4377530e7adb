"""
Core domain models for city destination resolution.
These are framework-agnostic and can be used across all services.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

UNKNOWN = "Unknown"


class ResolutionState(str, Enum):
    """
    States of a single resolution run.

    Happy path:
    IDLE -> CACHE_CHECK -> CACHE_MISS -> GEOCODING -> FOUND -> QUERY_BUILD
    -> FETCHING -> FETCHED -> NORMALIZING -> CACHE_STORE -> DONE

    Short circuits:
    - CACHE_CHECK -> CACHE_HIT -> DONE
    - IDLE -> EMPTY_INPUT -> DONE
    - GEOCODING -> NOT_FOUND | TRANSPORT_ERROR -> DONE
    - FETCHING -> EXHAUSTED_RETRIES -> DONE
    - any working state -> FAILED -> DONE on an unexpected error
    """
    IDLE = "idle"
    EMPTY_INPUT = "empty_input"
    CACHE_CHECK = "cache_check"
    CACHE_HIT = "cache_hit"
    CACHE_MISS = "cache_miss"
    GEOCODING = "geocoding"
    NOT_FOUND = "not_found"
    TRANSPORT_ERROR = "transport_error"
    FOUND = "found"
    QUERY_BUILD = "query_build"
    FETCHING = "fetching"
    EXHAUSTED_RETRIES = "exhausted_retries"
    FETCHED = "fetched"
    NORMALIZING = "normalizing"
    CACHE_STORE = "cache_store"
    FAILED = "failed"
    DONE = "done"


class FailureReason(str, Enum):
    """Why a resolution ended with an empty result."""
    EMPTY_INPUT = "empty_input"
    GEOCODE_NOT_FOUND = "geocode_not_found"
    TRANSPORT_ERROR = "transport_error"
    EXHAUSTED_RETRIES = "exhausted_retries"
    UNEXPECTED_ERROR = "unexpected_error"


@dataclass(frozen=True)
class Coordinate:
    """A single representative point for a city."""
    latitude: float
    longitude: float


@dataclass(frozen=True)
class GeoCode:
    """Position of a destination; both fields are None when upstream has no geometry."""
    latitude: Optional[float] = None
    longitude: Optional[float] = None

    def to_dict(self) -> Dict[str, Optional[float]]:
        return {"latitude": self.latitude, "longitude": self.longitude}


@dataclass(frozen=True)
class Destination:
    """
    A point of interest near a city, normalized from an upstream record.

    `tags` holds the tag key names only (no values). `distance` and `rating`
    are reserved and always None when created by the normalizer.
    """
    id: Any
    name: str = UNKNOWN
    category: str = UNKNOWN
    geo_code: GeoCode = field(default_factory=GeoCode)
    tags: Tuple[str, ...] = ()
    distance: Optional[float] = None
    rating: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "category": self.category,
            "geoCode": self.geo_code.to_dict(),
            "tags": list(self.tags),
            "distance": self.distance,
            "rating": self.rating,
        }


@dataclass
class Resolution:
    """
    Diagnostic record of one resolution.

    Callers that only need the destinations should use
    DestinationResolver.resolve(); this record keeps the visited states and
    the failure reason/cause that are otherwise only visible in the log.
    """
    city: str
    destinations: List[Destination] = field(default_factory=list)
    states: List[ResolutionState] = field(default_factory=list)
    from_cache: bool = False
    failure: Optional[FailureReason] = None
    cause: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.failure is None
