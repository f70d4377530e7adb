"""
City -> destinations resolution.

Pipeline stages:
1. Reject blank input
2. Check the per-city cache
3. Geocode the city (Nominatim)
4. Build the spatial query
5. Fetch elements with retry (Overpass)
6. Normalize elements into Destinations
7. Store in the cache

Stages are driven by `next_state`, a pure transition table over
(ResolutionState, Outcome). Every failure ends the run with an empty result
and a logged reason; resolve() never raises.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from domain.errors import EmptyInput, ExhaustedRetries, GeocodeNotFound, TransportError
from domain.models import Coordinate, Destination, FailureReason, Resolution, ResolutionState
from services.destination_normalizer import normalize
from services.geocoding import CityGeocoder, get_default_geocoder
from services.overpass_client import RetryingFetcher, get_default_fetcher
from services.overpass_query import QueryBuilder, SpatialQuery
from services.resolution_cache import ResolutionCache

logger = logging.getLogger(__name__)

S = ResolutionState


class Outcome(str, Enum):
    """Result of performing the work for one state."""
    PROCEED = "proceed"
    BLANK = "blank"
    HIT = "hit"
    MISS = "miss"
    FOUND = "found"
    NOT_FOUND = "not_found"
    TRANSPORT_ERROR = "transport_error"
    EXHAUSTED = "exhausted"
    FETCHED = "fetched"
    ERROR = "error"


TRANSITIONS: Dict[Tuple[ResolutionState, Outcome], ResolutionState] = {
    (S.IDLE, Outcome.BLANK): S.EMPTY_INPUT,
    (S.IDLE, Outcome.PROCEED): S.CACHE_CHECK,
    (S.EMPTY_INPUT, Outcome.PROCEED): S.DONE,
    (S.CACHE_CHECK, Outcome.HIT): S.CACHE_HIT,
    (S.CACHE_CHECK, Outcome.MISS): S.CACHE_MISS,
    (S.CACHE_HIT, Outcome.PROCEED): S.DONE,
    (S.CACHE_MISS, Outcome.PROCEED): S.GEOCODING,
    (S.GEOCODING, Outcome.FOUND): S.FOUND,
    (S.GEOCODING, Outcome.NOT_FOUND): S.NOT_FOUND,
    (S.GEOCODING, Outcome.TRANSPORT_ERROR): S.TRANSPORT_ERROR,
    (S.NOT_FOUND, Outcome.PROCEED): S.DONE,
    (S.TRANSPORT_ERROR, Outcome.PROCEED): S.DONE,
    (S.FOUND, Outcome.PROCEED): S.QUERY_BUILD,
    (S.QUERY_BUILD, Outcome.PROCEED): S.FETCHING,
    (S.FETCHING, Outcome.FETCHED): S.FETCHED,
    (S.FETCHING, Outcome.EXHAUSTED): S.EXHAUSTED_RETRIES,
    (S.EXHAUSTED_RETRIES, Outcome.PROCEED): S.DONE,
    (S.FETCHED, Outcome.PROCEED): S.NORMALIZING,
    (S.NORMALIZING, Outcome.PROCEED): S.CACHE_STORE,
    (S.CACHE_STORE, Outcome.PROCEED): S.DONE,
    (S.FAILED, Outcome.PROCEED): S.DONE,
}

# An unexpected error while doing a stage's work ends the run.
TRANSITIONS.update(
    {
        (state, Outcome.ERROR): S.FAILED
        for state in (S.CACHE_CHECK, S.GEOCODING, S.QUERY_BUILD, S.FETCHING, S.NORMALIZING, S.CACHE_STORE)
    }
)


def next_state(state: ResolutionState, outcome: Outcome) -> ResolutionState:
    """Return the state following `state` given `outcome`; raises ValueError for illegal pairs."""
    try:
        return TRANSITIONS[(state, outcome)]
    except KeyError:
        raise ValueError(f"No transition from {state.value!r} on {outcome.value!r}") from None


@dataclass
class _Run:
    report: Resolution
    coordinate: Optional[Coordinate] = None
    query: Optional[SpatialQuery] = None
    elements: List[Any] = field(default_factory=list)

    def fail(self, reason: FailureReason, cause: BaseException) -> None:
        self.report.failure = reason
        self.report.cause = cause
        self.report.destinations = []


class DestinationResolver:
    def __init__(
        self,
        geocoder: Optional[CityGeocoder] = None,
        query_builder: Optional[QueryBuilder] = None,
        fetcher: Optional[RetryingFetcher] = None,
        cache: Optional[ResolutionCache] = None,
        normalizer: Callable[[Iterable[Any]], List[Destination]] = normalize,
        max_attempts: Optional[int] = None,
        delay_ms: Optional[int] = None,
    ):
        self.geocoder = geocoder or get_default_geocoder()
        self.query_builder = query_builder or QueryBuilder()
        self.fetcher = fetcher or get_default_fetcher()
        self.cache = cache if cache is not None else ResolutionCache()
        self.normalizer = normalizer
        self.max_attempts = max_attempts
        self.delay_ms = delay_ms

    def resolve(self, city: str) -> List[Destination]:
        return self.resolve_with_report(city).destinations

    def resolve_with_report(self, city: str) -> Resolution:
        run = _Run(report=Resolution(city=city))
        state = S.IDLE
        while True:
            run.report.states.append(state)
            if state is S.DONE:
                break
            try:
                outcome = self._perform(state, run)
            except Exception as exc:
                logger.exception("[resolve] unexpected error during %s for %r", state.value, city)
                run.fail(FailureReason.UNEXPECTED_ERROR, exc)
                outcome = Outcome.ERROR
            state = next_state(state, outcome)

        report = run.report
        if report.failure is FailureReason.EMPTY_INPUT:
            logger.debug("[resolve] blank city, nothing to do")
        elif report.failure is not None:
            logger.warning("[resolve] %r failed: %s (%s)", city, report.failure.value, report.cause)
        else:
            logger.info(
                "[resolve] %r -> %d destinations%s",
                city,
                len(report.destinations),
                " (cached)" if report.from_cache else "",
            )
        return report

    def _perform(self, state: ResolutionState, run: _Run) -> Outcome:
        """Do the work attached to `state` and report how it went."""
        city = run.report.city
        if state is S.IDLE:
            if not isinstance(city, str) or not city.strip():
                run.fail(FailureReason.EMPTY_INPUT, EmptyInput("City name is blank"))
                return Outcome.BLANK
            return Outcome.PROCEED

        if state is S.CACHE_CHECK:
            cached = self.cache.get(city)
            if cached is None:
                return Outcome.MISS
            run.report.destinations = cached
            run.report.from_cache = True
            return Outcome.HIT

        if state is S.GEOCODING:
            try:
                coordinate = self.geocoder.geocode(city)
            except TransportError as exc:
                run.fail(FailureReason.TRANSPORT_ERROR, exc)
                return Outcome.TRANSPORT_ERROR
            if coordinate is None:
                run.fail(FailureReason.GEOCODE_NOT_FOUND, GeocodeNotFound(city))
                return Outcome.NOT_FOUND
            run.coordinate = coordinate
            return Outcome.FOUND

        if state is S.QUERY_BUILD:
            run.query = self.query_builder.build(run.coordinate)
            return Outcome.PROCEED

        if state is S.FETCHING:
            try:
                run.elements = self.fetcher.fetch(run.query, self.max_attempts, self.delay_ms)
            except ExhaustedRetries as exc:
                run.fail(FailureReason.EXHAUSTED_RETRIES, exc)
                return Outcome.EXHAUSTED
            return Outcome.FETCHED

        if state is S.NORMALIZING:
            run.report.destinations = self.normalizer(run.elements)
            return Outcome.PROCEED

        if state is S.CACHE_STORE:
            self.cache.put(city, run.report.destinations)
            return Outcome.PROCEED

        # Bookkeeping states with no work of their own.
        return Outcome.PROCEED


_default_resolver: Optional[DestinationResolver] = None


def get_default_resolver() -> DestinationResolver:
    global _default_resolver
    if _default_resolver is None:
        _default_resolver = DestinationResolver()
    return _default_resolver
