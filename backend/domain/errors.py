"""
Failure taxonomy for city destination resolution.

All of these are caught by DestinationResolver and turned into an empty
result plus a logged diagnostic; none of them reach the caller of resolve().
"""
from typing import Optional


class ResolutionError(Exception):
    """Base class for failures inside a resolution."""


class EmptyInput(ResolutionError):
    """The city string was blank; the pipeline was not started."""


class GeocodeNotFound(ResolutionError):
    """The geocoding service returned zero matches for the city."""

    def __init__(self, city: str):
        super().__init__(f"No geocoding match for {city!r}")
        self.city = city


class TransportError(ResolutionError):
    """A network, HTTP or payload failure talking to an upstream service."""


class ExhaustedRetries(ResolutionError):
    """Every attempt of the spatial query failed."""

    def __init__(self, attempts: int, last_error: Optional[BaseException] = None):
        super().__init__(f"Spatial query failed after {attempts} attempt(s): {last_error}")
        self.attempts = attempts
        self.last_error = last_error
