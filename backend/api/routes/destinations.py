"""
Destinations API routes.
"""
import logging
from typing import List, Optional

from fastapi import APIRouter, Query
from pydantic import BaseModel

from domain.models import Destination
from services.destination_pages import paginate_destinations
from services.destination_resolver import get_default_resolver
from settings import settings

router = APIRouter()
logger = logging.getLogger(__name__)


class GeoCodeResponse(BaseModel):
    latitude: Optional[float] = None
    longitude: Optional[float] = None


class DestinationResponse(BaseModel):
    id: int | str | None
    name: str
    category: str
    geoCode: GeoCodeResponse
    tags: List[str]
    distance: Optional[float] = None
    rating: Optional[float] = None


class DestinationsResponse(BaseModel):
    city: str
    category: Optional[str] = None
    page: int
    page_size: int
    total: int
    total_pages: int
    categories: List[str]
    destinations: List[DestinationResponse]


def destination_to_response(destination: Destination) -> DestinationResponse:
    """Convert domain Destination to API response."""
    return DestinationResponse(**destination.to_dict())


@router.get("", response_model=DestinationsResponse)
def list_destinations(
    city: str = Query("", description="City name as entered by the user"),
    category: Optional[str] = Query(None, description="Only return this category"),
    page: int = Query(1, ge=1),
    page_size: int = Query(settings.PAGE_SIZE, ge=1, le=200),
):
    """
    Resolve `city` and return one page of its destinations.

    Upstream failures are not surfaced as errors; they produce an empty page.
    """
    destinations = get_default_resolver().resolve(city)
    result = paginate_destinations(destinations, page=page, page_size=page_size, category=category or None)
    return DestinationsResponse(
        city=city,
        category=category or None,
        page=result.page,
        page_size=result.page_size,
        total=result.total,
        total_pages=result.total_pages,
        categories=result.categories,
        destinations=[destination_to_response(d) for d in result.destinations],
    )
