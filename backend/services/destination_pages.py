from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from domain.models import Destination


@dataclass
class DestinationPage:
    page: int
    page_size: int
    total: int
    total_pages: int
    categories: List[str] = field(default_factory=list)
    destinations: List[Destination] = field(default_factory=list)


def distinct_categories(destinations: Sequence[Destination]) -> List[str]:
    """Categories in first-seen order."""
    return list(dict.fromkeys(d.category for d in destinations))


def paginate_destinations(
    destinations: Sequence[Destination],
    page: int = 1,
    page_size: int = 21,
    category: Optional[str] = None,
) -> DestinationPage:
    """
    Filter by exact category (when given) and slice out one 1-based page.

    `categories` always describes the unfiltered list so a UI can offer the
    full set of choices.
    """
    if page < 1 or page_size < 1:
        raise ValueError("page and page_size must be >= 1")
    filtered = [d for d in destinations if d.category == category] if category else list(destinations)
    start = (page - 1) * page_size
    return DestinationPage(
        page=page,
        page_size=page_size,
        total=len(filtered),
        total_pages=math.ceil(len(filtered) / page_size),
        categories=distinct_categories(destinations),
        destinations=filtered[start:start + page_size],
    )
