"""
In-memory cache of resolved destinations, keyed by the city string as entered.

Entries never expire and are never evicted; the cache lives as long as the
resolver that owns it.
"""
from __future__ import annotations

import logging
import threading
from typing import Dict, List, Optional, Sequence, Tuple

from domain.models import Destination

logger = logging.getLogger(__name__)


class ResolutionCache:
    def __init__(self) -> None:
        self._entries: Dict[str, Tuple[Destination, ...]] = {}
        self._lock = threading.Lock()

    def get(self, city: str) -> Optional[List[Destination]]:
        """
        Return the cached destinations for `city`, or None on a miss.

        The key is case-sensitive and untrimmed.
        """
        entry = self._entries.get(city)
        if entry is None:
            return None
        logger.debug("[cache] hit %r (%d destinations)", city, len(entry))
        return list(entry)

    def put(self, city: str, destinations: Sequence[Destination]) -> None:
        """Store (or overwrite) the destinations for `city`; last writer wins."""
        entry = tuple(destinations)
        with self._lock:
            self._entries[city] = entry
        logger.debug("[cache] store %r (%d destinations)", city, len(entry))

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __contains__(self, city: object) -> bool:
        return city in self._entries

    def __len__(self) -> int:
        return len(self._entries)
