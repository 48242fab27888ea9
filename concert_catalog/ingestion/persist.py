"""
Persistence boundary for canonical concerts.

Writers upsert by concert id. Because ids are regenerated every run, a
writer's retention sweep (delete_before) is what keeps the store from
accumulating duplicates across runs.
"""

import logging
from abc import ABC, abstractmethod
from datetime import date
from typing import Dict, List

from concert_catalog.schemas.concert import CanonicalConcert

logger = logging.getLogger(__name__)


class CatalogWriter(ABC):
    """Abstract base for catalog stores."""

    @abstractmethod
    def upsert(self, concerts: List[CanonicalConcert]) -> int:
        """Insert or replace concerts by id. Returns the number written."""

    @abstractmethod
    def delete_before(self, cutoff: date) -> int:
        """Delete concerts dated before `cutoff`. Returns the number deleted."""


class InMemoryCatalogWriter(CatalogWriter):
    """Dictionary-backed catalog store, keyed by concert id."""

    def __init__(self) -> None:
        self.concerts: Dict[str, CanonicalConcert] = {}

    def upsert(self, concerts: List[CanonicalConcert]) -> int:
        for concert in concerts:
            self.concerts[concert.id] = concert
        logger.info(f"Upserted {len(concerts)} concerts ({len(self.concerts)} stored)")
        return len(concerts)

    def delete_before(self, cutoff: date) -> int:
        stale = [cid for cid, c in self.concerts.items() if c.day < cutoff]
        for cid in stale:
            del self.concerts[cid]
        if stale:
            logger.info(f"Deleted {len(stale)} concerts dated before {cutoff.isoformat()}")
        return len(stale)

    def all(self) -> List[CanonicalConcert]:
        return sorted(self.concerts.values(), key=lambda c: (c.date.replace(tzinfo=None), c.title))
