"""
Concert Resolver.

Turns concerts extracted from several sources into one deduplicated catalog.

Each incoming record is matched against what has been seen so far, in order:

    1. exact identity-key hit
    2. prefix ("fuzzy") key match against every registered key
    3. word-overlap title match against every canonical entry

A hit merges the record into that entry and binds all of the record's keys
to it; a miss opens a new entry under the record's first key. Entries are
never merged with each other after the fact: if two entries are created
separately and a later record would bridge them, they stay separate.
"""

import logging
import uuid
from collections import Counter
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, List, Optional, Tuple

from concert_catalog.resolution.keys import IdentityKey, KeyGenerator, fuzzy_key_match
from concert_catalog.resolution.matching import WordOverlapMatcher
from concert_catalog.resolution.merge import MergeEngine
from concert_catalog.resolution.tables import ResolutionTables
from concert_catalog.resolution.venues import VenueNormalizer
from concert_catalog.schemas.concert import (
    CanonicalConcert,
    SourceBatch,
    SourcedConcert,
)

logger = logging.getLogger(__name__)


class MatchStrategy(str, Enum):
    """How an incoming record found (or failed to find) its canonical entry."""

    EXACT = "exact"
    FUZZY = "fuzzy"
    WORD_OVERLAP = "word_overlap"
    CREATED = "created"


@dataclass(frozen=True)
class SourceRef:
    """Position of one input record: source name and index within that source."""

    source_name: str
    index: int


@dataclass
class _Entry:
    """A canonical entry under construction."""

    record: SourcedConcert
    members: List[SourceRef] = field(default_factory=list)


@dataclass
class ResolutionReport:
    """Outcome of one resolution run."""

    concerts: List[CanonicalConcert]
    groups: Dict[str, List[SourceRef]] = field(default_factory=dict)
    strategy_counts: Dict[str, int] = field(default_factory=dict)
    resolved_at: Optional[datetime] = None

    @property
    def total_records(self) -> int:
        return sum(len(members) for members in self.groups.values())

    @property
    def merged_records(self) -> int:
        """Records that were folded into an already-existing entry."""
        return self.total_records - len(self.concerts)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return str(uuid.uuid4())


class ConcertResolver:
    """
    Resolve source batches into canonical concerts.

    The resolver holds no state between runs; each call to `resolve` builds
    its own key index. It performs no I/O and is deterministic for a given
    input order apart from the generated ids and timestamps.
    """

    def __init__(
        self,
        tables: Optional[ResolutionTables] = None,
        *,
        clock: Callable[[], datetime] = _utc_now,
        id_factory: Callable[[], str] = _new_id,
    ):
        self.tables = tables or ResolutionTables()
        venues = VenueNormalizer.from_tables(self.tables)
        self.keys = KeyGenerator(venues)
        self.matcher = WordOverlapMatcher.from_tables(self.tables, venues=venues)
        self.merger = MergeEngine.from_tables(self.tables)
        self.clock = clock
        self.id_factory = id_factory

    def resolve(self, batches: Iterable[SourceBatch]) -> List[CanonicalConcert]:
        """Resolve all batches and return the canonical concerts."""
        return self.resolve_with_report(batches).concerts

    def resolve_with_report(self, batches: Iterable[SourceBatch]) -> ResolutionReport:
        """Resolve all batches, also reporting membership and match strategies."""
        key_index: Dict[IdentityKey, IdentityKey] = {}
        entries: Dict[IdentityKey, _Entry] = {}
        strategies: Counter = Counter()
        total = 0

        for batch in batches:
            for index, concert in enumerate(batch.sourced()):
                total += 1
                ref = SourceRef(batch.source_name, index)
                candidate_keys = self.keys.keys_for(concert)

                handle, strategy = self._find_match(candidate_keys, concert, key_index, entries)
                strategies[strategy.value] += 1

                if handle is None:
                    handle = candidate_keys[0]
                    entries[handle] = _Entry(record=concert, members=[ref])
                    logger.debug(f"New entry {handle} from {batch.source_name}")
                else:
                    entry = entries[handle]
                    entry.record = self.merger.merge(entry.record, concert)
                    entry.members.append(ref)
                    logger.debug(
                        f"Merged '{concert.title}' from {batch.source_name} "
                        f"into {handle} ({strategy.value})"
                    )

                for key in candidate_keys:
                    key_index[key] = handle

        resolved_at = self.clock()
        concerts: List[CanonicalConcert] = []
        groups: Dict[str, List[SourceRef]] = {}
        for entry in entries.values():
            canonical = self._materialize(entry.record, resolved_at)
            concerts.append(canonical)
            groups[canonical.id] = entry.members

        logger.info(
            f"Resolution complete: {len(concerts)} canonical concerts "
            f"from {total} extracted records"
        )
        return ResolutionReport(
            concerts=concerts,
            groups=groups,
            strategy_counts=dict(strategies),
            resolved_at=resolved_at,
        )

    # ========================================================================
    # MATCHING
    # ========================================================================

    def _find_match(
        self,
        candidate_keys: List[IdentityKey],
        concert: SourcedConcert,
        key_index: Dict[IdentityKey, IdentityKey],
        entries: Dict[IdentityKey, _Entry],
    ) -> Tuple[Optional[IdentityKey], MatchStrategy]:
        for key in candidate_keys:
            if key in key_index:
                return key_index[key], MatchStrategy.EXACT

        for key in candidate_keys:
            for known, handle in key_index.items():
                if fuzzy_key_match(key, known):
                    return handle, MatchStrategy.FUZZY

        for handle, entry in entries.items():
            if self.matcher.is_same_event(concert, entry.record):
                return handle, MatchStrategy.WORD_OVERLAP

        return None, MatchStrategy.CREATED

    # ========================================================================
    # OUTPUT
    # ========================================================================

    def _materialize(self, record: SourcedConcert, resolved_at: datetime) -> CanonicalConcert:
        data = record.model_dump()
        data["source_url"] = record.source_url or record.source_base_url or None
        return CanonicalConcert(
            **data,
            id=self.id_factory(),
            description=None,
            created_at=resolved_at,
            updated_at=resolved_at,
        )
