"""
Word-overlap matching between two concerts.

Looser than key matching: used only when exact and prefix key matching both
fail, to catch titles such as "NY Phil plays Beethoven" vs "New York
Philharmonic: Beethoven Symphony".
"""

import re
from typing import Dict, Iterable, Optional, Set

from concert_catalog.resolution.tables import ResolutionTables
from concert_catalog.resolution.venues import VenueNormalizer
from concert_catalog.schemas.concert import ExtractedConcert

_NON_WORD = re.compile(r"[^a-z0-9\s]")


class WordOverlapMatcher:
    """Compare significant title words of two concerts at the same venue and date."""

    MIN_WORDS = 2
    MIN_OVERLAP = 2
    MIN_RATIO = 0.5

    def __init__(
        self,
        venues: Optional[VenueNormalizer] = None,
        abbreviations: Optional[Dict[str, str]] = None,
        stopwords: Optional[Iterable[str]] = None,
    ):
        defaults = ResolutionTables()
        self.venues = venues or VenueNormalizer()
        self.abbreviations = (
            dict(abbreviations) if abbreviations is not None else defaults.abbreviations
        )
        self.stopwords = frozenset(
            stopwords if stopwords is not None else defaults.stopwords
        )

    @classmethod
    def from_tables(
        cls, tables: ResolutionTables, venues: Optional[VenueNormalizer] = None
    ) -> "WordOverlapMatcher":
        return cls(
            venues=venues or VenueNormalizer.from_tables(tables),
            abbreviations=tables.abbreviations,
            stopwords=tables.stopwords,
        )

    def title_words(self, title: str) -> Set[str]:
        """Significant words of a title, with abbreviations expanded."""
        words = _NON_WORD.sub("", title.lower()).split()
        expanded = (self.abbreviations.get(w, w) for w in words if len(w) >= 2)
        return {w for w in expanded if w not in self.stopwords}

    def is_same_event(self, a: ExtractedConcert, b: ExtractedConcert) -> bool:
        if self.venues.normalize(a.venue) != self.venues.normalize(b.venue):
            return False
        if a.day != b.day:
            return False

        words_a = self.title_words(a.title)
        words_b = self.title_words(b.title)
        if len(words_a) < self.MIN_WORDS or len(words_b) < self.MIN_WORDS:
            return False

        overlap = len(words_a & words_b)
        smaller = min(len(words_a), len(words_b))
        return overlap >= self.MIN_OVERLAP and overlap / smaller >= self.MIN_RATIO
