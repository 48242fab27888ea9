"""Venue name normalization."""

import re
from typing import Iterable, List, Optional, Pattern, Tuple

from concert_catalog.resolution.tables import ResolutionTables, VenueAlias

_NON_ALNUM = re.compile(r"[^a-z0-9]")


def normalize_text(text: Optional[str]) -> str:
    """Lowercase and drop every character that is not a-z or 0-9."""
    if not text:
        return ""
    return _NON_ALNUM.sub("", text.lower())


class VenueNormalizer:
    """
    Collapse venue name variants to one token.

    "Merkin Concert Hall", "Merkin Hall" and "Kaufman Music Center - Merkin
    Hall" all become "merkinhall". Names matching no alias come back
    normalized but otherwise untouched.
    """

    def __init__(self, aliases: Optional[Iterable[VenueAlias]] = None):
        if aliases is None:
            aliases = ResolutionTables().venue_aliases
        self._aliases: List[Tuple[Pattern[str], str]] = [
            (re.compile(alias.pattern), alias.canonical) for alias in aliases
        ]

    @classmethod
    def from_tables(cls, tables: ResolutionTables) -> "VenueNormalizer":
        return cls(tables.venue_aliases)

    def normalize(self, venue: Optional[str]) -> str:
        v = normalize_text(venue)
        for pattern, canonical in self._aliases:
            if pattern.search(v):
                return canonical
        return v
