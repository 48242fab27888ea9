"""
Entity resolution for concert listings.

Key generation, matching, merging, and the resolver that drives them.
"""

from concert_catalog.resolution.keys import IdentityKey, KeyGenerator, fuzzy_key_match
from concert_catalog.resolution.matching import WordOverlapMatcher
from concert_catalog.resolution.merge import MergeEngine, SourceKind
from concert_catalog.resolution.resolver import (
    ConcertResolver,
    MatchStrategy,
    ResolutionReport,
    SourceRef,
)
from concert_catalog.resolution.scoring import completeness_score
from concert_catalog.resolution.tables import ResolutionTables, VenueAlias
from concert_catalog.resolution.venues import VenueNormalizer, normalize_text

__all__ = [
    "ConcertResolver",
    "IdentityKey",
    "KeyGenerator",
    "MatchStrategy",
    "MergeEngine",
    "ResolutionReport",
    "ResolutionTables",
    "SourceKind",
    "SourceRef",
    "VenueAlias",
    "VenueNormalizer",
    "WordOverlapMatcher",
    "completeness_score",
    "fuzzy_key_match",
    "normalize_text",
]
