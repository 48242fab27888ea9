"""
Identity keys.

A key is (normalized venue, calendar date, normalized discriminator), where
the discriminator is the primary performer when one is known and the title
otherwise. Time-of-day is left out on purpose: sources routinely disagree on
start times for the same concert.
"""

from datetime import date
from typing import List, NamedTuple

from concert_catalog.resolution.venues import VenueNormalizer, normalize_text
from concert_catalog.schemas.concert import ExtractedConcert


class IdentityKey(NamedTuple):
    """Composite identity key for a concert listing."""

    venue: str
    day: date
    discriminator: str

    def __str__(self) -> str:
        return f"{self.venue}:{self.day.isoformat()}:{self.discriminator}"


class KeyGenerator:
    """Derive candidate identity keys for a concert, most specific first."""

    def __init__(self, venues: VenueNormalizer | None = None):
        self.venues = venues or VenueNormalizer()

    def keys_for(self, concert: ExtractedConcert) -> List[IdentityKey]:
        """
        Return the candidate keys for `concert`.

        1. venue:date:<primary performer up to the first comma>, if known
        2. venue:date:<title>, always
        """
        venue = self.venues.normalize(concert.venue)
        day = concert.day
        keys: List[IdentityKey] = []

        performer = concert.primary_performer
        if performer:
            keys.append(
                IdentityKey(venue, day, normalize_text(performer.split(",")[0]))
            )
        keys.append(IdentityKey(venue, day, normalize_text(concert.title)))
        return keys


def fuzzy_key_match(a: IdentityKey, b: IdentityKey) -> bool:
    """
    True when two keys plausibly name the same concert.

    Keys must share venue and date; then either discriminator being a prefix
    of the other is enough ("symphonyno5" vs "symphonyno5incminor").
    """
    if a == b:
        return True
    if a.venue != b.venue or a.day != b.day:
        return False
    return a.discriminator.startswith(b.discriminator) or b.discriminator.startswith(
        a.discriminator
    )
