"""
Merging two listings of the same concert.

Venue-operated sources are trusted for logistics (date, price, URLs);
aggregators usually carry the richer program and performer text. When both
sides are the same kind of source there is no precedence to apply, so the
more complete record is kept; only the tags of the other side survive.
"""

import logging
from enum import Enum
from typing import Iterable, List, Optional

from concert_catalog.resolution.scoring import completeness_score
from concert_catalog.resolution.tables import ResolutionTables
from concert_catalog.schemas.concert import PRICE_PLACEHOLDER, SourcedConcert

logger = logging.getLogger(__name__)


class SourceKind(str, Enum):
    """Classification of a source for merge precedence."""

    VENUE = "venue"
    AGGREGATOR = "aggregator"


def union_tags(first: Iterable[str], second: Iterable[str]) -> List[str]:
    """Union of two tag collections, first-seen order."""
    merged: List[str] = []
    for tag in [*first, *second]:
        if tag not in merged:
            merged.append(tag)
    return merged


class MergeEngine:
    """Combine an existing canonical listing with an incoming duplicate."""

    def __init__(
        self,
        venue_sources: Optional[Iterable[str]] = None,
        price_placeholder: str = PRICE_PLACEHOLDER,
    ):
        self.venue_sources = list(
            venue_sources
            if venue_sources is not None
            else ResolutionTables().venue_sources
        )
        self.price_placeholder = price_placeholder

    @classmethod
    def from_tables(cls, tables: ResolutionTables) -> "MergeEngine":
        return cls(tables.venue_sources, tables.price_placeholder)

    def classify(self, source_name: str) -> SourceKind:
        """A source is venue-authoritative if its name contains a listed venue source."""
        if any(v in source_name for v in self.venue_sources):
            return SourceKind.VENUE
        return SourceKind.AGGREGATOR

    def has_price(self, concert: SourcedConcert) -> bool:
        return bool(concert.price) and concert.price != self.price_placeholder

    def merge(self, existing: SourcedConcert, incoming: SourcedConcert) -> SourcedConcert:
        """
        Merge `incoming` into `existing`.

        Exactly one venue-authoritative side: apply the field precedence table.
        Otherwise keep whichever side scores strictly higher on completeness,
        favouring `existing` on ties, and union the tags of both.
        """
        existing_kind = self.classify(existing.source_name)
        incoming_kind = self.classify(incoming.source_name)

        if existing_kind == incoming_kind:
            existing_score = completeness_score(existing, self.price_placeholder)
            incoming_score = completeness_score(incoming, self.price_placeholder)
            if incoming_score > existing_score:
                logger.debug(
                    f"Keeping {incoming.source_name} record for '{incoming.title}' "
                    f"(completeness {incoming_score} > {existing_score})"
                )
                kept, dropped = incoming, existing
            else:
                kept, dropped = existing, incoming
            # Tags are always the union of every merged record
            return kept.model_copy(update={"tags": union_tags(kept.tags, dropped.tags)})

        if incoming_kind == SourceKind.VENUE:
            venue, aggregator = incoming, existing
        else:
            venue, aggregator = existing, incoming
        return self._apply_precedence(venue, aggregator)

    def _apply_precedence(
        self, venue: SourcedConcert, aggregator: SourcedConcert
    ) -> SourcedConcert:
        if self.has_price(venue):
            price = venue.price
        else:
            price = aggregator.price or venue.price

        performers = venue.performers
        if aggregator.performers is not None and len(
            aggregator.performers.display_text
        ) > len(venue.performers.display_text if venue.performers else ""):
            performers = aggregator.performers

        title = aggregator.title if len(aggregator.title) > len(venue.title) else venue.title

        return SourcedConcert(
            # logistics: venue side
            date=venue.date,
            venue=venue.venue,
            address=venue.address or aggregator.address,
            price=price,
            price_cents=(
                venue.price_cents
                if venue.price_cents is not None
                else aggregator.price_cents
            ),
            source_url=venue.source_url or aggregator.source_url,
            ticket_url=venue.ticket_url or aggregator.ticket_url,
            source_name=venue.source_name,
            source_base_url=venue.source_base_url,
            # descriptions: aggregator side
            title=title,
            program=aggregator.program or venue.program,
            performers=performers,
            tags=union_tags(venue.tags, aggregator.tags),
        )
