"""Completeness scoring, used only to break ties between duplicates."""

from concert_catalog.schemas.concert import PRICE_PLACEHOLDER, ExtractedConcert


def completeness_score(
    concert: ExtractedConcert, price_placeholder: str = PRICE_PLACEHOLDER
) -> int:
    """Count the populated fields of a concert (0-10)."""
    populated = [
        bool(concert.title),
        concert.date is not None,
        bool(concert.venue),
        bool(concert.address),
        bool(concert.price) and concert.price != price_placeholder,
        concert.price_cents is not None,
        bool(concert.program),
        concert.performers is not None,
        bool(concert.source_url),
        bool(concert.tags),
    ]
    return sum(populated)
