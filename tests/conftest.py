"""
Shared pytest fixtures for the concert catalog test suite.

Provides factory fixtures for concert records and source batches.
"""

from datetime import datetime, timezone
from itertools import count

import pytest

from concert_catalog.configs.settings import get_settings
from concert_catalog.resolution.resolver import ConcertResolver
from concert_catalog.schemas.concert import (
    ExtractedConcert,
    SourceBatch,
    SourcedConcert,
)

VENUE_SOURCE = "Kaufman Music Center"
AGGREGATOR_SOURCE = "New York Concert Review"


@pytest.fixture
def create_concert():
    """
    Return a function that creates ExtractedConcert objects with sensible defaults.

    All defaults can be overridden via keyword arguments.

    Example:
        concert = create_concert(title="Spring Gala", venue="Merkin Hall")
    """

    def _create_concert(
        title: str = "Test Concert",
        date: str = "2026-03-01T19:30:00",
        venue: str = "Test Venue",
        **kwargs,
    ) -> ExtractedConcert:
        defaults = {
            "title": title,
            "date": date,
            "venue": venue,
            "price": "See website",
            "tags": [],
        }
        defaults.update(kwargs)
        return ExtractedConcert(**defaults)

    return _create_concert


@pytest.fixture
def create_sourced():
    """Return a function that creates SourcedConcert objects for merge tests."""

    def _create_sourced(
        source_name: str = AGGREGATOR_SOURCE,
        title: str = "Test Concert",
        date: str = "2026-03-01T19:30:00",
        venue: str = "Test Venue",
        **kwargs,
    ) -> SourcedConcert:
        defaults = {
            "title": title,
            "date": date,
            "venue": venue,
            "price": "See website",
            "tags": [],
            "source_name": source_name,
            "source_base_url": "https://example.org",
        }
        defaults.update(kwargs)
        return SourcedConcert(**defaults)

    return _create_sourced


@pytest.fixture
def create_batch(create_concert):
    """
    Return a function that creates a SourceBatch.

    Concerts may be given as ExtractedConcert objects or as keyword dicts
    passed to create_concert.
    """

    def _create_batch(source_name: str, *concerts, source_url: str = "") -> SourceBatch:
        built = [
            c if isinstance(c, ExtractedConcert) else create_concert(**c) for c in concerts
        ]
        return SourceBatch(
            source_name=source_name,
            source_url=source_url or f"https://{source_name.lower().replace(' ', '')}.example",
            concerts=built,
        )

    return _create_batch


@pytest.fixture
def fixed_now():
    """A fixed resolution timestamp."""
    return datetime(2026, 2, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def resolver(fixed_now):
    """ConcertResolver with a fixed clock and sequential ids."""
    ids = count(1)
    return ConcertResolver(clock=lambda: fixed_now, id_factory=lambda: f"concert-{next(ids)}")


@pytest.fixture
def fresh_settings():
    """Clear the cached settings so environment changes take effect."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
