from concert_catalog.schemas.concert import (
    PRICE_PLACEHOLDER,
    VALID_TAGS,
    CanonicalConcert,
    ConcertTag,
    ExtractedConcert,
    PerformerList,
    Performers,
    SinglePerformer,
    SourceBatch,
    SourcedConcert,
)

__all__ = [
    "PRICE_PLACEHOLDER",
    "VALID_TAGS",
    "CanonicalConcert",
    "ConcertTag",
    "ExtractedConcert",
    "PerformerList",
    "Performers",
    "SinglePerformer",
    "SourceBatch",
    "SourcedConcert",
]
