"""
Static lookup tables used by the resolution components.

The tables are plain data held in a pydantic model so they can be loaded from
YAML (see concert_catalog.configs.config) and handed to each component
explicitly. The defaults describe the New York classical venues and sources
the catalog was built around.
"""

from typing import Dict, List, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

from concert_catalog.schemas.concert import PRICE_PLACEHOLDER

# Ordered: the first pattern that matches the normalized venue wins.
DEFAULT_VENUE_ALIASES: List[Tuple[str, str]] = [
    (r"merkin(concert)?hall", "merkinhall"),
    (r"kaufman.*merkin", "merkinhall"),
    (r"alicetully(hall)?", "alicetullyhall"),
    (r"davidgeffen(hall)?", "davidgeffenhall"),
    (r"weillrecital(hall)?.*carnegie", "weillhall"),
    (r"zankel(hall)?.*carnegie", "zankelhall"),
    (r"carnegiehall$", "carnegiehall"),
    (r"92n(d)?y|92ndstreety", "92ny"),
    (r"metropolitanopera(house)?", "metopera"),
    (r"cathedral.*st.*john.*divine", "stjohndivine"),
]

DEFAULT_VENUE_SOURCES: List[str] = [
    "Kaufman Music Center",
    "Juilliard",
    "Manhattan School of Music",
    "Trinity Church",
]

DEFAULT_ABBREVIATIONS: Dict[str, str] = {
    "ny": "newyork",
    "phil": "philharmonic",
    "orch": "orchestra",
    "sym": "symphony",
    "qt": "quartet",
    "str": "string",
}

DEFAULT_STOPWORDS: List[str] = [
    "at",
    "in",
    "the",
    "of",
    "and",
    "hall",
    "merkin",
    "concert",
    "recital",
]


class VenueAlias(BaseModel):
    """One venue alias rule: a regex over the normalized venue name."""

    model_config = ConfigDict(frozen=True)

    pattern: str
    canonical: str


class ResolutionTables(BaseModel):
    """Every table the resolver consults, with built-in defaults."""

    model_config = ConfigDict(frozen=True)

    venue_aliases: List[VenueAlias] = Field(
        default_factory=lambda: [
            VenueAlias(pattern=p, canonical=c) for p, c in DEFAULT_VENUE_ALIASES
        ]
    )
    venue_sources: List[str] = Field(
        default_factory=lambda: list(DEFAULT_VENUE_SOURCES)
    )
    abbreviations: Dict[str, str] = Field(
        default_factory=lambda: dict(DEFAULT_ABBREVIATIONS)
    )
    stopwords: List[str] = Field(default_factory=lambda: list(DEFAULT_STOPWORDS))
    price_placeholder: str = PRICE_PLACEHOLDER

    @field_validator("venue_aliases", mode="before")
    @classmethod
    def accept_pairs(cls, v):
        """Allow aliases written as [pattern, canonical] pairs in YAML."""
        if v is None:
            return v
        return [
            {"pattern": item[0], "canonical": item[1]}
            if isinstance(item, (list, tuple))
            else item
            for item in v
        ]
