# concert_catalog/schemas/concert.py
"""
Concert listing schemas.

Records flow through three shapes:

    ExtractedConcert  -> what a source (or the extraction service) yields
    SourcedConcert    -> an extracted record tagged with its provenance
    CanonicalConcert  -> the merged, identified record emitted per run

Sources are grouped into SourceBatch objects before resolution.
"""

import re
from datetime import date, datetime, timezone
from enum import Enum
from typing import Annotated, Any, List, Literal, Optional, Union

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    field_serializer,
    field_validator,
)

# ============================================================================
# TAG VOCABULARY
# ============================================================================


class ConcertTag(str, Enum):
    """Fixed tag vocabulary for concert listings."""

    FREE = "free"
    CHEAP = "cheap"
    STUDENT = "student"
    CHURCH = "church"
    CHAMBER = "chamber"
    ORCHESTRAL = "orchestral"
    SOLO = "solo"
    CHORAL = "choral"
    ORGAN = "organ"
    OPERA = "opera"
    NEW_MUSIC = "new-music"
    FAMILY = "family"


VALID_TAGS = tuple(t.value for t in ConcertTag)

PRICE_PLACEHOLDER = "See website"

_DATE_ONLY = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def _utc_now() -> datetime:
    """Return current UTC time as timezone-aware datetime."""
    return datetime.now(timezone.utc)


# ============================================================================
# PERFORMERS
# ============================================================================


class SinglePerformer(BaseModel):
    """Performers given as one free-text line, e.g. "Jane Doe, violin"."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["single"] = "single"
    name: str = Field(min_length=1)

    @property
    def primary(self) -> str:
        return self.name

    @property
    def display_text(self) -> str:
        return self.name


class PerformerList(BaseModel):
    """Performers given as an ordered list; the first entry is the primary."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["list"] = "list"
    names: List[str] = Field(min_length=1)

    @property
    def primary(self) -> str:
        return self.names[0]

    @property
    def display_text(self) -> str:
        return ", ".join(self.names)


Performers = Annotated[
    Union[SinglePerformer, PerformerList], Field(discriminator="kind")
]


def coerce_performers(value: Any) -> Any:
    """
    Turn the raw performers shapes sources produce into a Performers variant.

    Accepts None, a string, a list of strings, or an already-built variant.
    Blank strings and lists without a non-blank entry become None.
    """
    if value is None or isinstance(value, (SinglePerformer, PerformerList)):
        return value
    if isinstance(value, str):
        name = value.strip()
        return {"kind": "single", "name": name} if name else None
    if isinstance(value, (list, tuple)):
        names = [str(n).strip() for n in value if n is not None and str(n).strip()]
        return {"kind": "list", "names": names} if names else None
    return value


# ============================================================================
# RECORDS
# ============================================================================


class ExtractedConcert(BaseModel):
    """
    A single concert listing as extracted from one source.

    `date` may be given as a bare calendar date ("2026-03-01"), which is read
    as midnight. Time-of-day is kept but never used for identity.
    """

    model_config = ConfigDict(
        str_strip_whitespace=True,
        json_schema_extra={
            "example": {
                "title": "Spring Gala",
                "date": "2026-03-01T19:00:00",
                "venue": "Merkin Concert Hall",
                "address": "129 W 67th St, New York, NY",
                "price": "$40",
                "price_cents": 4000,
                "program": "Beethoven: Symphony No. 5",
                "performers": ["Jane Doe", "The Example Quartet"],
                "source_url": "https://example.org/events/spring-gala",
                "tags": ["chamber"],
            }
        },
    )

    title: str = Field(min_length=1)
    date: datetime
    venue: str = ""
    address: Optional[str] = None
    price: str = ""
    price_cents: Optional[int] = Field(default=None, ge=0)
    program: Optional[str] = None
    performers: Optional[Performers] = None
    source_url: Optional[str] = None
    ticket_url: Optional[str] = None
    tags: List[str] = Field(default_factory=list)

    @field_validator("date", mode="before")
    @classmethod
    def parse_date_only(cls, v):
        """Read a bare YYYY-MM-DD as midnight of that day."""
        if isinstance(v, str) and _DATE_ONLY.match(v.strip()):
            return f"{v.strip()}T00:00:00"
        if isinstance(v, date) and not isinstance(v, datetime):
            return datetime(v.year, v.month, v.day)
        return v

    @field_validator("venue", "price", mode="before")
    @classmethod
    def none_to_empty(cls, v):
        return "" if v is None else v

    @field_validator("address", "program", "source_url", "ticket_url", mode="before")
    @classmethod
    def blank_to_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("performers", mode="before")
    @classmethod
    def normalize_performers(cls, v):
        return coerce_performers(v)

    @field_validator("tags", mode="before")
    @classmethod
    def normalize_tags(cls, v):
        """Lowercase, strip and de-duplicate tags, keeping first-seen order."""
        if v is None:
            return []
        seen: List[str] = []
        for tag in v:
            t = str(tag).strip().lower()
            if t and t not in seen:
                seen.append(t)
        return seen

    @field_serializer("performers")
    def serialize_performers(self, v: Optional[Performers]):
        """Emit performers in the raw shape they arrived in."""
        if v is None:
            return None
        if isinstance(v, SinglePerformer):
            return v.name
        return list(v.names)

    @property
    def day(self) -> date:
        """Calendar date of the concert, ignoring time-of-day."""
        return self.date.date()

    @property
    def primary_performer(self) -> Optional[str]:
        return self.performers.primary if self.performers else None


class SourcedConcert(ExtractedConcert):
    """An extracted concert carrying the provenance of the source it came from."""

    source_name: str
    source_base_url: str = ""


class SourceBatch(BaseModel):
    """All concerts successfully extracted from one source in a run."""

    model_config = ConfigDict(populate_by_name=True)

    source_name: str = Field(min_length=1)
    source_url: str = ""
    concerts: List[ExtractedConcert] = Field(
        default_factory=list,
        validation_alias=AliasChoices("concerts", "records"),
    )

    def sourced(self) -> List[SourcedConcert]:
        """Attach this batch's provenance to each of its concerts."""
        return [
            SourcedConcert(
                **concert.model_dump(include=set(ExtractedConcert.model_fields)),
                source_name=self.source_name,
                source_base_url=self.source_url,
            )
            for concert in self.concerts
        ]


class CanonicalConcert(SourcedConcert):
    """
    The merged representation of one real-world concert.

    Identifiers and timestamps are assigned once per resolution run; the same
    inputs resolved twice produce different ids.
    """

    model_config = ConfigDict(validate_assignment=True)

    id: str
    description: Optional[str] = None
    created_at: datetime = Field(default_factory=_utc_now)
    updated_at: datetime = Field(default_factory=_utc_now)

    def to_extracted(self) -> ExtractedConcert:
        """Strip identity and provenance, e.g. to feed the catalog back in."""
        return ExtractedConcert.model_validate(
            self.model_dump(include=set(ExtractedConcert.model_fields))
        )
