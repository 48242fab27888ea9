"""
Concert sources.

A source yields the concerts it lists. Two shapes are supported:

- FunctionSource: structured records straight from an API client
- ExtractedTextSource: page text handed to an extraction service, whose
  JSON-array output is then validated

Fetching and extraction are supplied by the caller; nothing here touches
the network.
"""

from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Any, Iterable, List

from concert_catalog.errors import CatalogError, SourceError
from concert_catalog.ingestion.extraction import parse_extraction_output, validate_records
from concert_catalog.schemas.concert import ExtractedConcert, SourceBatch

# (page_text, source_name, source_url) -> extraction service text output
Extractor = Callable[[str, str, str], str]


class ConcertSource(ABC):
    """Abstract base for all concert sources."""

    def __init__(self, name: str, url: str = ""):
        self.name = name
        self.url = url

    @abstractmethod
    def collect(self) -> List[ExtractedConcert]:
        """Return the validated concerts currently listed by this source."""

    def _fetch(self, fetch: Callable[[], Any]) -> Any:
        """Call `fetch`, re-raising non-catalog failures as SourceError."""
        try:
            return fetch()
        except CatalogError:
            raise
        except Exception as e:
            raise SourceError(self.name, str(e)) from e

    def batch(self) -> SourceBatch:
        return SourceBatch(source_name=self.name, source_url=self.url, concerts=self.collect())

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r}, url={self.url!r})"


class FunctionSource(ConcertSource):
    """Source backed by a callable returning record dicts or ExtractedConcert objects."""

    def __init__(self, name: str, url: str, fetch: Callable[[], Iterable[Any]]):
        super().__init__(name, url)
        self.fetch = fetch

    def collect(self) -> List[ExtractedConcert]:
        records = list(self._fetch(self.fetch))
        ready = [r for r in records if isinstance(r, ExtractedConcert)]
        raw = [r for r in records if not isinstance(r, ExtractedConcert)]
        return ready + validate_records(raw, self.name)


class ExtractedTextSource(ConcertSource):
    """Source whose page text goes through an extraction service."""

    def __init__(self, name: str, url: str, fetch: Callable[[], str], extract: Extractor):
        super().__init__(name, url)
        self.fetch = fetch
        self.extract = extract

    def collect(self) -> List[ExtractedConcert]:
        text = self._fetch(self.fetch)
        output = self.extract(text, self.name, self.url)
        return parse_extraction_output(output, self.name, self.url)
