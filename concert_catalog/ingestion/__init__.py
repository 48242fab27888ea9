"""
Collaborators around the resolution core.

Sources and extraction-output validation feed the resolver; the pipeline
runs a full refresh and isolates per-source and per-stage failures.
"""

from concert_catalog.ingestion.extraction import parse_extraction_output, validate_records
from concert_catalog.ingestion.persist import CatalogWriter, InMemoryCatalogWriter
from concert_catalog.ingestion.pipeline import (
    AggregationPipeline,
    AggregationReport,
    RunStatus,
    StageError,
)
from concert_catalog.ingestion.sources import (
    ConcertSource,
    ExtractedTextSource,
    FunctionSource,
)

__all__ = [
    "AggregationPipeline",
    "AggregationReport",
    "CatalogWriter",
    "ConcertSource",
    "ExtractedTextSource",
    "FunctionSource",
    "InMemoryCatalogWriter",
    "RunStatus",
    "StageError",
    "parse_extraction_output",
    "validate_records",
]
