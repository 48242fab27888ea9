"""
Aggregation Pipeline.

Runs one catalog refresh end to end:

    sources -> collect -> resolve -> enrich (optional) -> persist (optional)

A failure in any one source, or in the enrichment or persistence stage, is
logged and reported but never aborts the run; the resolver only ever sees
the sources that succeeded.
"""

import logging
import uuid
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence

from concert_catalog.configs.settings import get_settings
from concert_catalog.ingestion.persist import CatalogWriter
from concert_catalog.ingestion.sources import ConcertSource
from concert_catalog.monitoring.logging import with_context
from concert_catalog.resolution.resolver import ConcertResolver
from concert_catalog.schemas.concert import CanonicalConcert, SourceBatch

logger = logging.getLogger(__name__)

# Receives the resolved catalog, may modify concerts in place, returns the list to keep.
Enricher = Callable[[List[CanonicalConcert]], List[CanonicalConcert]]


class RunStatus(str, Enum):
    """Status of an aggregation run."""

    SUCCESS = "success"
    PARTIAL_SUCCESS = "partial_success"
    FAILED = "failed"


@dataclass
class StageError:
    """A failure recorded during a run."""

    stage: str  # 'collect', 'enrich', 'persist'
    source: str
    message: str


@dataclass
class SourceSummary:
    name: str
    url: str
    count: int


@dataclass
class AggregationReport:
    """Result of one aggregation run."""

    run_id: str
    started_at: datetime
    ended_at: datetime
    sources: List[SourceSummary] = field(default_factory=list)
    concerts: List[CanonicalConcert] = field(default_factory=list)
    errors: List[StageError] = field(default_factory=list)
    saved: int = 0
    deleted: int = 0

    @property
    def total(self) -> int:
        return len(self.concerts)

    @property
    def duration_seconds(self) -> float:
        return (self.ended_at - self.started_at).total_seconds()

    @property
    def status(self) -> RunStatus:
        if self.errors and not self.sources:
            return RunStatus.FAILED
        if self.errors:
            return RunStatus.PARTIAL_SUCCESS
        return RunStatus.SUCCESS

    @property
    def success(self) -> bool:
        return self.status != RunStatus.FAILED

    def to_dict(self) -> Dict[str, Any]:
        summary: Dict[str, Any] = {
            "success": self.success,
            "status": self.status.value,
            "timestamp": self.started_at.isoformat(),
            "duration_seconds": self.duration_seconds,
            "sources": [{"name": s.name, "count": s.count} for s in self.sources],
            "total": self.total,
            "saved": self.saved,
            "deleted": self.deleted,
        }
        if self.errors:
            summary["errors"] = [
                {"stage": e.stage, "source": e.source, "error": e.message} for e in self.errors
            ]
        return summary


def retention_cutoff(today: date, retention_days: int) -> date:
    """First date that is still kept: anything earlier is stale."""
    return today - timedelta(days=retention_days)


class AggregationPipeline:
    """Collect every source, resolve the results, and hand them on."""

    def __init__(
        self,
        sources: Sequence[ConcertSource],
        resolver: Optional[ConcertResolver] = None,
        *,
        enricher: Optional[Enricher] = None,
        writer: Optional[CatalogWriter] = None,
        retention_days: Optional[int] = None,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ):
        self.sources = list(sources)
        self.resolver = resolver or ConcertResolver()
        self.enricher = enricher
        self.writer = writer
        self.retention_days = (
            retention_days if retention_days is not None else get_settings().RETENTION_DAYS
        )
        self.clock = clock

    def collect(self, run_id: str, errors: List[StageError]) -> List[SourceBatch]:
        """Collect every source, recording failures instead of raising."""
        batches: List[SourceBatch] = []
        for source in self.sources:
            log = with_context(logger, run_id=run_id, source=source.name, stage="collect")
            try:
                batch = source.batch()
            except Exception as e:
                log.error(f"Error processing {source.name}: {e}", exc_info=True)
                errors.append(StageError("collect", source.name, str(e)))
                continue
            log.info(f"Collected {len(batch.concerts)} concerts from {source.name}")
            batches.append(batch)
        return batches

    def run(self) -> AggregationReport:
        run_id = uuid.uuid4().hex[:12]
        started_at = self.clock()
        errors: List[StageError] = []
        logger.info(f"Starting concert aggregation run {run_id} at {started_at.isoformat()}")

        batches = self.collect(run_id, errors)
        concerts = self.resolver.resolve(batches)

        if self.enricher is not None:
            try:
                concerts = self.enricher(concerts)
            except Exception as e:
                logger.error(f"Enrichment error: {e}", exc_info=True)
                errors.append(StageError("enrich", "enrichment", str(e)))

        saved = deleted = 0
        if self.writer is not None:
            try:
                saved = self.writer.upsert(concerts)
                deleted = self.writer.delete_before(
                    retention_cutoff(started_at.date(), self.retention_days)
                )
            except Exception as e:
                logger.error(f"Persistence error: {e}", exc_info=True)
                errors.append(StageError("persist", "database", str(e)))

        report = AggregationReport(
            run_id=run_id,
            started_at=started_at,
            ended_at=self.clock(),
            sources=[SourceSummary(b.source_name, b.source_url, len(b.concerts)) for b in batches],
            concerts=concerts,
            errors=errors,
            saved=saved,
            deleted=deleted,
        )
        logger.info(
            f"Run {run_id} finished ({report.status.value}): {report.total} concerts "
            f"from {len(batches)}/{len(self.sources)} sources, {len(errors)} error(s)"
        )
        return report
