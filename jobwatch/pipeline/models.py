"""Data models for cycle execution tracking and reporting."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from jobwatch.domain.models import Job


@dataclass
class SourceResult:
    """
    Outcome of fetching one source within a cycle.

    Attributes:
        source_id: Source identifier, e.g. 'greenhouse:acme'
        jobs: Normalised jobs (empty when the source failed)
        error: Error message if the source failed as a whole
        error_type: Exception class name for the failure
        duration_seconds: Wall time spent on the fetch
    """

    source_id: str
    jobs: List[Job] = field(default_factory=list)
    error: Optional[str] = None
    error_type: Optional[str] = None
    duration_seconds: float = 0.0

    @property
    def succeeded(self) -> bool:
        return self.error is None


@dataclass
class FetchResult:
    """Merged output of all sources: the union of successful sources' jobs."""

    results: List[SourceResult] = field(default_factory=list)

    @property
    def jobs(self) -> List[Job]:
        return [job for result in self.results if result.succeeded for job in result.jobs]

    @property
    def failed_sources(self) -> List[str]:
        return [r.source_id for r in self.results if not r.succeeded]

    @property
    def succeeded_sources(self) -> List[str]:
        return [r.source_id for r in self.results if r.succeeded]


@dataclass
class CycleStats:
    """
    Summary of a single cycle, emitted once at the end and never persisted.

    Attributes:
        cycle_id: Random id shared by every log line of the cycle
        timestamp: UTC time the cycle started
        total_fetched: Jobs returned by successful sources
        total_new: Jobs whose fingerprint had not been seen before
        ledger_size: Fingerprints held by the ledger after the cycle
        total_matched: New jobs matching at least one recipient
        total_persisted: Matched jobs upserted successfully
        total_published: Realtime messages published (one per recipient)
        storage_failures: Upserts that failed
        publish_failures: Realtime publishes that failed
        failed_sources: Sources that contributed nothing this cycle
        digest_sent: Whether a digest was dispatched
        digest_failed: Whether digest dispatch raised
        duration_seconds: Wall time of the cycle
        skipped: True when the trigger arrived while another cycle was running
    """

    cycle_id: str
    timestamp: datetime
    total_fetched: int = 0
    total_new: int = 0
    ledger_size: int = 0
    total_matched: int = 0
    total_persisted: int = 0
    total_published: int = 0
    storage_failures: int = 0
    publish_failures: int = 0
    failed_sources: List[str] = field(default_factory=list)
    digest_sent: bool = False
    digest_failed: bool = False
    duration_seconds: float = 0.0
    skipped: bool = False

    @property
    def had_errors(self) -> bool:
        return bool(
            self.failed_sources or self.storage_failures or self.publish_failures or self.digest_failed
        )


@dataclass
class CycleResult:
    """
    Returned by an on-demand trigger: success or failure of that cycle only.

    ``success`` is False only when an unexpected error escaped the per-source,
    per-job and per-channel isolation; isolated failures are visible in
    ``stats`` instead.
    """

    success: bool
    stats: Optional[CycleStats] = None
    error: Optional[str] = None

    @property
    def skipped(self) -> bool:
        return bool(self.stats and self.stats.skipped)
