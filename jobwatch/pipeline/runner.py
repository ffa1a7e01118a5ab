"""Cycle orchestration: fetch → dedup → match → persist + publish → digest."""

import threading
import time
from typing import Iterable, List, Optional, Sequence
from uuid import uuid4

from jobwatch.adapters.factory import build_adapters
from jobwatch.config.models import AppConfig
from jobwatch.dedup.ledger import Ledger, build_ledger
from jobwatch.domain.models import Job
from jobwatch.logging import get_logger
from jobwatch.logging.context import log_context
from jobwatch.matching.subscriptions import SubscriptionRegistry
from jobwatch.notifications.digest import DigestBuilder
from jobwatch.notifications.service import NotificationFanout
from jobwatch.persistence.exceptions import PersistenceError
from jobwatch.persistence.store import JobStore
from jobwatch.utils.timestamps import utc_now

from .fetcher import FetchCoordinator
from .models import CycleResult, CycleStats
from .observers import PipelineObserver

logger = get_logger(__name__, component="pipeline")


class JobPipeline:
    """
    Runs one cycle at a time across all configured sources.

    Per cycle:
    1. Fetch every source concurrently; each source's jobs are processed as
       soon as that source finishes, so a slow source never delays the others
    2. For each job: ledger check-and-set, then per-recipient matching
    3. For each match: upsert, realtime publish, add to the cycle digest
    4. Dispatch the digest once, emit CycleStats to observers

    Failures of a source, a single write or a single publish are isolated and
    counted in the stats. Anything else is caught at the top of the cycle and
    reported as a failed CycleResult; the pipeline stays usable.
    """

    def __init__(
        self,
        fetcher: FetchCoordinator,
        ledger: Ledger,
        subscriptions: SubscriptionRegistry,
        store: JobStore,
        fanout: NotificationFanout,
        observers: Iterable[PipelineObserver] = (),
    ):
        self.fetcher = fetcher
        self.ledger = ledger
        self.subscriptions = subscriptions
        self.store = store
        self.fanout = fanout
        self.observers: List[PipelineObserver] = list(observers)
        self._lock = threading.Lock()

    @classmethod
    def from_config(
        cls,
        app_config: AppConfig,
        fetcher: FetchCoordinator,
        ledger: Ledger,
        store: JobStore,
        fanout: NotificationFanout,
        observers: Iterable[PipelineObserver] = (),
    ) -> "JobPipeline":
        return cls(
            fetcher=fetcher,
            ledger=ledger,
            subscriptions=SubscriptionRegistry.from_config(app_config),
            store=store,
            fanout=fanout,
            observers=observers,
        )

    def add_observer(self, observer: PipelineObserver) -> None:
        self.observers.append(observer)

    @property
    def is_running(self) -> bool:
        return self._lock.locked()

    def run_cycle(self) -> CycleResult:
        """
        Execute a complete cycle.

        A trigger that arrives while another cycle holds the lock returns at
        once with ``stats.skipped`` set; it is neither queued nor an error.

        Returns:
            CycleResult; ``success`` is False only for an unexpected error
        """
        cycle_id = uuid4().hex
        stats = CycleStats(cycle_id=cycle_id, timestamp=utc_now())

        if not self._lock.acquire(blocking=False):
            stats.skipped = True
            with log_context(cycle_id=cycle_id):
                logger.warning(
                    "Cycle skipped: previous cycle still in progress",
                    extra={"event": "cycle.skipped", "reason": "lock_held"},
                )
            return CycleResult(success=True, stats=stats)

        started = time.monotonic()
        try:
            with log_context(cycle_id=cycle_id):
                return self._run_locked(stats, started)
        finally:
            self._lock.release()

    def _run_locked(self, stats: CycleStats, started: float) -> CycleResult:
        try:
            logger.info(
                "Cycle started",
                extra={"event": "cycle.started", "source_count": len(self.fetcher.adapters)},
            )

            self._prune_ledger()
            digest = self.fanout.new_digest()

            for result in self.fetcher.iter_results():
                if not result.succeeded:
                    stats.failed_sources.append(result.source_id)
                    continue

                stats.total_fetched += len(result.jobs)
                with log_context(source=result.source_id):
                    for job in result.jobs:
                        self._process_job(job, stats, digest)

            digest_result = self.fanout.dispatch_digest(digest)
            stats.digest_sent = digest_result.is_success()
            stats.digest_failed = digest_result.status == "failed"

            stats.ledger_size = self._ledger_size()
            stats.duration_seconds = time.monotonic() - started

            logger.info(
                "Cycle completed",
                extra={
                    "event": "cycle.completed",
                    "duration_ms": int(stats.duration_seconds * 1000),
                    "total_fetched": stats.total_fetched,
                    "total_new": stats.total_new,
                    "total_matched": stats.total_matched,
                    "total_persisted": stats.total_persisted,
                    "total_published": stats.total_published,
                    "storage_failures": stats.storage_failures,
                    "publish_failures": stats.publish_failures,
                    "failed_sources": stats.failed_sources,
                    "digest_sent": stats.digest_sent,
                    "ledger_size": stats.ledger_size,
                    "had_errors": stats.had_errors,
                },
            )
            self._notify_cycle_complete(stats)
            return CycleResult(success=True, stats=stats)

        except Exception as e:
            stats.duration_seconds = time.monotonic() - started
            logger.error(
                f"Cycle failed: {e}",
                exc_info=True,
                extra={
                    "event": "cycle.failed",
                    "error_type": type(e).__name__,
                    "duration_ms": int(stats.duration_seconds * 1000),
                },
            )
            return CycleResult(success=False, stats=stats, error=str(e) or type(e).__name__)

    def _process_job(self, job: Job, stats: CycleStats, digest: DigestBuilder) -> None:
        try:
            is_new = self.ledger.is_new(job)
        except PersistenceError as e:
            # Not recorded, so the job is retried next cycle.
            stats.storage_failures += 1
            logger.warning(
                f"Ledger check failed for {job.id}: {e}",
                extra={"event": "ledger.check_failed", "job_id": job.id, "error": str(e)},
            )
            return

        if not is_new:
            return
        stats.total_new += 1

        recipients = self.subscriptions.interested_recipients(job)
        if not recipients:
            return
        stats.total_matched += 1

        try:
            self.store.upsert(job)
        except PersistenceError as e:
            stats.storage_failures += 1
            logger.error(
                f"Failed to persist job {job.id}: {e}",
                extra={
                    "event": "storage.upsert.failed",
                    "job_id": job.id,
                    "error_type": type(e).__name__,
                },
            )
        else:
            stats.total_persisted += 1

        outcome = self.fanout.publish(job, recipients)
        stats.total_published += len(outcome.published)
        stats.publish_failures += len(outcome.failed)

        digest.add(job)

        logger.info(
            f"Matched job: {job.title} at {job.company}",
            extra={
                "event": "job.matched",
                "job_id": job.id,
                "recipients": recipients,
            },
        )
        self._notify_match(job, recipients)

    def _prune_ledger(self) -> None:
        try:
            self.ledger.prune()
        except PersistenceError as e:
            logger.warning(
                f"Ledger prune failed: {e}",
                extra={"event": "ledger.prune_failed", "error": str(e)},
            )

    def _ledger_size(self) -> int:
        try:
            return self.ledger.size()
        except PersistenceError as e:
            logger.warning(
                f"Could not read ledger size: {e}",
                extra={"event": "ledger.size_failed", "error": str(e)},
            )
            return -1

    def _notify_match(self, job: Job, recipients: Sequence[str]) -> None:
        for observer in self.observers:
            try:
                observer.on_match(job, recipients)
            except Exception:
                logger.exception(
                    f"Observer {type(observer).__name__} failed in on_match",
                    extra={"event": "observer.failed", "hook": "on_match"},
                )

    def _notify_cycle_complete(self, stats: CycleStats) -> None:
        for observer in self.observers:
            try:
                observer.on_cycle_complete(stats)
            except Exception:
                logger.exception(
                    f"Observer {type(observer).__name__} failed in on_cycle_complete",
                    extra={"event": "observer.failed", "hook": "on_cycle_complete"},
                )

    def close(self) -> None:
        self.fetcher.close()
        self.fanout.close()


def build_pipeline(
    app_config: AppConfig,
    fanout: NotificationFanout,
    ledger: Optional[Ledger] = None,
    store: Optional[JobStore] = None,
    observers: Iterable[PipelineObserver] = (),
) -> JobPipeline:
    """Wire adapters, fetcher, ledger and store from the config snapshot."""
    fetcher = FetchCoordinator(
        build_adapters(app_config), max_workers=app_config.advanced.fetch_max_workers
    )
    return JobPipeline.from_config(
        app_config,
        fetcher=fetcher,
        ledger=ledger or build_ledger(app_config.ledger),
        store=store or JobStore(),
        fanout=fanout,
        observers=observers,
    )
