"""Seen-fingerprint ledgers.

``is_new(job)`` is an atomic check-and-set: it returns True exactly once per
fingerprint, recording it as a side effect. Every later sighting refreshes the
recorded time, so retention counts from the last sighting. Two implementations:

- DatabaseLedger: rows in ``seen_fingerprint``; survives restarts, pruned by age
- MemoryLedger: bounded in-process set for tests and ephemeral runs
"""

import threading
from abc import ABC, abstractmethod
from collections import OrderedDict
from datetime import datetime, timedelta
from typing import Optional

from jobwatch.config.models import LedgerConfig
from jobwatch.domain.models import Job
from jobwatch.logging import get_logger
from jobwatch.persistence.database import get_session
from jobwatch.persistence.repositories import FingerprintRepository
from jobwatch.utils.timestamps import utc_now

logger = get_logger(__name__, component="ledger")


class Ledger(ABC):
    """Set of fingerprints already processed."""

    def __init__(self, retention_days: int = 0):
        self.retention_days = retention_days
        # Serialises check-and-set in case two cycles ever overlap.
        self._lock = threading.Lock()

    def is_new(self, job: Job) -> bool:
        """True the first time ``job``'s fingerprint is offered; records it."""
        fingerprint = job.fingerprint
        with self._lock:
            recorded = self._check_and_set(fingerprint, job.id)

        if recorded:
            logger.debug(
                "Fingerprint recorded",
                extra={"event": "ledger.recorded", "job_id": job.id, "fingerprint": fingerprint},
            )
        return recorded

    def prune(self, now: Optional[datetime] = None) -> int:
        """Forget fingerprints older than ``retention_days``; returns how many."""
        if self.retention_days <= 0:
            return 0

        cutoff = (now or utc_now()) - timedelta(days=self.retention_days)
        with self._lock:
            removed = self._prune_before(cutoff)

        if removed:
            logger.info(
                f"Pruned {removed} fingerprints older than {self.retention_days} days",
                extra={"event": "ledger.pruned", "removed": removed, "cutoff": cutoff.isoformat()},
            )
        return removed

    @abstractmethod
    def size(self) -> int:
        """Number of fingerprints currently held."""

    @abstractmethod
    def _check_and_set(self, fingerprint: str, job_id: str) -> bool:
        pass

    @abstractmethod
    def _prune_before(self, cutoff: datetime) -> int:
        pass


class MemoryLedger(Ledger):
    """In-process ledger bounded to ``max_entries`` (least recently seen evicted first).

    Lost on restart, so a restarted process re-notifies everything it sees.
    """

    def __init__(self, max_entries: int = 0, retention_days: int = 0):
        super().__init__(retention_days=retention_days)
        self.max_entries = max_entries
        self._seen: "OrderedDict[str, datetime]" = OrderedDict()

    def size(self) -> int:
        with self._lock:
            return len(self._seen)

    def __contains__(self, fingerprint: str) -> bool:
        with self._lock:
            return fingerprint in self._seen

    def _check_and_set(self, fingerprint: str, job_id: str) -> bool:
        now = utc_now()
        if fingerprint in self._seen:
            # Re-sighting: refresh recency so retention and eviction skip it.
            self._seen.move_to_end(fingerprint)
            self._seen[fingerprint] = now
            return False

        self._seen[fingerprint] = now
        if self.max_entries > 0:
            while len(self._seen) > self.max_entries:
                evicted, _ = self._seen.popitem(last=False)
                logger.debug(
                    "Ledger full, evicted least recently seen fingerprint",
                    extra={"event": "ledger.evicted", "fingerprint": evicted},
                )
        return True

    def _prune_before(self, cutoff: datetime) -> int:
        # Entries are ordered by last sighting, so stop at the first recent one.
        removed = 0
        while self._seen:
            fingerprint, seen_at = next(iter(self._seen.items()))
            if seen_at >= cutoff:
                break
            del self._seen[fingerprint]
            removed += 1
        return removed


class DatabaseLedger(Ledger):
    """Ledger backed by the ``seen_fingerprint`` table.

    Requires ``init_database`` to have run. Errors surface as PersistenceError
    from ``is_new``; the pipeline then leaves the job for the next cycle.
    """

    def size(self) -> int:
        with get_session() as session:
            return FingerprintRepository(session).count()

    def _check_and_set(self, fingerprint: str, job_id: str) -> bool:
        with get_session() as session:
            return FingerprintRepository(session).add(fingerprint, job_id, seen_at=utc_now())

    def _prune_before(self, cutoff: datetime) -> int:
        with get_session() as session:
            return FingerprintRepository(session).delete_older_than(cutoff)


def build_ledger(config: LedgerConfig) -> Ledger:
    """Ledger for the configured backend."""
    if config.backend == "memory":
        return MemoryLedger(max_entries=config.max_entries, retention_days=config.retention_days)
    return DatabaseLedger(retention_days=config.retention_days)
