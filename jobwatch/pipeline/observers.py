"""Observer hooks the pipeline calls synchronously at defined points.

The surrounding service layer subclasses PipelineObserver to relay matches
or cycle summaries elsewhere (an HTTP status endpoint, metrics) without the
pipeline knowing about it.
"""

import threading
from collections import deque
from typing import Deque, List, Optional, Sequence

from jobwatch.domain.models import Job

from .models import CycleStats


class PipelineObserver:
    """No-op base; override what you need."""

    def on_match(self, job: Job, recipients: Sequence[str]) -> None:
        """Called once per matched job, after persistence and realtime publish."""

    def on_cycle_complete(self, stats: CycleStats) -> None:
        """Called once at the end of every cycle that ran (not for skipped triggers)."""


class RecentStatsObserver(PipelineObserver):
    """Keeps the last ``maxlen`` cycle summaries in memory."""

    def __init__(self, maxlen: int = 50):
        self._history: Deque[CycleStats] = deque(maxlen=maxlen)
        self._lock = threading.Lock()

    def on_cycle_complete(self, stats: CycleStats) -> None:
        with self._lock:
            self._history.append(stats)

    @property
    def history(self) -> List[CycleStats]:
        with self._lock:
            return list(self._history)

    @property
    def latest(self) -> Optional[CycleStats]:
        with self._lock:
            return self._history[-1] if self._history else None
