"""Concurrent fetching across all configured sources."""

import contextvars
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Iterator, Optional, Sequence

from jobwatch.adapters.base import BaseAdapter
from jobwatch.adapters.exceptions import AdapterError
from jobwatch.logging import get_logger

from .models import FetchResult, SourceResult

logger = get_logger(__name__, component="fetcher")


class FetchCoordinator:
    """
    Runs every adapter concurrently and waits for all of them to settle.

    A failing or slow source never prevents the others' results from being
    used: each failure is captured in its SourceResult and logged. Timeouts
    belong to the adapters (``advanced.http_request_timeout``), not to this
    class.
    """

    def __init__(self, adapters: Sequence[BaseAdapter], max_workers: Optional[int] = None):
        self.adapters = list(adapters)
        self.max_workers = max_workers or max(1, len(self.adapters))

    def iter_results(self) -> Iterator[SourceResult]:
        """Yield each source's result as soon as it completes (order is not preserved)."""
        if not self.adapters:
            return

        workers = min(self.max_workers, len(self.adapters))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="fetch") as executor:
            # Each worker runs in a copy of the caller's context so log_context fields carry over.
            futures = [
                executor.submit(contextvars.copy_context().run, self._fetch_one, adapter)
                for adapter in self.adapters
            ]
            for future in as_completed(futures):
                yield future.result()

    def fetch_all(self) -> FetchResult:
        """Fetch every source and merge; the job list is the union of successful sources."""
        return FetchResult(results=list(self.iter_results()))

    def close(self) -> None:
        for adapter in self.adapters:
            adapter.close()

    def _fetch_one(self, adapter: BaseAdapter) -> SourceResult:
        started = time.monotonic()
        source_id = adapter.source_id

        try:
            jobs = adapter.fetch()
        except AdapterError as e:
            duration = time.monotonic() - started
            logger.warning(
                f"Source {source_id} failed: {e}",
                extra={
                    "event": "source.fetch.failed",
                    "source": source_id,
                    "error_type": type(e).__name__,
                    "error": str(e),
                    "duration_ms": int(duration * 1000),
                },
            )
            return SourceResult(
                source_id=source_id,
                error=str(e),
                error_type=type(e).__name__,
                duration_seconds=duration,
            )
        except Exception as e:
            # Adapter bug: still isolated to this source, but logged with traceback.
            duration = time.monotonic() - started
            logger.error(
                f"Unexpected error fetching {source_id}: {e}",
                exc_info=True,
                extra={
                    "event": "source.fetch.failed",
                    "source": source_id,
                    "error_type": type(e).__name__,
                    "error": str(e),
                    "duration_ms": int(duration * 1000),
                },
            )
            return SourceResult(
                source_id=source_id,
                error=str(e) or type(e).__name__,
                error_type=type(e).__name__,
                duration_seconds=duration,
            )

        duration = time.monotonic() - started
        logger.info(
            f"Fetched {len(jobs)} jobs from {source_id}",
            extra={
                "event": "source.fetch.succeeded",
                "source": source_id,
                "count": len(jobs),
                "duration_ms": int(duration * 1000),
            },
        )
        return SourceResult(source_id=source_id, jobs=jobs, duration_seconds=duration)

