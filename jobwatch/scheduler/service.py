"""Scheduler service for periodic cycle execution."""

import threading
from datetime import datetime, timezone
from typing import Optional

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger

from jobwatch.logging import get_logger
from jobwatch.pipeline.models import CycleResult
from jobwatch.pipeline.runner import JobPipeline

logger = get_logger(__name__, component="scheduler")

JOB_ID = "jobwatch-cycle"


class SchedulerService:
    """
    Triggers ``JobPipeline.run_cycle`` at the configured interval.

    Uses BackgroundScheduler so the main thread stays free for signal
    handling. APScheduler's ``max_instances=1`` and the pipeline's own lock
    both guarantee that cycles never overlap.
    """

    def __init__(
        self,
        pipeline: JobPipeline,
        interval_seconds: int,
        shutdown_event: Optional[threading.Event] = None,
    ):
        self.pipeline = pipeline
        self.interval_seconds = interval_seconds
        self.shutdown_event = shutdown_event
        self.last_result: Optional[CycleResult] = None

        self.scheduler = BackgroundScheduler(
            job_defaults={
                "max_instances": 1,
                "coalesce": True,
                "misfire_grace_time": interval_seconds,
            },
            timezone=timezone.utc,
        )

    def _run_scheduled(self) -> None:
        # APScheduler only logs job exceptions; keep the timer alive and visible.
        try:
            self.last_result = self.pipeline.run_cycle()
        except Exception:
            logger.exception(
                "Scheduled cycle raised unexpectedly",
                extra={"event": "scheduler.job_failed"},
            )

    def start(self) -> None:
        """Register the cycle job and start; the first run is immediate."""
        trigger = IntervalTrigger(seconds=self.interval_seconds, timezone=timezone.utc)

        next_run = datetime.now(timezone.utc)
        self.scheduler.add_job(
            func=self._run_scheduled,
            trigger=trigger,
            id=JOB_ID,
            name="jobwatch cycle",
            replace_existing=True,
            next_run_time=next_run,
        )
        self.scheduler.start()

        logger.info(
            f"Scheduler started with interval: {self.interval_seconds} seconds",
            extra={
                "event": "scheduler.started",
                "interval_seconds": self.interval_seconds,
                "next_run_time": next_run.isoformat(),
            },
        )

    def shutdown(self, wait: bool = False) -> None:
        """
        Stop the scheduler.

        Args:
            wait: If True, wait for a running cycle to complete before returning
        """
        logger.info(
            "Shutting down scheduler",
            extra={"event": "scheduler.stopping", "wait_for_jobs": wait},
        )

        if self.scheduler.running:
            self.scheduler.shutdown(wait=wait)

        if self.shutdown_event:
            self.shutdown_event.set()

        logger.info("Scheduler shutdown complete", extra={"event": "scheduler.stopped"})

    def trigger_now(self) -> CycleResult:
        """
        Run a cycle synchronously in the calling thread.

        If a scheduled cycle is in flight the pipeline skips this one and the
        returned stats have ``skipped`` set.
        """
        logger.info("Triggering immediate cycle", extra={"event": "scheduler.trigger_now"})
        self.last_result = self.pipeline.run_cycle()
        return self.last_result

    def is_running(self) -> bool:
        return self.scheduler.running

    def get_next_run_time(self) -> Optional[datetime]:
        job = self.scheduler.get_job(JOB_ID)
        return job.next_run_time if job else None
