"""Unit tests for the scheduler service.

Tests the SchedulerService including:
- Job registration with correct configuration
- Immediate first run (next_run_time set to now)
- Start/shutdown lifecycle
- Trigger now functionality
- A raising cycle does not stop the schedule
"""

import threading
import time
from datetime import datetime
from unittest.mock import Mock

from jobwatch.pipeline.models import CycleResult, CycleStats
from jobwatch.scheduler import SchedulerService
from jobwatch.scheduler.service import JOB_ID
from jobwatch.utils.timestamps import utc_now


def make_result(success=True):
    return CycleResult(success=success, stats=CycleStats(cycle_id="abc", timestamp=utc_now()))


def mock_pipeline(side_effect=None):
    pipeline = Mock()
    if side_effect is None:
        pipeline.run_cycle.return_value = make_result()
    else:
        pipeline.run_cycle.side_effect = side_effect
    return pipeline


class TestSchedulerService:
    """Test suite for SchedulerService."""

    def test_scheduler_initialization(self):
        pipeline = mock_pipeline()
        shutdown_event = threading.Event()

        scheduler = SchedulerService(
            pipeline=pipeline,
            interval_seconds=60,
            shutdown_event=shutdown_event,
        )

        assert scheduler.interval_seconds == 60
        assert scheduler.pipeline is pipeline
        assert scheduler.shutdown_event is shutdown_event
        assert scheduler.last_result is None
        assert not scheduler.is_running()

    def test_job_defaults_prevent_overlap(self):
        scheduler = SchedulerService(pipeline=mock_pipeline(), interval_seconds=60)

        assert scheduler.scheduler._job_defaults["max_instances"] == 1
        assert scheduler.scheduler._job_defaults["coalesce"] is True
        assert scheduler.scheduler._job_defaults["misfire_grace_time"] == 60

    def test_start_and_shutdown(self):
        shutdown_event = threading.Event()
        scheduler = SchedulerService(
            pipeline=mock_pipeline(), interval_seconds=300, shutdown_event=shutdown_event
        )

        scheduler.start()
        assert scheduler.is_running()

        scheduler.shutdown(wait=False)
        assert not scheduler.is_running()
        assert shutdown_event.is_set()

    def test_shutdown_without_event(self):
        scheduler = SchedulerService(pipeline=mock_pipeline(), interval_seconds=60)

        scheduler.start()
        scheduler.shutdown(wait=False)

        assert not scheduler.is_running()

    def test_shutdown_before_start_is_safe(self):
        shutdown_event = threading.Event()
        scheduler = SchedulerService(
            pipeline=mock_pipeline(), interval_seconds=60, shutdown_event=shutdown_event
        )

        scheduler.shutdown()

        assert shutdown_event.is_set()

    def test_first_run_is_immediate(self):
        ran = threading.Event()
        pipeline = mock_pipeline(side_effect=lambda: ran.set() or make_result())
        scheduler = SchedulerService(pipeline=pipeline, interval_seconds=3600)

        scheduler.start()
        try:
            assert ran.wait(timeout=5)
        finally:
            scheduler.shutdown(wait=True)

        assert scheduler.last_result is not None
        assert scheduler.last_result.success is True

    def test_get_next_run_time(self):
        scheduler = SchedulerService(pipeline=mock_pipeline(), interval_seconds=3600)

        assert scheduler.get_next_run_time() is None

        scheduler.start()
        try:
            assert scheduler.scheduler.get_job(JOB_ID) is not None
            assert isinstance(scheduler.get_next_run_time(), datetime)
        finally:
            scheduler.shutdown(wait=False)

    def test_trigger_now_runs_synchronously(self):
        pipeline = mock_pipeline()
        scheduler = SchedulerService(pipeline=pipeline, interval_seconds=3600)

        result = scheduler.trigger_now()

        pipeline.run_cycle.assert_called_once_with()
        assert result is pipeline.run_cycle.return_value
        assert scheduler.last_result is result

    def test_raising_cycle_is_logged_not_propagated(self):
        pipeline = mock_pipeline(side_effect=RuntimeError("boom"))
        scheduler = SchedulerService(pipeline=pipeline, interval_seconds=60)

        scheduler._run_scheduled()

        assert scheduler.last_result is None
        pipeline.run_cycle.assert_called_once()

    def test_schedule_survives_a_raising_cycle(self):
        calls = []

        def flaky():
            calls.append(time.monotonic())
            if len(calls) == 1:
                raise RuntimeError("Intentional error")
            return make_result()

        scheduler = SchedulerService(pipeline=mock_pipeline(side_effect=flaky), interval_seconds=1)

        scheduler.start()
        time.sleep(2.5)
        scheduler.shutdown(wait=True)

        assert len(calls) >= 2
        assert scheduler.last_result is not None
