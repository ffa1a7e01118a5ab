"""Periodic execution of the ingestion cycle."""

from .service import SchedulerService

__all__ = [
    "SchedulerService",
]
