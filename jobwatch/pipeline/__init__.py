"""Cycle orchestration: concurrent fetch, dedup, match, persist and fan-out."""

from .fetcher import FetchCoordinator
from .models import CycleResult, CycleStats, FetchResult, SourceResult
from .observers import PipelineObserver, RecentStatsObserver
from .runner import JobPipeline, build_pipeline

__all__ = [
    "JobPipeline",
    "build_pipeline",
    "FetchCoordinator",
    "CycleResult",
    "CycleStats",
    "FetchResult",
    "SourceResult",
    "PipelineObserver",
    "RecentStatsObserver",
]
