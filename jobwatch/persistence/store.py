"""Storage collaborator used by the pipeline."""

from typing import List, Optional

from jobwatch.domain.models import Job
from jobwatch.logging import get_logger

from .database import check_connection, get_session
from .repositories import JobRepository

logger = get_logger(__name__, component="storage")


class JobStore:
    """
    Idempotent job storage with one transaction per write.

    Each ``upsert`` opens its own session so a failed write rolls back only
    that job and never poisons the rest of the cycle.
    """

    def upsert(self, job: Job) -> Job:
        """Insert or merge ``job``.

        Raises:
            PersistenceError: If the write fails (the caller isolates it)
        """
        with get_session() as session:
            stored = JobRepository(session).upsert(job)

        logger.debug(
            "Job upserted",
            extra={"event": "storage.upsert.succeeded", "job_id": job.id, "source": job.source},
        )
        return stored

    def get_by_id(self, job_id: str) -> Optional[Job]:
        with get_session() as session:
            return JobRepository(session).get_by_id(job_id)

    def list_recent(self, limit: int = 50) -> List[Job]:
        with get_session() as session:
            return JobRepository(session).list_recent(limit)

    def health_check(self) -> bool:
        """``SELECT 1`` against the store.

        Raises:
            DatabaseConnectionError: If the database is unreachable or not initialized
        """
        check_connection()
        return True

