"""Data access layer (repositories) for persistence operations.

Repositories wrap a caller-owned session and return domain models rather than
ORM rows. They translate SQLAlchemy errors into PersistenceError subclasses
but never commit; transaction boundaries belong to ``get_session``.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import delete, func, select, update
from sqlalchemy.dialects.postgresql import insert as postgresql_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from jobwatch.domain.models import Job
from jobwatch.logging import get_logger
from jobwatch.utils.timestamps import utc_now

from .exceptions import DataIntegrityError, PersistenceError
from .schema import JobModel, SeenFingerprintModel, format_timestamp

logger = get_logger(__name__, component="database")

# Dialects with native INSERT ... ON CONFLICT support.
_DIALECT_INSERTS = {
    "sqlite": sqlite_insert,
    "postgresql": postgresql_insert,
}


class JobRepository:
    """Repository for the ``job`` table."""

    def __init__(self, session: Session):
        self.session = session

    def get_by_id(self, job_id: str) -> Optional[Job]:
        """Retrieve a job by id, or None.

        Raises:
            PersistenceError: If database error occurs
        """
        try:
            stmt = (
                select(JobModel)
                .where(JobModel.id == job_id)
                .execution_options(populate_existing=True)
            )
            job_model = self.session.execute(stmt).scalar_one_or_none()
            return job_model.to_domain() if job_model else None
        except SQLAlchemyError as e:
            logger.error(f"Error retrieving job {job_id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to retrieve job: {e}") from e

    def list_recent(self, limit: int = 50) -> List[Job]:
        """Most recently fetched jobs first.

        Raises:
            PersistenceError: If database error occurs
        """
        try:
            stmt = select(JobModel).order_by(JobModel.fetched_at.desc()).limit(limit)
            return [row.to_domain() for row in self.session.execute(stmt).scalars().all()]
        except SQLAlchemyError as e:
            logger.error(f"Error listing recent jobs: {e}", exc_info=True)
            raise PersistenceError(f"Failed to list jobs: {e}") from e

    def count(self) -> int:
        try:
            return self.session.execute(select(func.count()).select_from(JobModel)).scalar_one()
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to count jobs: {e}") from e

    def upsert(self, job: Job, fetched_at: Optional[datetime] = None) -> Job:
        """Insert a job or merge it into the existing row with the same id.

        Merge policy on conflict:
        - title, company, location, url: always take the incoming value
        - contract_type, posted_at: incoming value unless it is NULL
        - description: incoming value unless it is empty
        - fetched_at: always refreshed

        Re-ingesting a sparser copy of a posting therefore never loses data
        captured earlier.

        Returns:
            The stored Job after the merge

        Raises:
            DataIntegrityError: On constraint violation
            PersistenceError: If database error occurs
        """
        values = JobModel.values_from_domain(job, fetched_at or utc_now())

        try:
            dialect = self.session.get_bind().dialect.name
            insert_factory = _DIALECT_INSERTS.get(dialect)
            if insert_factory is not None:
                self.session.execute(self._native_upsert(insert_factory, values))
            else:
                self._merge_upsert(values)
            self.session.flush()
        except IntegrityError as e:
            logger.error(f"Integrity error upserting job {job.id}: {e}", exc_info=True)
            raise DataIntegrityError(f"Failed to upsert job {job.id}: {e}") from e
        except SQLAlchemyError as e:
            logger.error(f"Error upserting job {job.id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to upsert job {job.id}: {e}") from e

        stored = self.get_by_id(job.id)
        if stored is None:
            raise PersistenceError(f"Job {job.id} missing after upsert")
        return stored

    @staticmethod
    def _native_upsert(insert_factory, values: Dict[str, Any]):
        stmt = insert_factory(JobModel).values(**values)
        excluded = stmt.excluded
        return stmt.on_conflict_do_update(
            index_elements=[JobModel.id],
            set_={
                "title": excluded.title,
                "company": excluded.company,
                "location": excluded.location,
                "url": excluded.url,
                "contract_type": func.coalesce(excluded.contract_type, JobModel.contract_type),
                "posted_at": func.coalesce(excluded.posted_at, JobModel.posted_at),
                "description": func.coalesce(
                    func.nullif(excluded.description, ""), JobModel.description
                ),
                "fetched_at": excluded.fetched_at,
            },
        )

    def _merge_upsert(self, values: Dict[str, Any]) -> None:
        """Same policy as the native statement, for dialects without ON CONFLICT."""
        existing = self.session.get(JobModel, values["id"])
        if existing is None:
            self.session.add(JobModel(**values))
            return

        existing.title = values["title"]
        existing.company = values["company"]
        existing.location = values["location"]
        existing.url = values["url"]
        if values["contract_type"] is not None:
            existing.contract_type = values["contract_type"]
        if values["posted_at"] is not None:
            existing.posted_at = values["posted_at"]
        if values["description"]:
            existing.description = values["description"]
        existing.fetched_at = values["fetched_at"]


class FingerprintRepository:
    """Repository for the ``seen_fingerprint`` table."""

    def __init__(self, session: Session):
        self.session = session

    def exists(self, fingerprint: str) -> bool:
        try:
            stmt = select(SeenFingerprintModel.fingerprint).where(
                SeenFingerprintModel.fingerprint == fingerprint
            )
            return self.session.execute(stmt).first() is not None
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to look up fingerprint: {e}") from e

    def add(self, fingerprint: str, job_id: str, seen_at: Optional[datetime] = None) -> bool:
        """Record a sighting of ``fingerprint``; returns False if it was already present.

        A repeat sighting refreshes ``last_seen_at`` so retention counts from the
        most recent time the posting was observed, not the first.

        Raises:
            PersistenceError: If database error occurs
        """
        seen_at_str = format_timestamp(seen_at or utc_now())
        values = {
            "fingerprint": fingerprint,
            "job_id": job_id,
            "last_seen_at": seen_at_str,
        }

        try:
            insert_factory = _DIALECT_INSERTS.get(self.session.get_bind().dialect.name)
            if insert_factory is not None:
                stmt = insert_factory(SeenFingerprintModel).values(**values)
                stmt = stmt.on_conflict_do_nothing(index_elements=[SeenFingerprintModel.fingerprint])
                if self.session.execute(stmt).rowcount == 1:
                    return True
                self.session.execute(
                    update(SeenFingerprintModel)
                    .where(SeenFingerprintModel.fingerprint == fingerprint)
                    .values(last_seen_at=seen_at_str)
                )
                return False

            existing = self.session.get(SeenFingerprintModel, fingerprint)
            if existing is not None:
                existing.last_seen_at = seen_at_str
                self.session.flush()
                return False
            self.session.add(SeenFingerprintModel(**values))
            self.session.flush()
            return True
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to record fingerprint: {e}") from e

    def last_seen(self, fingerprint: str) -> Optional[str]:
        """Return the stored ``last_seen_at`` for ``fingerprint``, or None."""
        try:
            stmt = select(SeenFingerprintModel.last_seen_at).where(
                SeenFingerprintModel.fingerprint == fingerprint
            )
            return self.session.execute(stmt).scalar_one_or_none()
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to look up fingerprint: {e}") from e

    def count(self) -> int:
        try:
            return self.session.execute(
                select(func.count()).select_from(SeenFingerprintModel)
            ).scalar_one()
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to count fingerprints: {e}") from e

    def delete_older_than(self, cutoff: datetime) -> int:
        """Remove fingerprints not sighted since ``cutoff``; returns rows deleted."""
        try:
            stmt = delete(SeenFingerprintModel).where(
                SeenFingerprintModel.last_seen_at < format_timestamp(cutoff)
            )
            return self.session.execute(stmt).rowcount or 0
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to prune fingerprints: {e}") from e
