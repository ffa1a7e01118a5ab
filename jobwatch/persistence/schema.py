"""Database schema definition and ORM models.

Tables:
- job: one row per matched posting, keyed by the source-qualified job id
- seen_fingerprint: the durable dedup ledger

Timestamps are stored as fixed-width ISO 8601 UTC strings, which keeps them
portable across SQLite and PostgreSQL and lexicographically ordered.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional

from sqlalchemy import Column, Index, String, Text, inspect
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base

from jobwatch.domain.models import Job
from jobwatch.logging import get_logger

logger = get_logger(__name__, component="database")

Base = declarative_base()


class JobModel(Base):
    """ORM model for the ``job`` table."""

    __tablename__ = "job"

    id = Column(String(512), primary_key=True, nullable=False)
    source = Column(String(255), nullable=False)
    title = Column(Text, nullable=False, default="")
    company = Column(String(255), nullable=False, default="")
    location = Column(String(255), nullable=False, default="")
    contract_type = Column(String(100), nullable=True)
    url = Column(Text, nullable=False, default="")
    posted_at = Column(String(50), nullable=True)
    description = Column(Text, nullable=False, default="")
    fetched_at = Column(String(50), nullable=False)

    def to_domain(self) -> Job:
        return Job(
            id=self.id,
            source=self.source,
            title=self.title,
            company=self.company,
            location=self.location,
            description=self.description,
            url=self.url,
            contract_type=self.contract_type,
            posted_at=parse_timestamp(self.posted_at),
        )

    @staticmethod
    def values_from_domain(job: Job, fetched_at: datetime) -> Dict[str, Any]:
        """Column values for inserting ``job`` as fetched at ``fetched_at``."""
        return {
            "id": job.id,
            "source": job.source,
            "title": job.title,
            "company": job.company,
            "location": job.location,
            "contract_type": job.contract_type,
            "url": job.url,
            "posted_at": format_timestamp(job.posted_at),
            "description": job.description,
            "fetched_at": format_timestamp(fetched_at),
        }


# Recency index for "latest jobs first" reads.
Index("idx_job_fetched_at", JobModel.fetched_at.desc())


class SeenFingerprintModel(Base):
    """ORM model for the ``seen_fingerprint`` table (durable dedup ledger)."""

    __tablename__ = "seen_fingerprint"

    fingerprint = Column(String(64), primary_key=True, nullable=False)
    job_id = Column(String(512), nullable=False)
    last_seen_at = Column(String(50), nullable=False)

    __table_args__ = (Index("idx_seen_fingerprint_last_seen", "last_seen_at"),)


def format_timestamp(dt: Optional[datetime]) -> Optional[str]:
    """Format datetime as ``YYYY-MM-DDTHH:MM:SS.ffffffZ`` (naive values taken as UTC)."""
    if dt is None:
        return None

    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    else:
        dt = dt.astimezone(timezone.utc)

    return dt.strftime("%Y-%m-%dT%H:%M:%S.%fZ")


def parse_timestamp(dt_str: Optional[str]) -> Optional[datetime]:
    """Parse a stored timestamp back to an aware UTC datetime."""
    if not dt_str:
        return None

    dt_str = dt_str.rstrip("Z")
    try:
        dt = datetime.strptime(dt_str, "%Y-%m-%dT%H:%M:%S.%f")
    except ValueError:
        dt = datetime.strptime(dt_str, "%Y-%m-%dT%H:%M:%S")

    return dt.replace(tzinfo=timezone.utc)


def create_schema(engine: Engine) -> None:
    """Create all tables and indexes if they don't exist (idempotent)."""
    Base.metadata.create_all(engine, checkfirst=True)

    tables = inspect(engine).get_table_names()
    logger.info(
        f"Database schema ready. Tables: {', '.join(sorted(tables))}",
        extra={"event": "database.schema.ready"},
    )
