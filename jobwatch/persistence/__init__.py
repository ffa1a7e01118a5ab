"""Persistence layer: engine/session lifecycle, schema, repositories and the job store."""

from .database import (
    check_connection,
    close_database,
    get_engine,
    get_session,
    init_database,
    is_initialized,
    redact_url,
)
from .exceptions import DatabaseConnectionError, DataIntegrityError, PersistenceError
from .repositories import FingerprintRepository, JobRepository
from .schema import Base, JobModel, SeenFingerprintModel, create_schema
from .store import JobStore

__all__ = [
    # Database lifecycle
    "init_database",
    "get_session",
    "get_engine",
    "close_database",
    "check_connection",
    "is_initialized",
    "redact_url",
    # Schema
    "Base",
    "JobModel",
    "SeenFingerprintModel",
    "create_schema",
    # Repositories
    "JobRepository",
    "FingerprintRepository",
    "JobStore",
    # Exceptions
    "PersistenceError",
    "DatabaseConnectionError",
    "DataIntegrityError",
]
