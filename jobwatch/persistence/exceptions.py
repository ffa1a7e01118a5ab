"""Persistence layer exceptions.

All persistence exceptions inherit from PersistenceError so the pipeline can
isolate a failed write with a single except clause.
"""


class PersistenceError(Exception):
    """Base exception for all persistence layer errors."""

    pass


class DatabaseConnectionError(PersistenceError):
    """Raised when database connection, initialization or a health check fails.

    At startup this is fatal; during a cycle it is isolated to the job being
    written.
    """

    pass


class DataIntegrityError(PersistenceError):
    """Raised when a write violates a database constraint."""

    pass
