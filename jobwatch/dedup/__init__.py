"""Cross-cycle deduplication by job fingerprint."""

from jobwatch.utils.hashing import compute_fingerprint, fingerprint_job

from .ledger import DatabaseLedger, Ledger, MemoryLedger, build_ledger

__all__ = [
    "Ledger",
    "MemoryLedger",
    "DatabaseLedger",
    "build_ledger",
    "compute_fingerprint",
    "fingerprint_job",
]
