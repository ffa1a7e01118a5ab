"""Deterministic job fingerprints for cross-cycle deduplication."""

import hashlib
import json

FINGERPRINT_FIELDS = ("source", "id", "url", "title", "company")
FINGERPRINT_LENGTH = 64


def compute_fingerprint(source: str, job_id: str, url: str, title: str, company: str) -> str:
    """Return the SHA-256 hex digest of the five identity fields.

    The fields are hashed as a JSON array in ``FINGERPRINT_FIELDS`` order, so
    a ``|`` or any other character inside one field can never shift text into
    its neighbour. The digest is a pure function of these fields: description,
    location, contract type and posting date drift never change it. Values are
    used verbatim (no case folding) so two postings that differ only in case
    stay distinct.

    Example:
        >>> len(compute_fingerprint("greenhouse:acme", "42", "https://x", "Dev", "Acme"))
        64
    """
    parts = [source or "", job_id or "", url or "", title or "", company or ""]
    composite = json.dumps(parts, ensure_ascii=False, separators=(",", ":"))
    return hashlib.sha256(composite.encode("utf-8")).hexdigest()


def fingerprint_job(job) -> str:
    """Fingerprint any object exposing the five identity attributes."""
    return compute_fingerprint(job.source, job.id, job.url, job.title, job.company)
