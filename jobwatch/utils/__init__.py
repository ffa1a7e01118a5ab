"""Utility helpers: fingerprints, timestamps and text normalisation."""

from .hashing import compute_fingerprint, fingerprint_job
from .text import clean_html, split_csv, split_keywords, truncate_text
from .timestamps import (
    ensure_utc,
    from_unix_millis,
    parse_iso_datetime,
    to_epoch_millis,
    utc_now,
)

__all__ = [
    "compute_fingerprint",
    "fingerprint_job",
    "clean_html",
    "split_csv",
    "split_keywords",
    "truncate_text",
    "ensure_utc",
    "from_unix_millis",
    "parse_iso_datetime",
    "to_epoch_millis",
    "utc_now",
]
