"""Unit tests for job fingerprinting."""

import pytest

from jobwatch.dedup import compute_fingerprint, fingerprint_job
from tests.helpers import make_job

BASE = ("greenhouse:acme", "greenhouse:acme:1", "https://x/1", "Backend Engineer", "Acme")


class TestComputeFingerprint:
    """Tests for compute_fingerprint."""

    def test_fixed_length_hex(self):
        fingerprint = compute_fingerprint(*BASE)

        assert len(fingerprint) == 64
        assert all(c in "0123456789abcdef" for c in fingerprint)

    def test_deterministic(self):
        """Same five identity fields always give the same digest."""
        assert compute_fingerprint(*BASE) == compute_fingerprint(*BASE)

    @pytest.mark.parametrize("index", range(5))
    def test_each_identity_field_changes_fingerprint(self, index):
        changed = list(BASE)
        changed[index] = changed[index] + "-changed"

        assert compute_fingerprint(*changed) != compute_fingerprint(*BASE)

    def test_case_is_significant(self):
        changed = list(BASE)
        changed[3] = changed[3].upper()

        assert compute_fingerprint(*changed) != compute_fingerprint(*BASE)

    def test_none_treated_as_empty(self):
        assert compute_fingerprint("s", "1", None, None, None) == compute_fingerprint(
            "s", "1", "", "", ""
        )

    def test_field_separator_prevents_shifting(self):
        """Moving text between adjacent fields yields a different digest."""
        assert compute_fingerprint("a", "bc", "", "", "") != compute_fingerprint(
            "ab", "c", "", "", ""
        )

    @pytest.mark.parametrize(
        "left,right",
        [
            (("s", "1", "u", "Dev|Acme", ""), ("s", "1", "u", "Dev", "Acme")),
            (("s", "1", "u", "Dev", "|Acme"), ("s", "1", "u", "Dev|", "Acme")),
            (("s|1", "", "u", "Dev", "Acme"), ("s", "1", "u", "Dev", "Acme")),
        ],
    )
    def test_pipe_inside_field_is_not_a_boundary(self, left, right):
        """A literal '|' in a title or company cannot collide with the next field."""
        assert compute_fingerprint(*left) != compute_fingerprint(*right)


class TestFingerprintJob:
    """Fingerprints of Job records."""

    def test_matches_compute_fingerprint(self):
        job = make_job()

        assert fingerprint_job(job) == compute_fingerprint(
            job.source, job.id, job.url, job.title, job.company
        )
        assert job.fingerprint == fingerprint_job(job)

    def test_ignores_description_location_and_dates(self):
        first = make_job(description="foo", location="Remote", contract_type="W2")
        second = make_job(
            description="completely different",
            location="Berlin",
            contract_type=None,
            posted_at="2025-01-01T00:00:00Z",
        )

        assert first.fingerprint == second.fingerprint

    def test_title_drift_is_a_new_posting(self):
        assert make_job(title="Engineer").fingerprint != make_job(title="Senior Engineer").fingerprint
