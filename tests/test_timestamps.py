"""Unit tests for timestamp utilities."""

from datetime import datetime, timedelta, timezone

import pytest

from jobwatch.utils.timestamps import (
    ensure_utc,
    from_unix_millis,
    parse_iso_datetime,
    to_epoch_millis,
    utc_now,
)


class TestUtcNow:
    def test_returns_aware_utc(self):
        now = utc_now()

        assert now.tzinfo == timezone.utc

    def test_is_recent(self):
        before = datetime.now(timezone.utc)
        now = utc_now()
        after = datetime.now(timezone.utc)

        assert before <= now <= after


class TestEnsureUtc:
    def test_none(self):
        assert ensure_utc(None) is None

    def test_naive_assumed_utc(self):
        assert ensure_utc(datetime(2025, 1, 1, 12)) == datetime(2025, 1, 1, 12, tzinfo=timezone.utc)

    def test_other_zone_converted(self):
        plus_two = timezone(timedelta(hours=2))
        result = ensure_utc(datetime(2025, 1, 1, 14, tzinfo=plus_two))

        assert result.tzinfo == timezone.utc
        assert result.hour == 12


class TestParseIsoDatetime:
    @pytest.mark.parametrize(
        "value,expected",
        [
            ("2025-11-04T12:00:00Z", datetime(2025, 11, 4, 12, tzinfo=timezone.utc)),
            ("2025-11-04T14:00:00+02:00", datetime(2025, 11, 4, 12, tzinfo=timezone.utc)),
            ("2025-11-04T12:00:00", datetime(2025, 11, 4, 12, tzinfo=timezone.utc)),
            ("2025-11-04", datetime(2025, 11, 4, tzinfo=timezone.utc)),
        ],
    )
    def test_parses(self, value, expected):
        assert parse_iso_datetime(value) == expected

    @pytest.mark.parametrize(
        "value", [None, "", "   ", "yesterday", "2025-13-45", 1700000000, 17.5, {"at": "x"}]
    )
    def test_bad_input_returns_none(self, value):
        """A bad postedAt must never drop the job, so parsing does not raise."""
        assert parse_iso_datetime(value) is None


class TestEpochMillis:
    def test_from_unix_millis(self):
        assert from_unix_millis(1730462400000) == datetime(2024, 11, 1, 12, tzinfo=timezone.utc)

    @pytest.mark.parametrize("value", [None, 0, "abc"])
    def test_from_unix_millis_bad_input(self, value):
        assert from_unix_millis(value) is None

    def test_to_epoch_millis(self):
        assert to_epoch_millis(datetime(2024, 11, 1, 12, tzinfo=timezone.utc)) == 1730462400000

    def test_to_epoch_millis_naive(self):
        assert to_epoch_millis(datetime(1970, 1, 1, 0, 0, 1)) == 1000
