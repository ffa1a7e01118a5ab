"""UTC timestamp helpers.

Every datetime that crosses a module boundary in jobwatch is timezone-aware
UTC; these helpers are the single place that guarantees it.
"""

from datetime import datetime, timezone
from typing import Any, Optional, Union


def utc_now() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def ensure_utc(dt: Optional[datetime]) -> Optional[datetime]:
    """Return ``dt`` as aware UTC; naive values are assumed to already be UTC."""
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def parse_iso_datetime(value: Any) -> Optional[datetime]:
    """Parse an ISO 8601 string (``Z`` suffix allowed) to aware UTC.

    Returns None for empty, non-string or unparseable input rather than
    raising; sources routinely send odd dates (epoch numbers included) and a
    bad ``postedAt`` must not drop the job.

    Example:
        >>> parse_iso_datetime("2025-11-04T12:00:00Z").isoformat()
        '2025-11-04T12:00:00+00:00'
    """
    if not isinstance(value, str) or not value.strip():
        return None

    cleaned = value.strip()
    if cleaned.endswith("Z"):
        cleaned = cleaned[:-1] + "+00:00"

    try:
        return ensure_utc(datetime.fromisoformat(cleaned))
    except ValueError:
        pass

    for fmt in ("%Y-%m-%d %H:%M:%S", "%Y-%m-%d"):
        try:
            return ensure_utc(datetime.strptime(value.strip(), fmt))
        except ValueError:
            continue
    return None


def from_unix_millis(value: Union[int, float, None]) -> Optional[datetime]:
    """Convert epoch milliseconds (Lever style) to aware UTC, None on bad input."""
    if not value:
        return None
    try:
        return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
    except (TypeError, ValueError, OverflowError, OSError):
        return None


def to_epoch_millis(dt: datetime) -> int:
    """Milliseconds since the epoch, the ``ts`` unit of realtime payloads."""
    return int(ensure_utc(dt).timestamp() * 1000)
