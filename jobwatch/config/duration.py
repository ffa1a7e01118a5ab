"""Poll-interval parsing.

Accepts ISO-8601 durations (``PT15M``, ``P1D``), unit strings (``15m``,
``1h30m``, ``90s``) and bare integers meaning seconds (``"300"``), which is
how the interval was historically given in environment variables.
"""

import re

MIN_POLL_SECONDS = 60
MAX_POLL_SECONDS = 86400

_ISO_PATTERN = re.compile(
    r"^P(?:(?P<days>\d+)D)?(?:T(?:(?P<hours>\d+)H)?(?:(?P<minutes>\d+)M)?(?:(?P<seconds>\d+(?:\.\d+)?)S)?)?$"
)
_UNIT_PATTERN = re.compile(r"(\d+)([smhd])")
_UNIT_SECONDS = {"s": 1, "m": 60, "h": 3600, "d": 86400}


class DurationParseError(ValueError):
    """Raised when a duration string cannot be parsed or is out of range."""


def parse_duration(value: str) -> int:
    """Parse ``value`` to a whole number of seconds.

    Raises:
        DurationParseError: On empty, malformed or zero durations

    Examples:
        >>> parse_duration("PT15M")
        900
        >>> parse_duration("1h30m")
        5400
        >>> parse_duration("300")
        300
    """
    text = str(value).strip()
    if not text:
        raise DurationParseError("Duration string cannot be empty")

    if text.isdigit():
        seconds = int(text)
    elif text.upper().startswith("P"):
        seconds = _parse_iso(text.upper())
    else:
        seconds = _parse_units(text.lower())

    if seconds <= 0:
        raise DurationParseError(f"Duration cannot be zero: '{value}'")
    return seconds


def _parse_iso(text: str) -> int:
    match = _ISO_PATTERN.match(text)
    if not match or text in ("P", "PT"):
        raise DurationParseError(
            f"Invalid ISO-8601 duration: '{text}'. Expected e.g. 'PT15M', 'PT1H30M' or 'P1D'"
        )
    parts = match.groupdict()
    return (
        int(parts["days"] or 0) * 86400
        + int(parts["hours"] or 0) * 3600
        + int(parts["minutes"] or 0) * 60
        + int(float(parts["seconds"] or 0))
    )


def _parse_units(text: str) -> int:
    compact = re.sub(r"\s+", "", text)
    pieces = _UNIT_PATTERN.findall(compact)
    if not pieces or "".join(n + u for n, u in pieces) != compact:
        raise DurationParseError(
            f"Invalid duration: '{text}'. Use digits with s/m/h/d units, e.g. '15m' or '1h30m'"
        )
    return sum(int(n) * _UNIT_SECONDS[u] for n, u in pieces)


def validate_duration_range(
    seconds: int,
    min_seconds: int = MIN_POLL_SECONDS,
    max_seconds: int = MAX_POLL_SECONDS,
) -> None:
    """Raise DurationParseError unless ``min_seconds <= seconds <= max_seconds``."""
    if seconds < min_seconds:
        raise DurationParseError(
            f"Poll interval too short: {humanize_seconds(seconds)}. "
            f"Minimum is {humanize_seconds(min_seconds)}."
        )
    if seconds > max_seconds:
        raise DurationParseError(
            f"Poll interval too long: {humanize_seconds(seconds)}. "
            f"Maximum is {humanize_seconds(max_seconds)}."
        )


def humanize_seconds(seconds: int) -> str:
    """``90`` -> ``'1 minute'``, ``7200`` -> ``'2 hours'`` (largest whole unit)."""
    for unit, size in (("day", 86400), ("hour", 3600), ("minute", 60)):
        if seconds >= size:
            count = seconds // size
            return f"{count} {unit}{'s' if count != 1 else ''}"
    return f"{seconds} second{'s' if seconds != 1 else ''}"
