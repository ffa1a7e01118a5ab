"""Non-fatal configuration checks surfaced as warnings."""

import warnings
from typing import Any, Dict, List

from .duration import DurationParseError, parse_duration


def check_for_warnings(config_dict: Dict[str, Any]) -> List[str]:
    """
    Check configuration for potential issues and return warnings.

    Args:
        config_dict: Raw configuration dictionary

    Returns:
        List of warning messages
    """
    warning_messages = []

    sources = config_dict.get("sources") or []
    for source in sources:
        if isinstance(source, dict) and not source.get("enabled", True):
            name = source.get("name", "Unknown")
            warning_messages.append(f"Source '{name}' is disabled and will be skipped")

    poll_interval = config_dict.get("poll_interval", "15m")
    try:
        if parse_duration(str(poll_interval)) < 300:
            warning_messages.append(
                f"Short poll_interval ({poll_interval}) may trigger API rate limits"
            )
    except DurationParseError:
        # Reported as a validation error by the model.
        pass

    advanced = config_dict.get("advanced") or {}
    if isinstance(advanced, dict):
        max_jobs = advanced.get("max_jobs_per_source", 1000)
        if isinstance(max_jobs, int) and max_jobs > 5000:
            warning_messages.append(
                f"Large max_jobs_per_source ({max_jobs}) may cause performance issues"
            )

    match = config_dict.get("match") or {}
    if isinstance(match, dict):
        for key in ("role_keywords", "employment_keywords", "allowed_locations"):
            terms = match.get(key)
            if isinstance(terms, str):
                terms = terms.split(",")
            if not isinstance(terms, list):
                continue
            normalized = [t.strip().lower() for t in terms if isinstance(t, str) and t.strip()]
            duplicates = sorted({t for t in normalized if normalized.count(t) > 1})
            if duplicates:
                warning_messages.append(
                    f"Duplicate terms in {key} will be deduplicated: {', '.join(duplicates)}"
                )

    realtime = config_dict.get("realtime") or {}
    digest = config_dict.get("digest") or {}
    if (
        isinstance(realtime, dict)
        and realtime.get("enabled") is False
        and isinstance(digest, dict)
        and not digest.get("recipients")
    ):
        warning_messages.append(
            "Realtime publishing is disabled and the digest has no recipients: "
            "matches will only be stored"
        )

    return warning_messages


def emit_warnings(warning_messages: List[str]) -> None:
    """Emit each message as a ``UserWarning``."""
    for message in warning_messages:
        warnings.warn(message, UserWarning, stacklevel=2)
