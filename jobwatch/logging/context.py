"""Scoped logging context backed by contextvars.

Fields bound here (``cycle_id``, ``source``, ``job_id`` ...) are copied onto
every log record emitted inside the scope by ``ContextualFilter``.
"""

from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any, Dict, Iterator

_log_context: ContextVar[Dict[str, Any]] = ContextVar("jobwatch_log_context", default={})


def get_log_context() -> Dict[str, Any]:
    """Return a copy of the fields bound in the current context."""
    return dict(_log_context.get())


def clear_log_context() -> None:
    """Drop every bound field. Intended for tests."""
    _log_context.set({})


@contextmanager
def log_context(**fields: Any) -> Iterator[Dict[str, Any]]:
    """Bind ``fields`` for the duration of the ``with`` block.

    Nested scopes merge with (and may shadow) the outer scope; the outer
    fields are restored on exit even when the block raises.

    Example:
        >>> with log_context(cycle_id="c1f2"):
        ...     with log_context(source="greenhouse:acme"):
        ...         logger.info("Fetched")  # carries cycle_id and source
    """
    token = _log_context.set({**_log_context.get(), **fields})
    try:
        yield get_log_context()
    finally:
        _log_context.reset(token)
