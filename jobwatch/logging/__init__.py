"""Structured logging helpers shared by every jobwatch component."""

import logging
from typing import Optional, Union


class ComponentLoggerAdapter(logging.LoggerAdapter):
    """LoggerAdapter that tags every record with a component name.

    Fields passed through ``extra`` on the individual call win over the
    adapter defaults, so a call can still override ``component``.
    """

    def process(self, msg, kwargs):
        kwargs["extra"] = {**self.extra, **kwargs.get("extra", {})}
        return msg, kwargs


def get_logger(
    name: str, component: Optional[str] = None
) -> Union[logging.Logger, ComponentLoggerAdapter]:
    """Return a module logger, optionally tagged with ``component``.

    Example:
        >>> logger = get_logger(__name__, component="ledger")
        >>> logger.info("Fingerprint recorded", extra={"event": "ledger.recorded"})
    """
    logger = logging.getLogger(name)
    if component:
        return ComponentLoggerAdapter(logger, {"component": component})
    return logger


__all__ = ["ComponentLoggerAdapter", "get_logger"]
