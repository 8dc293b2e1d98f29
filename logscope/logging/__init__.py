"""Loggers used inside logscope: every event carries the emitting component."""

import logging
from typing import Optional, Union


class ComponentLoggerAdapter(logging.LoggerAdapter):
    """Adds ``component`` to each record; per-call ``extra`` wins on conflicts."""

    def __init__(self, logger: logging.Logger, component: str):
        super().__init__(logger, {"component": component})

    @property
    def component(self) -> str:
        return self.extra["component"]

    def process(self, msg, kwargs):
        kwargs["extra"] = {**self.extra, **(kwargs.get("extra") or {})}
        return msg, kwargs


def get_logger(
    name: str, component: Optional[str] = None
) -> Union[logging.Logger, ComponentLoggerAdapter]:
    """Return the named logger, wrapped so it tags records with ``component`` if given.

    Example:
        >>> logger = get_logger(__name__, component="scopes")
        >>> logger.warning("Unbalanced scope stack", extra={"event": "scope.unbalanced"})
    """
    logger = logging.getLogger(name)
    return ComponentLoggerAdapter(logger, component) if component else logger
