"""Root logger setup: scope-aware record enrichment and output formatters.

Records pass through ContextualFilter on the handler, which copies the
emitting branch's ambient scope variables and markers onto them. The
formatters then render every non-standard record attribute, so scope
variables show up next to the fields given through ``extra``.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Iterator, Literal, Optional, Tuple

from logscope.config.models import ScopeSettings
from logscope.exceptions import ScopeError
from logscope.scopes.manager import ScopeManager

from .context import get_log_context, get_scope_markers

LogFormat = Literal["json", "key-value"]

SCOPE_MARKER_SEPARATOR = " / "

# Attributes every LogRecord carries, plus the ones Formatter.format adds
_RECORD_ATTRS = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime", "taskName"}

KEY_VALUE_PATTERN = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
KEY_VALUE_DATEFMT = "%Y-%m-%d %H:%M:%S"


def _extra_fields(record: logging.LogRecord, skip: frozenset = frozenset()) -> Iterator[Tuple[str, Any]]:
    for key, value in record.__dict__.items():
        if key in _RECORD_ATTRS or key in skip or key.startswith("_"):
            continue
        yield key, value


class ContextualFilter(logging.Filter):
    """Stamp records with static metadata and the scopes open where they were emitted.

    Adds ``service`` and ``environment``, every ambient scope variable, and
    ``scopes``: the open scope markers, outermost first. Fields passed
    explicitly through ``extra`` are never overwritten.
    """

    def __init__(
        self,
        service: str = "logscope",
        environment: str = "local",
        manager: Optional[ScopeManager] = None,
    ):
        """Initialize contextual filter.

        Args:
            service: Service name (static field)
            environment: Environment label (production, staging, local)
            manager: Scope manager to read. None means the process default,
                looked up per record so configure_scopes() takes effect.
        """
        super().__init__()
        self.service = service
        self.environment = environment
        self.manager = manager

    def filter(self, record: logging.LogRecord) -> bool:
        record.service = self.service
        record.environment = self.environment

        # The default manager is built on first use and may fail on bad settings;
        # the record still goes out, flagged, without scope fields
        try:
            variables = get_log_context(self.manager)
            markers = get_scope_markers(self.manager)
        except ScopeError as e:
            record.__dict__.setdefault("scope_context_error", type(e).__name__)
            return True

        for key, value in variables.items():
            record.__dict__.setdefault(key, value)

        if markers:
            record.__dict__.setdefault("scopes", SCOPE_MARKER_SEPARATOR.join(markers))

        return True


class JSONFormatter(logging.Formatter):
    """One JSON object per line: timestamp, level, message, then every extra field.

    Values JSON cannot represent (scope variables may hold any object) are
    rendered with str().
    """

    def format(self, record: logging.LogRecord) -> str:
        log_obj: Dict[str, Any] = {
            "timestamp": self.format_timestamp(record.created),
            "level": record.levelname,
            "message": record.getMessage(),
        }

        for key, value in _extra_fields(record):
            log_obj[key] = value.isoformat() if isinstance(value, datetime) else value

        if record.exc_info:
            log_obj["exc_info"] = self.formatException(record.exc_info)

        return json.dumps(log_obj, ensure_ascii=False, default=str)

    @staticmethod
    def format_timestamp(created: float) -> str:
        """ISO-8601 UTC with millisecond precision and a 'Z' suffix."""
        moment = datetime.fromtimestamp(created, tz=timezone.utc)
        return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


class KeyValueFormatter(logging.Formatter):
    """Human-readable line followed by sorted ``key=value`` pairs.

    ``service`` and ``environment`` are left out since they are the same on
    every line.
    """

    STATIC_FIELDS = frozenset({"service", "environment"})

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        pairs = sorted(_extra_fields(record, self.STATIC_FIELDS))
        if not pairs:
            return line
        return line + " " + " ".join(f"{key}={self.render_value(value)}" for key, value in pairs)

    @staticmethod
    def render_value(value: Any) -> str:
        if value is None:
            return "null"
        if isinstance(value, bool):
            return "true" if value else "false"
        if isinstance(value, datetime):
            return value.isoformat()
        text = str(value)
        if any(ch in text for ch in ' =,"'):
            return json.dumps(text, ensure_ascii=False)
        return text


_FORMATTERS = {
    "json": lambda: JSONFormatter(),
    "key-value": lambda: KeyValueFormatter(KEY_VALUE_PATTERN, datefmt=KEY_VALUE_DATEFMT),
}


def configure_logging(
    level: str = "INFO",
    format_type: LogFormat = "key-value",
    environment: str = "local",
    service: str = "logscope",
    manager: Optional[ScopeManager] = None,
) -> None:
    """
    Send all logging to stdout, enriched with the active scopes.

    Replaces any handlers already on the root logger.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format_type: 'json' or 'key-value'
        environment: Environment label (production, staging, local)
        service: Service name stamped on every record
        manager: Scope manager to read (default: the process default)

    Raises:
        ValueError: If level or format_type is invalid
    """
    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        raise ValueError(f"Invalid log level: {level}")

    build_formatter = _FORMATTERS.get(format_type)
    if build_formatter is None:
        raise ValueError(f"Invalid log format: {format_type}. Must be one of: {', '.join(_FORMATTERS)}")

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(build_formatter())
    handler.addFilter(ContextualFilter(service=service, environment=environment, manager=manager))

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(numeric_level)

    logging.getLogger(__name__).info(
        "Logging configured",
        extra={
            "event": "logging.configured",
            "component": "logging",
            "log_level": level.upper(),
            "log_format": format_type,
        },
    )


def configure_logging_from_settings(
    settings: ScopeSettings, manager: Optional[ScopeManager] = None
) -> None:
    """Configure the root logger from the ``logging`` section of ScopeSettings."""
    configure_logging(
        level=settings.logging.level,
        format_type=settings.logging.format,
        environment=settings.logging.environment,
        service=settings.logging.service,
        manager=manager,
    )
