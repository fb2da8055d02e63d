"""structlog + stdlib logging wiring.

Application code logs through ``structlog.get_logger(__name__)`` with
snake_case event names and keyword context. Library records (uvicorn, httpx)
are rendered by the same ``ProcessorFormatter``, so console and JSON output
look identical regardless of who logged.

Emission happens on a ``QueueListener`` thread: the event loop only enqueues
records. INFO/WARNING go to stdout, ERROR and above to stderr.
"""

from __future__ import annotations

import atexit
import copy
import logging
import logging.config
import queue
import sys
from datetime import datetime, timezone
from logging.handlers import QueueHandler, QueueListener
from typing import Any, Optional

import structlog

from cinestream.infrastructure.config.schema import AppConfig

log = structlog.get_logger(__name__)

# Loggers whose level is pinned regardless of the configured log level.
# httpx logs every request at INFO, which a five-site fan-out turns into noise.
_PINNED_LEVELS: dict[str, str] = {"httpx": "WARNING", "httpcore": "WARNING"}

_listener: Optional[QueueListener] = None


def _drop_color_message(_: Any, __: Any, event_dict: dict[str, Any]) -> dict[str, Any]:
    # uvicorn duplicates the message with ANSI codes under "color_message".
    event_dict.pop("color_message", None)
    return event_dict


def _stamp_foreign_record(_: Any, __: Any, event_dict: dict[str, Any]) -> dict[str, Any]:
    """Timestamp stdlib records with their creation time (UTC, ``Z`` suffix)."""
    record = event_dict.get("_record")
    if isinstance(record, logging.LogRecord):
        created = datetime.fromtimestamp(record.created, tz=timezone.utc)
        event_dict["timestamp"] = created.isoformat().replace("+00:00", "Z")
    return event_dict


def _formatter(config: AppConfig) -> structlog.stdlib.ProcessorFormatter:
    renderer: structlog.typing.Processor
    if config.log_format == "json":
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer()

    return structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=[
            _drop_color_message,
            structlog.contextvars.merge_contextvars,
            _stamp_foreign_record,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
        ],
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )


def uvicorn_log_config(config: AppConfig) -> dict[str, Any]:
    """dictConfig handed to ``uvicorn.run(log_config=...)``.

    Same handler layout as uvicorn's default config, rendered through the
    structlog formatter.
    """
    level = config.log_level
    loggers: dict[str, dict[str, Any]] = {
        "uvicorn": {"handlers": ["default"], "level": level, "propagate": False},
        "uvicorn.error": {"level": level},
        "uvicorn.access": {"handlers": ["access"], "level": level, "propagate": False},
    }
    for name, pinned in _PINNED_LEVELS.items():
        loggers[name] = {"level": pinned}

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {"structlog": {"()": lambda: _formatter(config)}},
        "handlers": {
            "default": {
                "class": "logging.StreamHandler",
                "formatter": "structlog",
                "stream": "ext://sys.stderr",
            },
            "access": {
                "class": "logging.StreamHandler",
                "formatter": "structlog",
                "stream": "ext://sys.stdout",
            },
        },
        "loggers": loggers,
        "root": {"handlers": ["default"], "level": level},
    }


class _LevelRange(logging.Filter):
    """Pass records with ``low <= levelno <= high``."""

    def __init__(self, low: int = logging.NOTSET, high: int = logging.CRITICAL) -> None:
        super().__init__()
        self._low = low
        self._high = high

    def filter(self, record: logging.LogRecord) -> bool:
        return self._low <= record.levelno <= self._high


class _DictMsgQueueHandler(QueueHandler):
    """QueueHandler that leaves structlog's dict ``record.msg`` untouched."""

    def prepare(self, record: logging.LogRecord) -> logging.LogRecord:
        # The default prepare() formats the record into a string, which the
        # ProcessorFormatter on the listener side can no longer render.
        return copy.copy(record)


def _stop_listener() -> None:
    global _listener
    if _listener is not None:
        try:
            _listener.stop()
        finally:
            _listener = None


def _route_through_queue(config: AppConfig) -> None:
    """Replace every handler with a single queue handler on the root logger."""
    global _listener
    _stop_listener()

    formatter = _formatter(config)
    out = logging.StreamHandler(stream=sys.stdout)
    out.setFormatter(formatter)
    out.addFilter(_LevelRange(high=logging.WARNING))
    err = logging.StreamHandler(stream=sys.stderr)
    err.setFormatter(formatter)
    err.addFilter(_LevelRange(low=logging.ERROR))

    records: queue.Queue[logging.LogRecord] = queue.Queue()
    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(_DictMsgQueueHandler(records))
    root.setLevel(config.log_level)

    for name in list(logging.root.manager.loggerDict):
        logger = logging.getLogger(name)
        logger.handlers.clear()
        logger.propagate = True
        logger.setLevel(_PINNED_LEVELS.get(name, config.log_level))

    _listener = QueueListener(records, out, err, respect_handler_level=True)
    _listener.start()
    atexit.register(_stop_listener)


def configure_logging(config: AppConfig) -> dict[str, Any]:
    """Configure structlog and stdlib logging; return the uvicorn dictConfig."""
    structlog.configure(
        processors=[
            _drop_color_message,
            structlog.contextvars.merge_contextvars,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.format_exc_info,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    log_config = uvicorn_log_config(config)
    logging.config.dictConfig(log_config)
    _route_through_queue(config)

    log.info(
        "logging_configured", log_format=config.log_format, log_level=config.log_level
    )
    return log_config
