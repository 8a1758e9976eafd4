"""structlog + stdlib logging wiring shared by the app and uvicorn.

Everything (our structlog events, uvicorn, httpx) ends up in one
ProcessorFormatter so console/json output looks the same regardless of
the emitting library.  Emission happens on a QueueListener thread.
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

from woviex.infrastructure.config.schema import AppConfig

log = structlog.get_logger(__name__)

# httpx logs every request line (full URL) at INFO; media URLs are secret.
_QUIET_LOGGERS: dict[str, str] = {
    "httpx": "WARNING",
    "httpcore": "WARNING",
    "hpack": "WARNING",
}

# Event keys whose values must never reach a log sink.
_REDACTED_KEYS = frozenset({"url", "media_url", "token", "password", "authorization"})

_listener: Optional[QueueListener] = None


def _drop_color_message(_: Any, __: Any, event_dict: dict[str, Any]) -> dict[str, Any]:
    event_dict.pop("color_message", None)
    return event_dict


def _redact(_: Any, __: Any, event_dict: dict[str, Any]) -> dict[str, Any]:
    for key in _REDACTED_KEYS.intersection(event_dict):
        event_dict[key] = "[redacted]"
    return event_dict


def _stdlib_record_time(_: Any, __: Any, event_dict: dict[str, Any]) -> dict[str, Any]:
    """Use the LogRecord creation time, not the time the listener formats it."""
    record = event_dict.get("_record")
    if isinstance(record, logging.LogRecord):
        ts = datetime.fromtimestamp(record.created, tz=timezone.utc)
        event_dict["timestamp"] = ts.isoformat().replace("+00:00", "Z")
    return event_dict


def _formatter(config: AppConfig) -> structlog.stdlib.ProcessorFormatter:
    renderer: structlog.typing.Processor = (
        structlog.processors.JSONRenderer()
        if config.log_format == "json"
        else structlog.dev.ConsoleRenderer()
    )
    return structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=[
            _drop_color_message,
            structlog.contextvars.merge_contextvars,
            _stdlib_record_time,
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

    uvicorn applies it after we configured logging, so it must route its
    loggers through the same structlog formatter and level.
    """
    level = config.log_level
    loggers: dict[str, Any] = {
        "uvicorn": {"handlers": ["default"], "level": level, "propagate": False},
        "uvicorn.error": {"level": level},
        "uvicorn.access": {"handlers": ["access"], "level": level, "propagate": False},
    }
    for name, quiet_level in _QUIET_LOGGERS.items():
        loggers[name] = {"level": quiet_level}

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
    def __init__(self, low: int = logging.NOTSET, high: int = logging.CRITICAL) -> None:
        super().__init__()
        self.low = low
        self.high = high

    def filter(self, record: logging.LogRecord) -> bool:
        return self.low <= record.levelno <= self.high


class _RecordQueueHandler(QueueHandler):
    # QueueHandler.prepare() stringifies record.msg; ProcessorFormatter
    # needs the original event dict.
    def prepare(self, record: logging.LogRecord) -> logging.LogRecord:
        return copy.copy(record)


def _stop_listener() -> None:
    global _listener
    if _listener is not None:
        try:
            _listener.stop()
        finally:
            _listener = None


def _start_listener(config: AppConfig) -> None:
    """Send stdlib records through a queue; WARNING and below to stdout."""
    global _listener
    _stop_listener()

    formatter = _formatter(config)
    out = logging.StreamHandler(sys.stdout)
    out.addFilter(_LevelRange(high=logging.WARNING))
    err = logging.StreamHandler(sys.stderr)
    err.addFilter(_LevelRange(low=logging.ERROR))
    for handler in (out, err):
        handler.setFormatter(formatter)

    records: queue.Queue[logging.LogRecord] = queue.Queue()
    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(_RecordQueueHandler(records))
    root.setLevel(config.log_level)

    for name in list(logging.root.manager.loggerDict):
        existing = logging.getLogger(name)
        existing.handlers.clear()
        existing.propagate = True
        existing.setLevel(_QUIET_LOGGERS.get(name, config.log_level))

    _listener = QueueListener(records, out, err, respect_handler_level=True)
    _listener.start()
    atexit.register(_stop_listener)


def configure_logging(config: AppConfig) -> dict[str, Any]:
    """Configure structlog and stdlib logging; return uvicorn's log_config."""
    structlog.configure(
        processors=[
            _drop_color_message,
            structlog.contextvars.merge_contextvars,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            _redact,
            structlog.processors.format_exc_info,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    log_config = uvicorn_log_config(config)
    logging.config.dictConfig(log_config)
    _start_listener(config)

    log.info(
        "logging_configured",
        app=config.app_name,
        log_format=config.log_format,
        log_level=config.log_level,
    )
    return log_config
