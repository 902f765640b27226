"""
FeedForge Logging Configuration
===============================

Logging for the serializer, handler pipeline, fetcher and HTTP adapter.
Log files always get one JSON object per line; the console gets a short
coloured line tagged with the feed dialect when one is known.
"""

import json
import logging
import logging.handlers
import sys
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

# Attributes every LogRecord has; anything else arrived through ``extra``
_RECORD_ATTRIBUTES = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", (), None))
) | {"message", "asctime", "taskName"}

_LEVEL_COLOURS = {
    logging.DEBUG: "36",
    logging.INFO: "32",
    logging.WARNING: "33",
    logging.ERROR: "31",
    logging.CRITICAL: "35",
}


def _extra_fields(record: logging.LogRecord) -> Dict[str, Any]:
    return {k: v for k, v in vars(record).items() if k not in _RECORD_ATTRIBUTES}


class StructuredFormatter(logging.Formatter):
    """JSON lines for log files and log shippers."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "time": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "source": f"{record.module}:{record.funcName}:{record.lineno}",
        }

        extra = _extra_fields(record)
        if extra:
            payload["extra"] = extra
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        return json.dumps(payload, ensure_ascii=False, default=str)


class ColoredConsoleFormatter(logging.Formatter):
    """Compact console lines: time, level, logger, ``[dialect]`` tag, message."""

    def format(self, record: logging.LogRecord) -> str:
        colour = _LEVEL_COLOURS.get(record.levelno, "0")
        clock = time.strftime("%H:%M:%S", time.localtime(record.created))
        dialect = getattr(record, "dialect", None)
        tag = f"[{dialect}] " if dialect else ""

        line = (
            f"\033[{colour}m{clock} {record.levelname:<8}\033[0m "
            f"{record.name}: {tag}{record.getMessage()}"
        )
        if record.exc_info:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line


def _console_handler(structured: bool) -> logging.Handler:
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(StructuredFormatter() if structured else ColoredConsoleFormatter())
    return handler


def _file_handler(log_file: str, max_bytes: int, backups: int) -> logging.Handler:
    path = Path(log_file)
    path.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.handlers.RotatingFileHandler(
        path, maxBytes=max_bytes, backupCount=backups, encoding="utf-8"
    )
    handler.setFormatter(StructuredFormatter())
    return handler


def setup_logger(
    name: str = "feedforge",
    level: str = "INFO",
    log_file: Optional[str] = None,
    console: bool = True,
    structured: bool = False,
    max_file_size: int = 10 * 1024 * 1024,
    backup_count: int = 5,
) -> logging.Logger:
    """Attach console and/or rotating file handlers to logger ``name``.

    Existing handlers are replaced, so calling this again (for example when
    the CLI turns on ``--debug``) does not duplicate output.

    Args:
        name: Logger name
        level: Level name, e.g. "DEBUG"
        log_file: Rotating JSON log file; None disables file logging
        console: Log to stderr
        structured: JSON instead of coloured lines on the console
        max_file_size: Rotate the log file after this many bytes
        backup_count: Rotated files to keep

    Returns:
        The configured logger
    """
    logger = logging.getLogger(name)
    logger.setLevel(level.upper())
    logger.handlers.clear()

    if console:
        logger.addHandler(_console_handler(structured))
    if log_file:
        logger.addHandler(_file_handler(log_file, max_file_size, backup_count))

    return logger


class LoggerAdapter(logging.LoggerAdapter):
    """Adapter whose bound context is merged with per-call ``extra``."""

    def process(self, msg: Any, kwargs: Dict[str, Any]) -> tuple:
        kwargs["extra"] = {**self.extra, **kwargs.get("extra", {})}
        return msg, kwargs

    def bind(self, **context: Any) -> "LoggerAdapter":
        """Copy of this adapter with extra context; None values are skipped."""
        bound = {**self.extra, **{k: v for k, v in context.items() if v is not None}}
        return LoggerAdapter(self.logger, bound)


def get_logger_for_component(
    component_name: str,
    dialect: Optional[str] = None,
    feed_url: Optional[str] = None,
    request_id: Optional[str] = None,
) -> LoggerAdapter:
    """Adapter for ``feedforge.<component_name>`` carrying the given context.

    Args:
        component_name: Component, e.g. 'serializer', 'handler', 'web'
        dialect: 'atom', 'rss' or 'rdf'
        feed_url: Remote feed being fetched
        request_id: Request being served
    """
    adapter = LoggerAdapter(
        logging.getLogger(f"feedforge.{component_name}"), {"component": component_name}
    )
    return adapter.bind(dialect=dialect, feed_url=feed_url, request_id=request_id)


def configure_application_logging(
    log_level: str = "INFO",
    log_file: Optional[str] = "logs/feedforge.log",
    enable_console: bool = True,
    structured_logging: bool = False,
    max_file_size: int = 10 * 1024 * 1024,
    backup_count: int = 5,
) -> None:
    """Configure the ``feedforge`` logger tree and quiet noisy libraries."""
    setup_logger(
        name="feedforge",
        level=log_level,
        log_file=log_file,
        console=enable_console,
        structured=structured_logging,
        max_file_size=max_file_size,
        backup_count=backup_count,
    )

    for noisy in ("aiohttp.access", "aiohttp.client", "asyncio"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


def get_serializer_logger(dialect: Optional[str] = None) -> LoggerAdapter:
    return get_logger_for_component("serializer", dialect=dialect)


def get_handler_logger(dialect: Optional[str] = None) -> LoggerAdapter:
    return get_logger_for_component("handler", dialect=dialect)


class PerformanceLogger:
    """Times a block and logs how long it took.

    Success is logged at debug level, failure at error level; the exception
    itself still propagates.
    """

    def __init__(self, logger: logging.Logger, operation: str, **context: Any):
        self.logger = logger
        self.operation = operation
        self.context = context
        self.duration: Optional[float] = None
        self._started: Optional[float] = None

    def __enter__(self) -> "PerformanceLogger":
        self._started = time.perf_counter()
        self.logger.debug(f"{self.operation} started", extra=self.context)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.duration = time.perf_counter() - self._started
        extra = {**self.context, "duration_seconds": self.duration, "success": exc_type is None}

        if exc_type is None:
            self.logger.debug(f"Completed {self.operation} in {self.duration:.3f}s", extra=extra)
        else:
            self.logger.error(f"Failed {self.operation} in {self.duration:.3f}s", extra=extra)
