"""
Structured logging setup for backtests and parameter sweeps.
Uses structlog for key-value events, with optional rotating log files.
"""

import logging
import logging.handlers
import sys
from collections.abc import Mapping
from contextlib import AbstractContextManager
from pathlib import Path
from typing import Any

import structlog
from structlog.types import Processor

from coin_backtester.config import settings


MAX_LOG_BYTES = 10 * 1024 * 1024
LOG_BACKUPS = 5


def _rotating_handler(path: Path, level: int) -> logging.Handler:
    handler = logging.handlers.RotatingFileHandler(
        path, maxBytes=MAX_LOG_BYTES, backupCount=LOG_BACKUPS, encoding="utf-8",
    )
    handler.setLevel(level)
    return handler


def setup_logging(
    log_level: str | None = None,
    log_dir: Path | None = None,
    log_to_console: bool = True,
    log_to_file: bool = False,
    json_logs: bool | None = None,
) -> None:
    """
    Configure the logging system.

    Args:
        log_level: Logging level (default: settings.log_level)
        log_dir: Directory for log files (default: ./logs), only used with log_to_file
        log_to_console: Whether to log to console
        log_to_file: Whether to log to rotating files
        json_logs: Whether to render events as JSON (default: settings.json_logs)
    """
    log_level = log_level or settings.log_level
    if json_logs is None:
        json_logs = settings.json_logs
    log_level_int = getattr(logging, log_level.upper(), logging.INFO)

    handlers: list[logging.Handler] = []

    if log_to_console:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(log_level_int)
        handlers.append(console_handler)

    if log_to_file:
        log_dir = log_dir or Path("logs")
        log_dir.mkdir(parents=True, exist_ok=True)
        handlers.append(_rotating_handler(log_dir / "backtester.log", log_level_int))
        handlers.append(_rotating_handler(log_dir / "error.log", logging.ERROR))

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]

    if json_logs:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(
            structlog.dev.ConsoleRenderer(
                colors=log_to_console and sys.stdout.isatty(),
                exception_formatter=structlog.dev.plain_traceback,
            )
        )

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(log_level_int),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        level=log_level_int,
        handlers=handlers,
        force=True,
    )

    logging.getLogger("ccxt").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)


def get_logger(name: str) -> structlog.BoundLogger:
    """Logger for a module, e.g. ``get_logger(__name__)``."""
    return structlog.get_logger(name)


class LoggerMixin:
    """Gives a class a ``logger`` named after its module and class."""

    @property
    def logger(self) -> structlog.BoundLogger:
        cls = type(self)
        return get_logger(f"{cls.__module__}.{cls.__qualname__}")


def log_context(**kwargs: Any) -> AbstractContextManager[Mapping[str, Any]]:
    """
    Bind key-value context to every event logged inside the block.

    Previous values of the same keys are restored on exit.

    Usage:
        with log_context(strategy="NaiveGridStrategy"):
            logger.info("Starting optimization")
    """
    return structlog.contextvars.bound_contextvars(**kwargs)
