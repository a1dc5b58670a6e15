"""Structured logging for the coin backtester."""

from coin_backtester.logging.logger import get_logger, setup_logging, LoggerMixin, log_context

__all__ = ["get_logger", "setup_logging", "LoggerMixin", "log_context"]
