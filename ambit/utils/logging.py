"""
Ambit Structured Logging
Centralized logging configuration using loguru.
"""
import sys
from typing import Any, Dict, Optional

from loguru import logger

from ambit.config import config


class StructuredLogger:
    """Structured logger for the color engine service."""

    def __init__(self):
        """Initialize structured logger."""
        self._configure_logger()

    def _configure_logger(self):
        """Configure loguru with the level and format from config."""
        logger.remove()
        logger.add(
            sys.stdout,
            format="{time:YYYY-MM-DD HH:mm:ss} | {level} | {name}:{function} | {message} | {extra}",
            level=config.LOG_LEVEL,
            serialize=config.LOG_SERIALIZE,
        )

    def info(self, message: str, extra: Optional[Dict[str, Any]] = None):
        """Log info message with optional extra data."""
        if extra:
            logger.bind(**extra).info(message)
        else:
            logger.info(message)

    def warning(self, message: str, extra: Optional[Dict[str, Any]] = None):
        """Log warning message with optional extra data."""
        if extra:
            logger.bind(**extra).warning(message)
        else:
            logger.warning(message)

    def error(self, message: str, extra: Optional[Dict[str, Any]] = None):
        """Log error message with optional extra data."""
        if extra:
            logger.bind(**extra).error(message)
        else:
            logger.error(message)

    def debug(self, message: str, extra: Optional[Dict[str, Any]] = None):
        """Log debug message with optional extra data."""
        if extra:
            logger.bind(**extra).debug(message)
        else:
            logger.debug(message)


# Global logger instance
_logger: Optional[StructuredLogger] = None


def get_logger() -> StructuredLogger:
    """Get or create global logger instance."""
    global _logger
    if _logger is None:
        _logger = StructuredLogger()
    return _logger


def log_request(request_id: str, operation: str, **fields):
    """Log an incoming API request."""
    get_logger().info(
        f"{operation} request received",
        extra={"request_id": request_id, "operation": operation, **fields},
    )


def log_request_complete(request_id: str, operation: str, duration_ms: float, **fields):
    """Log a completed API request with its duration."""
    get_logger().info(
        f"{operation} completed in {duration_ms:.1f}ms",
        extra={"request_id": request_id, "operation": operation, "duration_ms": round(duration_ms, 2), **fields},
    )


def log_request_error(request_id: str, operation: str, error: Exception):
    """Log a failed API request."""
    get_logger().error(
        f"{operation} failed: {error}",
        extra={"request_id": request_id, "operation": operation, "error_type": type(error).__name__},
    )
