"""Structured logging utilities for tag shape extraction.

Every record emitted through :class:`CorrelationLogger` carries the component
that produced it and an optional correlation ID, so a single run can be traced
from the event adapter through the tree builder.
"""

import logging
import os
from typing import Any, Dict, Optional

LOG_LEVEL_ENV_VAR = "XML_TAG_SHAPE_LOG"
LOG_FORMAT = "%(asctime)s %(levelname)s [%(component)s] %(message)s"

_VERBOSITY_LEVELS = {
    -1: logging.ERROR,
    0: logging.WARNING,
    1: logging.INFO,
    2: logging.DEBUG,
}


class _ComponentDefaultsFilter(logging.Filter):
    """Fill in structured fields for records not produced by CorrelationLogger."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "component"):
            record.component = record.name.split(".")[-1]
        if not hasattr(record, "correlation_id"):
            record.correlation_id = None
        return True


class CorrelationLogger:
    """Logger that automatically includes correlation ID and component information."""

    def __init__(
        self,
        name: str,
        correlation_id: Optional[str] = None,
        component: Optional[str] = None
    ) -> None:
        """Initialize correlation logger.

        Args:
            name: Logger name (typically __name__)
            correlation_id: Optional correlation ID for run tracking
            component: Component name for structured logging
        """
        self.logger = logging.getLogger(name)
        self.correlation_id = correlation_id
        self.component = component or name.split(".")[-1]

    def _get_extra(self, extra: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        combined_extra = {
            "component": self.component,
            "correlation_id": self.correlation_id,
        }
        if extra:
            combined_extra.update(extra)
        return combined_extra

    def debug(self, message: str, extra: Optional[Dict[str, Any]] = None) -> None:
        self.logger.debug(message, extra=self._get_extra(extra))

    def info(self, message: str, extra: Optional[Dict[str, Any]] = None) -> None:
        self.logger.info(message, extra=self._get_extra(extra))

    def warning(self, message: str, extra: Optional[Dict[str, Any]] = None) -> None:
        self.logger.warning(message, extra=self._get_extra(extra))

    def error(self, message: str, extra: Optional[Dict[str, Any]] = None) -> None:
        self.logger.error(message, extra=self._get_extra(extra))


def get_logger(
    name: str,
    correlation_id: Optional[str] = None,
    component: Optional[str] = None
) -> CorrelationLogger:
    """Get a correlation-aware logger instance.

    Args:
        name: Logger name (typically __name__)
        correlation_id: Optional correlation ID for run tracking
        component: Component name for structured logging

    Returns:
        CorrelationLogger instance
    """
    return CorrelationLogger(name, correlation_id, component)


def resolve_log_level(verbosity: int = 0) -> int:
    """Translate a CLI verbosity count into a logging level.

    The ``XML_TAG_SHAPE_LOG`` environment variable, when set to a level name
    such as ``DEBUG``, takes precedence over the verbosity count.
    """
    env_level = os.environ.get(LOG_LEVEL_ENV_VAR)
    if env_level:
        level = logging.getLevelName(env_level.strip().upper())
        if isinstance(level, int):
            return level

    verbosity = max(-1, min(2, verbosity))
    return _VERBOSITY_LEVELS[verbosity]


def configure_logging(verbosity: int = 0) -> int:
    """Install a stderr handler on the root logger.

    Args:
        verbosity: -1 for errors only, 0 for warnings, 1 for info, 2 for debug

    Returns:
        The logging level that was applied
    """
    level = resolve_log_level(verbosity)
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler.addFilter(_ComponentDefaultsFilter())
    logging.basicConfig(level=level, handlers=[handler], force=True)
    return level
