"""Shared utilities for tag shape extraction.

This module provides configuration objects, result and diagnostic types,
exceptions, and logging helpers used by every layer.
"""

from .result import (
    DiagnosticEntry,
    DiagnosticSeverity,
    ShapeMetrics,
)
from .config import (
    BuilderConfig,
    ConfigError,
    ConfigValidationError,
    EventSourceConfig,
    RenderConfig,
    ShapeConfig,
    TruncationPolicy,
    UnderflowPolicy,
)
from .errors import (
    DepthLimitError,
    ShapeError,
    SourceUnavailableError,
    StackUnderflowError,
)
from .logging import (
    CorrelationLogger,
    configure_logging,
    get_logger,
)

__all__ = [
    "DiagnosticEntry",
    "DiagnosticSeverity",
    "ShapeMetrics",
    "BuilderConfig",
    "ConfigError",
    "ConfigValidationError",
    "EventSourceConfig",
    "RenderConfig",
    "ShapeConfig",
    "TruncationPolicy",
    "UnderflowPolicy",
    "DepthLimitError",
    "ShapeError",
    "SourceUnavailableError",
    "StackUnderflowError",
    "CorrelationLogger",
    "configure_logging",
    "get_logger",
]
