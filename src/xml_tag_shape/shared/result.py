"""Diagnostic and metrics types for tag shape extraction.

These objects accompany every built shape tree so callers can tell a clean run
from one that was truncated or that ignored stray closing tags.
"""

import time
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Dict, Optional


class DiagnosticSeverity(Enum):
    """Severity levels for diagnostic entries."""

    INFO = auto()
    WARNING = auto()     # Input was handled, but not as written


@dataclass
class DiagnosticEntry:
    """Single diagnostic entry with context information."""

    severity: DiagnosticSeverity
    message: str
    component: str
    position: Optional[Dict[str, int]] = None
    details: Optional[Dict[str, Any]] = None
    timestamp: float = field(default_factory=time.time)
    correlation_id: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate diagnostic entry."""
        if not self.message:
            raise ValueError("Diagnostic message cannot be empty")
        if not self.component:
            raise ValueError("Diagnostic component cannot be empty")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "severity": self.severity.name,
            "message": self.message,
            "component": self.component,
            "position": self.position,
            "details": self.details,
        }


@dataclass
class ShapeMetrics:
    """Counters collected while a shape tree is built."""

    events_consumed: int = 0
    open_events: int = 0
    close_events: int = 0
    ignored_closes: int = 0
    nodes_created: int = 0
    max_depth: int = 0
    unclosed_at_end: int = 0
    processing_time_ms: float = 0.0
    memory_used_bytes: int = 0

    @property
    def events_per_second(self) -> float:
        """Calculate events consumed per second."""
        if self.processing_time_ms <= 0:
            return 0.0
        return (self.events_consumed * 1000.0) / self.processing_time_ms

    @property
    def reuse_rate(self) -> float:
        """Fraction of open events that landed on an already existing node."""
        if self.open_events == 0:
            return 0.0
        return 1.0 - (self.nodes_created / self.open_events)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "events_consumed": self.events_consumed,
            "open_events": self.open_events,
            "close_events": self.close_events,
            "ignored_closes": self.ignored_closes,
            "nodes_created": self.nodes_created,
            "max_depth": self.max_depth,
            "unclosed_at_end": self.unclosed_at_end,
            "processing_time_ms": round(self.processing_time_ms, 3),
            "memory_used_bytes": self.memory_used_bytes,
            "events_per_second": round(self.events_per_second, 1),
        }
