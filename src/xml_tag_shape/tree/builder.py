"""Streaming shape tree builder.

This module converts a flat sequence of Open/Close events into a tree of
distinct tag names. The builder keeps an explicit stack of open nodes; the top
of the stack is the current position and the root is its permanent floor.
"""

import time
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional

import psutil

from xml_tag_shape.events import CloseEvent, OpenEvent, ShapeEvent
from xml_tag_shape.shared import (
    BuilderConfig,
    DepthLimitError,
    DiagnosticEntry,
    DiagnosticSeverity,
    RenderConfig,
    ShapeMetrics,
    StackUnderflowError,
    TruncationPolicy,
    UnderflowPolicy,
    get_logger,
)

from .node import ShapeNode
from .render import render_shape

MS_PER_SECOND = 1000.0


@dataclass
class ShapeResult:
    """Result of one build: the shape tree plus diagnostics and metrics.

    A truncated result still carries every node built before the event
    stream stopped.
    """

    root: ShapeNode = field(default_factory=ShapeNode)
    truncated: bool = False
    error_message: Optional[str] = None
    diagnostics: List[DiagnosticEntry] = field(default_factory=list)
    metrics: ShapeMetrics = field(default_factory=ShapeMetrics)
    correlation_id: Optional[str] = None
    source: Optional[str] = None

    @property
    def success(self) -> bool:
        """True when the whole event stream was consumed."""
        return not self.truncated

    def add_diagnostic(
        self,
        severity: DiagnosticSeverity,
        message: str,
        component: str,
        position: Optional[Dict[str, int]] = None,
        details: Optional[Dict[str, Any]] = None
    ) -> None:
        """Add diagnostic entry to result."""
        self.diagnostics.append(
            DiagnosticEntry(
                severity=severity,
                message=message,
                component=component,
                position=position,
                details=details,
                correlation_id=self.correlation_id,
            )
        )

    def get_diagnostics_by_severity(
        self,
        severity: DiagnosticSeverity
    ) -> List[DiagnosticEntry]:
        return [diag for diag in self.diagnostics if diag.severity == severity]

    def has_warnings(self) -> bool:
        return any(diag.severity == DiagnosticSeverity.WARNING for diag in self.diagnostics)

    def render(self, config: Optional[RenderConfig] = None) -> str:
        return render_shape(self.root, config)

    def summary(self) -> Dict[str, Any]:
        return {
            "source": self.source,
            "success": self.success,
            "truncated": self.truncated,
            "error": self.error_message,
            "distinct_nodes": self.root.node_count,
            "tag_names": self.root.tag_names(),
            "metrics": self.metrics.to_dict(),
            "diagnostics": [diag.to_dict() for diag in self.diagnostics],
        }


class ShapeTreeBuilder:
    """Builds a deduplicated tag shape tree from Open/Close events.

    A builder instance is single-pass: :meth:`build` resets it, and it must
    not be fed from two streams at once.
    """

    def __init__(
        self,
        config: Optional[BuilderConfig] = None,
        correlation_id: Optional[str] = None
    ) -> None:
        """Initialize tree builder.

        Args:
            config: Builder configuration (policies and limits)
            correlation_id: Optional correlation ID for run tracking
        """
        self.config = config or BuilderConfig()
        self.correlation_id = correlation_id
        self.logger = get_logger(__name__, correlation_id, "shape_tree_builder")

        self._root = ShapeNode()
        self._stack: List[ShapeNode] = [self._root]
        self._result = ShapeResult(root=self._root, correlation_id=correlation_id)
        self._event_index = 0

    @property
    def root(self) -> ShapeNode:
        return self._root

    @property
    def current(self) -> ShapeNode:
        """Node of the innermost open element, or the root."""
        return self._stack[-1]

    @property
    def depth(self) -> int:
        """Number of currently open elements."""
        return len(self._stack) - 1

    @property
    def result(self) -> ShapeResult:
        return self._result

    def reset(self) -> None:
        """Discard any partially built tree and start from a bare root."""
        self._root = ShapeNode()
        self._stack = [self._root]
        self._result = ShapeResult(root=self._root, correlation_id=self.correlation_id)
        self._event_index = 0

    def open(self, name: str) -> ShapeNode:
        """Descend into the child ``name`` of the current node.

        The child is created on first sighting and reused afterwards.

        Raises:
            DepthLimitError: if ``max_depth`` is configured and exceeded
        """
        metrics = self._result.metrics
        limit = self.config.max_depth
        if limit is not None and self.depth >= limit:
            raise DepthLimitError(
                f"Nesting depth exceeds limit of {limit} at <{name}>",
                depth=self.depth + 1,
                limit=limit,
            )

        child, created = self.current.get_or_add_child(name)
        if created:
            metrics.nodes_created += 1
        self._stack.append(child)

        metrics.open_events += 1
        metrics.max_depth = max(metrics.max_depth, self.depth)
        self.logger.debug(
            f"> Entering node: {name}",
            extra={"depth": self.depth, "new_node": created},
        )
        return child

    def close(self, name: Optional[str] = None) -> ShapeNode:
        """Return to the parent of the current node.

        ``name`` is only used for diagnostics; it is not checked against the
        node being left. Closing with only the root open never removes the
        root and is handled per the underflow policy.

        Raises:
            StackUnderflowError: under ``UnderflowPolicy.RAISE`` only
        """
        metrics = self._result.metrics
        metrics.close_events += 1

        if len(self._stack) == 1:
            self._handle_underflow(name)
            return self.current

        left = self._stack.pop()
        self.logger.debug(
            f"< Exiting node: {left.name}",
            extra={"depth": self.depth, "close_name": name},
        )
        return self.current

    def feed(self, event: ShapeEvent) -> None:
        """Apply a single event to the tree."""
        self._result.metrics.events_consumed += 1
        if isinstance(event, OpenEvent):
            self.open(event.name)
        elif isinstance(event, CloseEvent):
            self.close(event.name)
        else:
            raise TypeError(f"Unsupported event type: {type(event).__name__}")
        self._event_index += 1

    def build(self, events: Iterable[ShapeEvent]) -> ShapeResult:
        """Consume ``events`` and return the finished shape.

        When ``events`` is an :class:`~xml_tag_shape.events.EventAdapter`, its
        truncation state is copied onto the result.

        Args:
            events: Open/Close events, consumed once

        Returns:
            ShapeResult whose root is the bottom of the stack
        """
        self.reset()
        start_time = time.perf_counter()
        memory_start = _rss_bytes() if self.config.collect_metrics else 0

        self.logger.info("Starting shape tree building")

        for event in events:
            self.feed(event)

        result = self._result
        self._record_truncation(events, result)
        self._record_unclosed(result)

        metrics = result.metrics
        metrics.processing_time_ms = (time.perf_counter() - start_time) * MS_PER_SECOND
        if self.config.collect_metrics:
            metrics.memory_used_bytes = max(0, _rss_bytes() - memory_start)

        self.logger.info(
            "Shape tree building completed",
            extra={
                "events_consumed": metrics.events_consumed,
                "nodes_created": metrics.nodes_created,
                "max_depth": metrics.max_depth,
                "truncated": result.truncated,
            },
        )
        return result

    def _handle_underflow(self, name: Optional[str]) -> None:
        policy = self.config.underflow_policy
        position = {"event_index": self._event_index}
        message = (
            f"Closing tag </{name}> has no open element; ignored"
            if name else "Close with no open element; ignored"
        )

        if policy is UnderflowPolicy.RAISE:
            raise StackUnderflowError(message, name=name, event_index=self._event_index)

        self._result.metrics.ignored_closes += 1
        if policy is UnderflowPolicy.WARN:
            self.logger.warning(message, extra=position)
            self._result.add_diagnostic(
                DiagnosticSeverity.WARNING,
                message,
                "shape_tree_builder",
                position=position,
                details={"close_name": name},
            )
        else:
            self.logger.debug(message, extra=position)

    def _record_truncation(self, events: Iterable[ShapeEvent], result: ShapeResult) -> None:
        if not getattr(events, "truncated", False):
            return

        result.truncated = True
        result.error_message = getattr(events, "error_message", None)
        if self.config.truncation_policy is TruncationPolicy.WARN:
            message = "Event stream ended early; shape may be incomplete"
            self.logger.warning(message, extra={"error": result.error_message})
            result.add_diagnostic(
                DiagnosticSeverity.WARNING,
                message,
                "event_adapter",
                position={"event_index": self._event_index},
                details={"error": result.error_message},
            )

    def _record_unclosed(self, result: ShapeResult) -> None:
        unclosed = self.depth
        result.metrics.unclosed_at_end = unclosed
        if unclosed:
            result.add_diagnostic(
                DiagnosticSeverity.INFO,
                f"{unclosed} element(s) still open at end of stream",
                "shape_tree_builder",
                details={"open_path": self.current.path},
            )


def _rss_bytes() -> int:
    return psutil.Process().memory_info().rss


def build_shape(
    events: Iterable[ShapeEvent],
    config: Optional[BuilderConfig] = None,
    correlation_id: Optional[str] = None,
) -> ShapeResult:
    """Build a shape tree from an event sequence with a fresh builder."""
    return ShapeTreeBuilder(config, correlation_id).build(events)
