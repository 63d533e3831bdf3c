"""Event layer: normalizes raw parse tokens into Open/Close events."""

from .adapter import (
    CloseEvent,
    EventAdapter,
    OpenEvent,
    ShapeEvent,
    iterparse_events,
    local_name,
    open_event_stream,
)

__all__ = [
    "CloseEvent",
    "EventAdapter",
    "OpenEvent",
    "ShapeEvent",
    "iterparse_events",
    "local_name",
    "open_event_stream",
]
