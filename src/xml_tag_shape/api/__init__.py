"""Public API functions for tag shape extraction."""

from .shaper import DEFAULT_SOURCE, shape_events, shape_file, shape_string

__all__ = [
    "DEFAULT_SOURCE",
    "shape_events",
    "shape_file",
    "shape_string",
]
