"""XML Tag Shape.

Reduces an XML document to the shape of its tag vocabulary: one tree node per
distinct tag name at each nesting level, with repeated siblings merged.

Progressive API Disclosure:
- Level 1: Simple functions - shape_file(), shape_string(), shape_events()
- Level 2: Configured builder - ShapeTreeBuilder with ShapeConfig
- Level 3: Raw events - EventAdapter over any lxml iterparse stream
"""

__version__ = "0.1.0"
__author__ = "XML Tag Shape Team"

from .api import shape_events, shape_file, shape_string
from .events import CloseEvent, EventAdapter, OpenEvent
from .shared.config import ShapeConfig, TruncationPolicy, UnderflowPolicy
from .shared.errors import ShapeError, SourceUnavailableError, StackUnderflowError
from .tree import ShapeNode, ShapeResult, ShapeTreeBuilder, render_shape

__all__ = [
    # Version and metadata
    "__author__",
    "__version__",

    # Level 1: Simple functions
    "shape_file",
    "shape_string",
    "shape_events",

    # Level 2: Builder and configuration
    "ShapeTreeBuilder",
    "ShapeConfig",
    "UnderflowPolicy",
    "TruncationPolicy",

    # Level 3: Events
    "EventAdapter",
    "OpenEvent",
    "CloseEvent",

    # Results and data structures
    "ShapeNode",
    "ShapeResult",
    "render_shape",

    # Errors
    "ShapeError",
    "SourceUnavailableError",
    "StackUnderflowError",
]
