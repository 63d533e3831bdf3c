"""Shape tree construction and rendering.

Key Components:
    ShapeNode: One distinct tag name at one position, with uniquely named children
    ShapeTreeBuilder: Streaming builder consuming Open/Close events
    ShapeResult: Finished tree with diagnostics and metrics
    render_shape: Indented text listing of a finished tree
"""

from .builder import ShapeResult, ShapeTreeBuilder, build_shape
from .node import ShapeNode
from .render import render_lines, render_shape

__all__ = [
    "ShapeNode",
    "ShapeResult",
    "ShapeTreeBuilder",
    "build_shape",
    "render_lines",
    "render_shape",
]
