"""Indented text rendering of a finished shape tree."""

from typing import List, Optional, Tuple

from xml_tag_shape.shared import RenderConfig

from .node import ShapeNode

_OPEN = 0
_CLOSE = 1


def _ordered_children(node: ShapeNode, sort_children: bool) -> List[Tuple[str, ShapeNode]]:
    items = list(node.children.items())
    if sort_children:
        items.sort(key=lambda item: item[0])
    return items


def render_lines(node: ShapeNode, config: Optional[RenderConfig] = None) -> List[str]:
    """Render the children of ``node`` as a list of indented lines.

    A leaf child becomes ``<name />``; any other child becomes ``<name>``, its
    rendered children one level deeper, then ``</name>``.
    """
    config = config or RenderConfig()
    unit = " " * config.indent_width
    lines: List[str] = []

    stack = [
        (_OPEN, name, child, 0)
        for name, child in reversed(_ordered_children(node, config.sort_children))
    ]
    while stack:
        action, name, current, depth = stack.pop()
        indent = unit * depth
        if action == _CLOSE:
            lines.append(f"{indent}</{name}>")
        elif current.is_leaf:
            lines.append(f"{indent}<{name} />")
        else:
            lines.append(f"{indent}<{name}>")
            stack.append((_CLOSE, name, current, depth))
            for child_name, child in reversed(
                _ordered_children(current, config.sort_children)
            ):
                stack.append((_OPEN, child_name, child, depth + 1))

    return lines


def render_shape(node: ShapeNode, config: Optional[RenderConfig] = None) -> str:
    """Render a shape tree as newline-terminated indented text."""
    lines = render_lines(node, config)
    if not lines:
        return ""
    return "\n".join(lines) + "\n"
