"""Shape tree node.

A :class:`ShapeNode` stands for one distinct tag name at one position in the
nesting hierarchy. Repeated siblings share a node, so ``children`` is keyed by
tag name.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Mapping, Optional, Tuple


@dataclass(eq=False)
class ShapeNode:
    """One distinct tag name observed under one parent.

    Equality is structural: two nodes are equal when their ``children``
    mappings hold the same names with equal subtrees. Names and parent links
    do not take part, and neither does sibling order.
    """

    name: Optional[str] = None
    children: Dict[str, "ShapeNode"] = field(default_factory=dict)
    parent: Optional["ShapeNode"] = field(default=None, repr=False)

    def __post_init__(self) -> None:
        """Establish parent links for children passed to the constructor."""
        for child_name, child in self.children.items():
            if not isinstance(child, ShapeNode):
                raise TypeError("Children must be ShapeNode instances")
            child.parent = self
            if child.name is None:
                child.name = child_name

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ShapeNode):
            return NotImplemented
        pending = [(self, other)]
        while pending:
            left, right = pending.pop()
            if left is right:
                continue
            if left.children.keys() != right.children.keys():
                return False
            pending.extend(
                (child, right.children[name]) for name, child in left.children.items()
            )
        return True

    def __str__(self) -> str:
        from .render import render_shape

        return render_shape(self)

    @property
    def is_root(self) -> bool:
        return self.parent is None

    @property
    def is_leaf(self) -> bool:
        return not self.children

    @property
    def depth(self) -> int:
        """Number of links between this node and the root."""
        depth = 0
        node = self.parent
        while node is not None:
            depth += 1
            node = node.parent
        return depth

    @property
    def path(self) -> str:
        """Slash-separated tag names from the root, e.g. ``/urlset/url/loc``."""
        names: List[str] = []
        node: Optional[ShapeNode] = self
        while node is not None and node.parent is not None:
            names.append(node.name or "")
            node = node.parent
        return "/" + "/".join(reversed(names))

    def child(self, name: str) -> Optional["ShapeNode"]:
        return self.children.get(name)

    def get_or_add_child(self, name: str) -> Tuple["ShapeNode", bool]:
        """Return the child for ``name``, creating it on first sighting.

        Returns:
            Tuple of the child node and whether it was newly created
        """
        existing = self.children.get(name)
        if existing is not None:
            return existing, False
        created = ShapeNode(name=name, parent=self)
        self.children[name] = created
        return created, True

    def iter_nodes(self) -> Iterator["ShapeNode"]:
        """Iterate over this node and all descendants, depth first."""
        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(list(node.children.values())))

    @property
    def node_count(self) -> int:
        """Number of descendant nodes, excluding this one."""
        return sum(1 for _ in self.iter_nodes()) - 1

    @property
    def max_depth(self) -> int:
        """Length of the longest downward path from this node."""
        deepest = 0
        stack = [(self, 0)]
        while stack:
            node, level = stack.pop()
            deepest = max(deepest, level)
            stack.extend((child, level + 1) for child in node.children.values())
        return deepest

    def tag_names(self) -> List[str]:
        """Sorted set of every tag name anywhere below this node."""
        return sorted({node.name for node in self.iter_nodes() if node is not self and node.name})

    def to_dict(self) -> Dict[str, Any]:
        """Nested ``{name: {child: {...}}}`` mapping of the subtree."""
        result: Dict[str, Any] = {}
        stack = [(self, result)]
        while stack:
            node, target = stack.pop()
            for name, child in node.children.items():
                target[name] = {}
                stack.append((child, target[name]))
        return result

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], name: Optional[str] = None) -> "ShapeNode":
        """Build a detached tree from a nested mapping (inverse of :meth:`to_dict`)."""
        root = cls(name=name)
        stack = [(root, data)]
        while stack:
            node, mapping = stack.pop()
            for child_name, child_data in mapping.items():
                child, _ = node.get_or_add_child(child_name)
                stack.append((child, child_data or {}))
        return root
