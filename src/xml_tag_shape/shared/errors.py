"""Exception hierarchy for tag shape extraction."""

from typing import Optional


class ShapeError(Exception):
    """Base exception for shape extraction failures."""


class SourceUnavailableError(ShapeError):
    """Raised when the input document cannot be opened or read."""

    def __init__(self, message: str, path: Optional[str] = None) -> None:
        super().__init__(message)
        self.path = path


class StackUnderflowError(ShapeError):
    """Raised for a closing tag with no open element above the root.

    Only raised under ``UnderflowPolicy.RAISE``; the default policy ignores it.
    """

    def __init__(self, message: str, name: Optional[str] = None,
                 event_index: Optional[int] = None) -> None:
        super().__init__(message)
        self.name = name
        self.event_index = event_index


class DepthLimitError(ShapeError):
    """Raised when nesting exceeds ``BuilderConfig.max_depth``."""

    def __init__(self, message: str, depth: int, limit: int) -> None:
        super().__init__(message)
        self.depth = depth
        self.limit = limit
