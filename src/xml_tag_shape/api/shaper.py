"""Simple functions for extracting the tag shape of XML documents.

These wire the event adapter, the tree builder and the source lifetime
together. File problems surface as :class:`SourceUnavailableError`; malformed
markup never raises and instead yields a truncated :class:`ShapeResult`.
"""

import io
from pathlib import Path
from typing import Iterable, Optional, Union

from xml_tag_shape.events import EventAdapter, ShapeEvent, iterparse_events, open_event_stream
from xml_tag_shape.shared import ShapeConfig, SourceUnavailableError, get_logger
from xml_tag_shape.tree import ShapeResult, ShapeTreeBuilder

DEFAULT_SOURCE = "sitemap.xml"


def shape_events(
    events: Iterable[ShapeEvent],
    config: Optional[ShapeConfig] = None,
) -> ShapeResult:
    """Build a shape tree from an already normalized event sequence."""
    config = config or ShapeConfig()
    builder = ShapeTreeBuilder(config.builder, config.correlation_id)
    return builder.build(events)


def shape_string(
    content: Union[str, bytes],
    config: Optional[ShapeConfig] = None,
) -> ShapeResult:
    """Extract the tag shape of an in-memory XML document.

    Examples:
        >>> print(shape_string("<a><b/><b/></a>").render(), end="")
        <a>
          <b />
        </a>
    """
    config = config or ShapeConfig()
    data = content.encode("utf-8") if isinstance(content, str) else content
    adapter = EventAdapter(
        iterparse_events(io.BytesIO(data), config.source),
        correlation_id=config.correlation_id,
        release_elements=config.source.release_elements,
    )
    result = shape_events(adapter, config)
    result.source = "<string>"
    return result


def shape_file(
    file_path: Union[str, Path] = DEFAULT_SOURCE,
    config: Optional[ShapeConfig] = None,
) -> ShapeResult:
    """Extract the tag shape of an XML file.

    The file is closed before this function returns, whether the event stream
    ran to completion or was truncated by malformed markup.

    Raises:
        SourceUnavailableError: if the file is missing, is not a regular file,
            or cannot be opened
    """
    config = config or ShapeConfig()
    logger = get_logger(__name__, config.correlation_id, "shape_file")
    path_obj = Path(file_path)

    if not path_obj.exists():
        raise SourceUnavailableError(f"File not found: {path_obj}", path=str(path_obj))
    if not path_obj.is_file():
        raise SourceUnavailableError(f"Path is not a file: {path_obj}", path=str(path_obj))

    logger.info("Starting file shape extraction", extra={"file_path": str(path_obj)})

    try:
        with open_event_stream(path_obj, config.source, config.correlation_id) as adapter:
            result = shape_events(adapter, config)
    except PermissionError as e:
        raise SourceUnavailableError(
            f"Permission denied accessing file: {path_obj}", path=str(path_obj)
        ) from e
    except IsADirectoryError as e:
        raise SourceUnavailableError(f"Path is not a file: {path_obj}", path=str(path_obj)) from e
    except FileNotFoundError as e:
        raise SourceUnavailableError(f"File not found: {path_obj}", path=str(path_obj)) from e

    result.source = str(path_obj)
    return result
