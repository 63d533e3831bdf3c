"""Event adapter turning raw lxml parse events into Open/Close events.

The adapter is the only place that knows about the raw token source. It keeps
element-open and element-close tokens, reduces their tags to local names, drops
every other token kind, and converts a mid-stream parse or read failure into an
early, clean end of the sequence.
"""

from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import IO, Any, Iterable, Iterator, Optional, Tuple, Union

from lxml import etree

from xml_tag_shape.shared import EventSourceConfig, get_logger

RAW_EVENT_KINDS = ("start", "end", "comment", "pi", "start-ns", "end-ns")

RawEvent = Tuple[str, Any]


@dataclass(frozen=True)
class OpenEvent:
    """An element was opened."""

    name: str


@dataclass(frozen=True)
class CloseEvent:
    """An element was closed."""

    name: str


ShapeEvent = Union[OpenEvent, CloseEvent]


def local_name(payload: Any) -> str:
    """Return the namespace-free name of an lxml element or Clark-notation tag."""
    if isinstance(payload, str):
        return etree.QName(payload).localname
    return etree.QName(payload.tag).localname


class EventAdapter:
    """Lazy, single-pass iterator of :data:`ShapeEvent` values.

    Wraps any iterable of ``(kind, payload)`` pairs as produced by
    :func:`lxml.etree.iterparse`. Iteration stops at the end of the raw stream
    or at the first :class:`lxml.etree.XMLSyntaxError` / :class:`OSError` it
    raises; in the latter case :attr:`truncated` is set and :attr:`error` holds
    the exception.
    """

    def __init__(
        self,
        raw_events: Iterable[RawEvent],
        correlation_id: Optional[str] = None,
        release_elements: bool = False,
    ) -> None:
        self._raw = iter(raw_events)
        self._release_elements = release_elements
        self._exhausted = False
        self.logger = get_logger(__name__, correlation_id, "event_adapter")

        self.truncated = False
        self.error: Optional[BaseException] = None
        self.events_emitted = 0
        self.tokens_skipped = 0

    def __iter__(self) -> Iterator[ShapeEvent]:
        return self

    def __next__(self) -> ShapeEvent:
        while not self._exhausted:
            try:
                kind, payload = next(self._raw)
            except StopIteration:
                self._exhausted = True
                break
            except (etree.XMLSyntaxError, OSError) as e:
                self._truncate(e)
                break

            if kind == "start":
                event: ShapeEvent = OpenEvent(local_name(payload))
            elif kind == "end":
                event = CloseEvent(local_name(payload))
                if self._release_elements:
                    _release(payload)
            else:
                self.tokens_skipped += 1
                continue

            self.events_emitted += 1
            return event

        raise StopIteration

    @property
    def error_message(self) -> Optional[str]:
        return str(self.error) if self.error is not None else None

    def _truncate(self, error: BaseException) -> None:
        self._exhausted = True
        self.truncated = True
        self.error = error
        self.logger.error(
            f"Event stream truncated: {error}",
            extra={
                "error_type": type(error).__name__,
                "events_emitted": self.events_emitted,
            },
        )


def _release(element: Any) -> None:
    """Drop a finished lxml element and its already-processed siblings."""
    if not hasattr(element, "getparent"):
        return
    element.clear(keep_tail=True)
    parent = element.getparent()
    if parent is None:
        return
    while element.getprevious() is not None:
        del parent[0]


def iterparse_events(
    source: Union[str, Path, IO[bytes]],
    config: Optional[EventSourceConfig] = None,
) -> Iterator[RawEvent]:
    """Create the raw lxml event stream for a path or binary file object."""
    config = config or EventSourceConfig()
    if isinstance(source, Path):
        source = str(source)
    return etree.iterparse(
        source,
        events=RAW_EVENT_KINDS,
        huge_tree=config.huge_tree,
        no_network=config.no_network,
        recover=config.recover,
    )


@contextmanager
def open_event_stream(
    path: Union[str, Path],
    config: Optional[EventSourceConfig] = None,
    correlation_id: Optional[str] = None,
) -> Iterator[EventAdapter]:
    """Open ``path`` and yield an :class:`EventAdapter` over its elements.

    The file handle is closed when the ``with`` block exits, whether the
    sequence was exhausted, truncated, or abandoned part way.

    Raises:
        OSError: if the file cannot be opened
    """
    config = config or EventSourceConfig()
    with Path(path).open("rb") as handle:
        yield EventAdapter(
            iterparse_events(handle, config),
            correlation_id=correlation_id,
            release_elements=config.release_elements,
        )
