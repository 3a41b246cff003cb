"""
Named-subtree scanner.

The depth-counting state machine shared by the tag filter and the tag
extractor. It watches an event stream and reports, for every event, where
that event sits relative to subtrees rooted at a "marked" element name:

    OUTSIDE     not inside any marked subtree
    ENTER       Start of a marked root (depth becomes 1)
    INSIDE      any event nested in a marked subtree
    EXIT        End closing the marked root (depth back to 0)
    ROOT_EMPTY  a self-closing marked element seen while outside

While inside, every Start increments the depth and every End decrements it,
whatever their names, so a nested element with the root's own name does not
open a second subtree. What to do on each position is up to the caller.
"""

from enum import Enum
from typing import Callable, Iterable, Optional

from .errors import MalformedXmlError
from .events import EmptyElement, EndElement, Event, StartElement


class ScanPosition(Enum):
    OUTSIDE = "outside"
    ENTER = "enter"
    INSIDE = "inside"
    EXIT = "exit"
    ROOT_EMPTY = "root_empty"


class SubtreeScanner:
    """Tracks whether the stream is inside a subtree rooted at a marked name.

    Args:
        is_root: Predicate on an element name; True marks a subtree root.
    """

    def __init__(self, is_root: Callable[[str], bool]):
        self._is_root = is_root
        self._depth = 0
        self._root_name: Optional[str] = None

    @classmethod
    def for_names(cls, names: Iterable[str]) -> 'SubtreeScanner':
        marked = frozenset(names)
        return cls(marked.__contains__)

    @property
    def inside(self) -> bool:
        return self._depth > 0

    @property
    def depth(self) -> int:
        return self._depth

    @property
    def root_name(self) -> Optional[str]:
        """Name of the root of the subtree currently open, if any."""
        return self._root_name

    def feed(self, event: Event) -> ScanPosition:
        """Advance over one event and report its position."""
        if self._depth == 0:
            if isinstance(event, StartElement) and self._is_root(event.name):
                self._depth = 1
                self._root_name = event.name
                return ScanPosition.ENTER
            if isinstance(event, EmptyElement) and self._is_root(event.name):
                return ScanPosition.ROOT_EMPTY
            return ScanPosition.OUTSIDE

        if isinstance(event, StartElement):
            self._depth += 1
        elif isinstance(event, EndElement):
            self._depth -= 1
            if self._depth == 0:
                if event.name != self._root_name:
                    raise MalformedXmlError(
                        f"</{event.name}> closed subtree rooted at <{self._root_name}>"
                    )
                self._root_name = None
                return ScanPosition.EXIT
        return ScanPosition.INSIDE
