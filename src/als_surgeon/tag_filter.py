"""
Tag Filter

Removes named elements, together with everything nested inside them, from a
Live Set document and writes the rest back out with stable indentation.

    >>> filter_tags(b'<A><SideChain><X/></SideChain><B/></A>', {'SideChain'})
    b'<A>\\n    <B/>\\n</A>\\n'

Retained tags are copied byte-for-byte from the source (attribute order and
quoting are kept); only the whitespace between tags is replaced:

    Start   indent + tag on its own line, then indent one unit deeper
    End     indent one unit shallower, then indent + tag on its own line
    Empty   indent + tag on its own line (also declarations, comments, ...)
    Text    passed through unchanged; whitespace-only runs are dropped

A tag right next to retained text is written flush against it, so
`<B>hello</B>` stays on one line and the text keeps exactly its own
whitespace. Filtering the output a second time changes nothing.

The whole output is built in memory and only returned once the input has been
read to the end, so a malformed document never yields partial output.
"""

import logging
from dataclasses import dataclass, asdict
from typing import Dict, Iterable, List

from .events import (
    EmptyElement, EndElement, EndOfStream, PASSTHROUGH_EVENTS, StartElement,
    Text, iter_events,
)
from .scanner import ScanPosition, SubtreeScanner

logger = logging.getLogger(__name__)

INDENT_UNIT = "    "


@dataclass
class FilterStats:
    """Counters for one filter run."""
    subtrees_removed: int = 0
    empty_elements_removed: int = 0
    events_suppressed: int = 0
    elements_emitted: int = 0
    bytes_in: int = 0
    bytes_out: int = 0

    def to_dict(self) -> Dict[str, int]:
        return asdict(self)


class Indentation:
    """Indent string grown and shrunk by a fixed unit; never below zero."""

    def __init__(self, unit: str = INDENT_UNIT):
        self.unit = unit
        self.level = 0

    def __str__(self) -> str:
        return self.unit * self.level

    def push(self):
        self.level += 1

    def pop(self):
        if self.level > 0:
            self.level -= 1


class TagFilter:
    """
    Single-pass subtree remover.

    A TagFilter can be reused; each call to `filter` starts from fresh state
    and leaves its counters in `stats`.
    """

    def __init__(self, names_to_delete: Iterable[str]):
        if isinstance(names_to_delete, str):
            names_to_delete = [names_to_delete]
        self.names_to_delete = frozenset(names_to_delete)
        self.stats = FilterStats()

    @staticmethod
    def _tag_prefix(out: List[bytes], indent: Indentation, after_text: bool) -> bytes:
        """Line break and indent written before a tag.

        A tag that directly follows retained text gets nothing, so text runs
        keep their own whitespace and filtering the output again is a no-op.
        """
        if after_text:
            return b''
        prefix = str(indent).encode('ascii')
        return b'\n' + prefix if out else prefix

    def filter(self, document: bytes) -> bytes:
        """Return `document` without the marked subtrees, re-indented."""
        self.stats = FilterStats(bytes_in=len(document))
        scanner = SubtreeScanner.for_names(self.names_to_delete)
        indent = Indentation()
        out: List[bytes] = []
        after_text = False

        for event in iter_events(document):
            if isinstance(event, EndOfStream):
                break

            position = scanner.feed(event)
            if position is ScanPosition.ENTER:
                logger.debug(f"Removing <{event.name}> subtree")
                self.stats.subtrees_removed += 1
                self.stats.events_suppressed += 1
                continue
            if position is ScanPosition.ROOT_EMPTY:
                logger.debug(f"Removing self-closing <{event.name}/>")
                self.stats.empty_elements_removed += 1
                self.stats.events_suppressed += 1
                continue
            if position is not ScanPosition.OUTSIDE:
                self.stats.events_suppressed += 1
                continue

            if isinstance(event, StartElement):
                out.append(self._tag_prefix(out, indent, after_text) + event.raw)
                indent.push()
                after_text = False
                self.stats.elements_emitted += 1
            elif isinstance(event, EndElement):
                indent.pop()
                out.append(self._tag_prefix(out, indent, after_text) + event.raw)
                after_text = False
            elif isinstance(event, Text):
                if not event.is_whitespace:
                    out.append(event.content)
                    after_text = True
            elif isinstance(event, PASSTHROUGH_EVENTS):
                out.append(self._tag_prefix(out, indent, after_text) + event.raw)
                after_text = False
                if isinstance(event, EmptyElement):
                    self.stats.elements_emitted += 1

        if out and not after_text:
            out.append(b'\n')
        result = b''.join(out)
        self.stats.bytes_out = len(result)
        logger.info(
            f"Filter removed {self.stats.subtrees_removed} subtree(s) and "
            f"{self.stats.empty_elements_removed} self-closing element(s) "
            f"({self.stats.bytes_in} -> {self.stats.bytes_out} bytes)"
        )
        return result


def filter_tags(document: bytes, names_to_delete: Iterable[str]) -> bytes:
    """Remove every subtree rooted at a name in `names_to_delete`.

    An empty set only reformats the document.
    """
    return TagFilter(names_to_delete).filter(document)
