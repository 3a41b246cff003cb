"""
XML Event Reader

Turns a decompressed Live Set (or any well-formed XML byte string) into a lazy
stream of events, one per tag or text run, without building a tree.

Unlike ElementTree, the reader keeps self-closing tags (<Foo/>) apart from
open/close pairs (<Foo></Foo>), and every tag event keeps the exact source
bytes so a transformer can write retained tags back unchanged.

Events:
    StartElement   <Name attr="v">
    EndElement     </Name>
    EmptyElement   <Name attr="v"/>
    Text           character data between tags (raw, still escaped)
    Declaration    <?xml version="1.0" encoding="UTF-8"?>
    ProcessingInstruction, Comment, CData, Doctype
    EndOfStream    always the last event of a successful read

Tag balance is checked while reading: a mismatched or unexpected end tag, or
an element still open at the end of input, raises MalformedXmlError.
"""

import re
from dataclasses import dataclass
from typing import Iterator, List, Optional, Tuple, Union

from .errors import AttributeDecodeError, MalformedXmlError


Attributes = Tuple[Tuple[str, str], ...]

_NAME = rb'[^\s<>/=!?"\'][^\s<>/="\']*'
_ATTRIBUTE = rb'\s+(' + _NAME + rb')\s*=\s*(?:"([^"<]*)"|\'([^\'<]*)\')'

_START_TAG_RE = re.compile(
    rb'<(' + _NAME + rb')((?:\s+' + _NAME + rb'\s*=\s*(?:"[^"<]*"|\'[^\'<]*\'))*)\s*(/?)>'
)
_END_TAG_RE = re.compile(rb'</(' + _NAME + rb')\s*>')
_ATTRIBUTE_RE = re.compile(_ATTRIBUTE)
_DECLARATION_RE = re.compile(rb'<\?xml[\s?]')

_REFERENCE_RE = re.compile(r'&(#[0-9]+|#x[0-9a-fA-F]+|amp|lt|gt|quot|apos);')
_PREDEFINED_ENTITIES = {
    'amp': '&',
    'lt': '<',
    'gt': '>',
    'quot': '"',
    'apos': "'",
}


@dataclass(frozen=True)
class StartElement:
    name: str
    attributes: Attributes
    raw: bytes

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        return first_attribute(self.attributes, key, default)


@dataclass(frozen=True)
class EndElement:
    name: str
    raw: bytes


@dataclass(frozen=True)
class EmptyElement:
    name: str
    attributes: Attributes
    raw: bytes

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        return first_attribute(self.attributes, key, default)


@dataclass(frozen=True)
class Text:
    content: bytes

    @property
    def is_whitespace(self) -> bool:
        return not self.content.strip()


@dataclass(frozen=True)
class Declaration:
    raw: bytes


@dataclass(frozen=True)
class ProcessingInstruction:
    raw: bytes


@dataclass(frozen=True)
class Comment:
    raw: bytes


@dataclass(frozen=True)
class CData:
    raw: bytes


@dataclass(frozen=True)
class Doctype:
    raw: bytes


@dataclass(frozen=True)
class EndOfStream:
    pass


Event = Union[
    StartElement, EndElement, EmptyElement, Text, Declaration,
    ProcessingInstruction, Comment, CData, Doctype, EndOfStream,
]

# Events a transformer writes back verbatim as a single line
PASSTHROUGH_EVENTS = (EmptyElement, Declaration, ProcessingInstruction,
                      Comment, CData, Doctype)


def first_attribute(attributes: Attributes, key: str,
                    default: Optional[str] = None) -> Optional[str]:
    """Return the value of the first attribute named `key`.

    Duplicate keys are kept by the reader; lookups are first-wins.
    """
    for attr_key, value in attributes:
        if attr_key == key:
            return value
    return default


def unescape_value(value: str) -> str:
    """Resolve predefined entities and character references in a value.

    Anything else that looks like an entity is left untouched.
    """
    if '&' not in value:
        return value
    return _REFERENCE_RE.sub(_resolve_reference, value)


def _resolve_reference(match: 're.Match') -> str:
    ref = match.group(1)
    if ref[0] != '#':
        return _PREDEFINED_ENTITIES[ref]
    try:
        if ref[1] == 'x':
            return chr(int(ref[2:], 16))
        return chr(int(ref[1:]))
    except (ValueError, OverflowError):
        return match.group(0)


def location(document: bytes, offset: int) -> Tuple[int, int]:
    """1-based (line, column) of a byte offset."""
    line = document.count(b'\n', 0, offset) + 1
    column = offset - (document.rfind(b'\n', 0, offset) + 1) + 1
    return line, column


def _malformed(document: bytes, offset: int, message: str) -> MalformedXmlError:
    line, column = location(document, offset)
    return MalformedXmlError(message, offset=offset, line=line, column=column)


def _decode_name(document: bytes, raw_name: bytes, offset: int) -> str:
    try:
        return raw_name.decode('utf-8')
    except UnicodeDecodeError:
        raise _malformed(document, offset, "Invalid byte sequence in name")


def _parse_attributes(document: bytes, element: str, span: bytes,
                      offset: int) -> Attributes:
    attributes = []
    for match in _ATTRIBUTE_RE.finditer(span):
        key_offset = offset + match.start(1)
        key = _decode_name(document, match.group(1), key_offset)
        raw_value = match.group(2) if match.group(2) is not None else match.group(3)
        try:
            value = raw_value.decode('utf-8')
        except UnicodeDecodeError:
            line, column = location(document, key_offset)
            raise AttributeDecodeError(element, key, offset=key_offset,
                                       line=line, column=column)
        attributes.append((key, unescape_value(value)))
    return tuple(attributes)


def _find_terminator(document: bytes, start: int, terminator: bytes,
                     what: str) -> int:
    """Index just past `terminator`, searching from `start`."""
    end = document.find(terminator, start)
    if end == -1:
        raise _malformed(document, start, f"Unterminated {what}")
    return end + len(terminator)


def _doctype_end(document: bytes, start: int) -> int:
    close = document.find(b'>', start)
    bracket = document.find(b'[', start)
    if bracket != -1 and (close == -1 or bracket < close):
        subset_end = document.find(b']', bracket)
        if subset_end == -1:
            raise _malformed(document, start, "Unterminated DOCTYPE")
        close = document.find(b'>', subset_end)
    if close == -1:
        raise _malformed(document, start, "Unterminated DOCTYPE")
    return close + 1


def iter_events(document: bytes) -> Iterator[Event]:
    """Lazily yield the events of `document`.

    The last event is always EndOfStream. Any structural problem raises
    MalformedXmlError (or AttributeDecodeError) at the point it is found.
    """
    if not isinstance(document, (bytes, bytearray, memoryview)):
        raise TypeError(f"document must be bytes, not {type(document).__name__}")
    document = bytes(document)

    open_elements: List[str] = []
    pos = 0
    size = len(document)

    while pos < size:
        lt = document.find(b'<', pos)
        if lt == -1:
            yield Text(document[pos:])
            break
        if lt > pos:
            yield Text(document[pos:lt])

        if document.startswith(b'<?', lt):
            end = _find_terminator(document, lt + 2, b'?>', "processing instruction")
            raw = document[lt:end]
            if _DECLARATION_RE.match(raw):
                yield Declaration(raw)
            else:
                yield ProcessingInstruction(raw)

        elif document.startswith(b'<!--', lt):
            end = _find_terminator(document, lt + 4, b'-->', "comment")
            yield Comment(document[lt:end])

        elif document.startswith(b'<![CDATA[', lt):
            end = _find_terminator(document, lt + 9, b']]>', "CDATA section")
            yield CData(document[lt:end])

        elif document.startswith(b'<!', lt):
            end = _doctype_end(document, lt + 2)
            yield Doctype(document[lt:end])

        elif document.startswith(b'</', lt):
            match = _END_TAG_RE.match(document, lt)
            if match is None:
                raise _malformed(document, lt, "Invalid end tag")
            name = _decode_name(document, match.group(1), lt + 2)
            if not open_elements:
                raise _malformed(document, lt, f"Unexpected end tag </{name}>")
            expected = open_elements.pop()
            if name != expected:
                raise _malformed(
                    document, lt,
                    f"Mismatched end tag: expected </{expected}>, found </{name}>"
                )
            end = match.end()
            yield EndElement(name, document[lt:end])

        else:
            match = _START_TAG_RE.match(document, lt)
            if match is None:
                raise _malformed(document, lt, "Invalid start tag")
            name = _decode_name(document, match.group(1), lt + 1)
            attributes = _parse_attributes(document, name, match.group(2),
                                           match.start(2))
            end = match.end()
            raw = document[lt:end]
            if match.group(3):
                yield EmptyElement(name, attributes, raw)
            else:
                open_elements.append(name)
                yield StartElement(name, attributes, raw)

        pos = end

    if open_elements:
        raise _malformed(document, size,
                         f"Unclosed element <{open_elements[-1]}> at end of input")

    yield EndOfStream()
