"""
Error types for ALS Surgeon.

Every failure surfaced by the engine is a SurgeonError subclass carrying an
ErrorCategory, so the CLI (or any caller) can report it uniformly. Nothing
here is recoverable: processing stops at the first error and no output is
written.
"""

from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional, Union


class ErrorCategory(Enum):
    """Categories of errors in the processing pipeline."""
    IO = "io"                       # Source unreadable / destination unwritable
    DECOMPRESSION = "decompression" # Corrupt or truncated gzip stream
    MALFORMED_XML = "malformed_xml" # Unbalanced tags, bad tokens, bad names
    ATTRIBUTE = "attribute"         # Attribute value not valid UTF-8


class SurgeonError(Exception):
    """Base error for everything raised by als_surgeon."""

    category: ErrorCategory = ErrorCategory.IO

    def __init__(self, message: str, path: Optional[Union[str, Path]] = None):
        self.message = message
        self.path = str(path) if path is not None else None
        context = f" ({self.path})" if self.path else ""
        super().__init__(f"{message}{context}")

    def to_dict(self) -> Dict[str, Any]:
        return {
            'category': self.category.value,
            'message': self.message,
            'path': self.path,
        }


class IoError(SurgeonError):
    """Source file missing/unreadable or destination unwritable."""

    category = ErrorCategory.IO

    def __init__(self, message: str, path: Optional[Union[str, Path]] = None,
                 cause: Optional[BaseException] = None):
        self.cause = cause
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message, path)


class DecompressionError(SurgeonError):
    """The gzip stream is invalid, corrupt or truncated."""

    category = ErrorCategory.DECOMPRESSION

    def __init__(self, message: str, path: Optional[Union[str, Path]] = None,
                 cause: Optional[BaseException] = None):
        self.cause = cause
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message, path)


class MalformedXmlError(SurgeonError):
    """The token stream is structurally invalid."""

    category = ErrorCategory.MALFORMED_XML

    def __init__(self, message: str, offset: Optional[int] = None,
                 line: Optional[int] = None, column: Optional[int] = None,
                 path: Optional[Union[str, Path]] = None):
        self.offset = offset
        self.line = line
        self.column = column
        if line is not None and column is not None:
            message = f"{message} at line {line}, column {column}"
        super().__init__(message, path)

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data.update({
            'offset': self.offset,
            'line': self.line,
            'column': self.column,
        })
        return data


class AttributeDecodeError(MalformedXmlError):
    """An attribute value is not valid text in the document encoding."""

    category = ErrorCategory.ATTRIBUTE

    def __init__(self, element: str, key: str, offset: Optional[int] = None,
                 line: Optional[int] = None, column: Optional[int] = None):
        self.element = element
        self.key = key
        super().__init__(
            f"Attribute '{key}' of <{element}> is not valid UTF-8",
            offset=offset, line=line, column=column,
        )

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data.update({'element': self.element, 'key': self.key})
        return data
