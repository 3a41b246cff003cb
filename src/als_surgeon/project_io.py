"""
Reading and writing Live Set files.

Ableton .als files are gzipped XML documents. Plain .xml dumps (as written by
`als-surgeon decompress`) are accepted too; the format is detected from the
gzip magic bytes, not the file extension.
"""

import gzip
import logging
import zlib
from pathlib import Path
from typing import Optional, Union

from .errors import DecompressionError, IoError

logger = logging.getLogger(__name__)

GZIP_MAGIC = b"\x1f\x8b"


def is_gzip(data: bytes) -> bool:
    return data[:2] == GZIP_MAGIC


def decompress(raw: bytes, path: Optional[Union[str, Path]] = None) -> bytes:
    """Decompress a gzip stream, raising DecompressionError if it is corrupt."""
    try:
        return gzip.decompress(raw)
    except (OSError, EOFError, zlib.error) as e:
        raise DecompressionError("Failed to decompress Live Set", path, cause=e)


def compress(xml_data: bytes) -> bytes:
    """Gzip `xml_data` the way Live expects an .als file."""
    return gzip.compress(xml_data)


def read_bytes(path: Union[str, Path]) -> bytes:
    path = Path(path)
    try:
        return path.read_bytes()
    except OSError as e:
        raise IoError("Failed to read file", path, cause=e)


def load_als(path: Union[str, Path]) -> bytes:
    """Return the XML bytes of a Live Set (.als) or plain XML file."""
    path = Path(path)
    raw = read_bytes(path)
    if is_gzip(raw):
        xml_data = decompress(raw, path)
        logger.debug(f"Decompressed {path.name}: {len(raw)} -> {len(xml_data)} bytes")
        return xml_data
    if path.suffix.lower() == '.als':
        raise DecompressionError("Not a gzip stream", path)
    logger.debug(f"Read plain XML from {path.name} ({len(raw)} bytes)")
    return raw


def write_output(data: bytes, path: Union[str, Path]) -> Path:
    """Write `data` to `path`, creating parent directories as needed."""
    path = Path(path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
    except OSError as e:
        raise IoError("Failed to write file", path, cause=e)
    logger.info(f"Wrote {len(data)} bytes to {path}")
    return path


def save_als(xml_data: bytes, path: Union[str, Path]) -> Path:
    """Compress and write a Live Set."""
    return write_output(compress(xml_data), path)
