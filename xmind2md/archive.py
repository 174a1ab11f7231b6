"""Pull the content.xml payload out of an .xmind archive."""

from __future__ import annotations

import logging
import zipfile
import zlib
from io import BytesIO
from pathlib import Path
from typing import Union

from .errors import FileError

logger = logging.getLogger(__name__)

# Tried in order; the first entry present wins.
CONTENT_PATHS = (
    "content/content.xml",
    "content.xml",
    "src/content.xml",
    "META-INF/content.xml",
)

# zipfile signals encrypted entries with RuntimeError, unknown compression
# with NotImplementedError and truncated streams with EOFError.
_ARCHIVE_ERRORS = (
    zipfile.BadZipFile,
    zlib.error,
    RuntimeError,
    NotImplementedError,
    EOFError,
    OSError,
)


def read_archive(source: Union[bytes, str, Path]) -> bytes:
    """Return the raw bytes of an archive given as bytes or a file path."""
    if isinstance(source, (bytes, bytearray)):
        return bytes(source)
    path = Path(source)
    if not path.exists():
        raise FileError(f"File not found: {path}")
    try:
        return path.read_bytes()
    except OSError as exc:
        raise FileError(f"Could not read {path}: {exc}") from exc


def read_content_xml(data: bytes) -> str:
    """Extract the XML text of the first known content entry.

    Raises:
        FileError: If the bytes are not a ZIP archive, the content entry
            is corrupt, encrypted or uses an unsupported compression
            method, or no candidate entry exists.
    """
    try:
        with zipfile.ZipFile(BytesIO(data), "r") as zf:
            names = set(zf.namelist())
            for name in CONTENT_PATHS:
                if name in names:
                    logger.debug("Reading %s from archive", name)
                    return zf.read(name).decode("utf-8-sig")
    except _ARCHIVE_ERRORS as exc:
        raise FileError(f"Not a valid XMind archive: {exc}") from exc
    except UnicodeDecodeError as exc:
        raise FileError(f"content.xml is not valid UTF-8: {exc}") from exc

    raise FileError("Could not find content.xml in XMind file")
