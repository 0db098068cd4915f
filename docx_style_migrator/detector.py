"""
Format detection for Word documents.

Classifies a byte stream as a legacy compound-binary document (``.doc``)
or a modern zip package (``.docx``) by its magic number, falling back to
the advisory filename extension.
"""

import logging
from pathlib import Path
from typing import Iterable, Optional, Union

from .exceptions import UnrecognizedFormatError, UnsupportedFormatError
from .utils.enums import DocumentFormat

logger = logging.getLogger(__name__)

ZIP_SIGNATURE = b"PK\x03\x04"
CFB_SIGNATURE = b"\xd0\xcf\x11\xe0\xa1\xb1\x1a\xe1"
HEADER_SIZE = len(CFB_SIGNATURE)

_EXTENSIONS = {fmt.value: fmt for fmt in DocumentFormat}


def _from_extension(filename: Optional[str]) -> Optional[DocumentFormat]:
    if not filename:
        return None
    suffix = Path(filename).suffix
    return _EXTENSIONS.get(suffix[1:].lower()) if suffix else None


def detect_format(header: bytes, filename: Optional[str] = None,
                  allowed: Optional[Iterable[DocumentFormat]] = None) -> DocumentFormat:
    """
    Detect the format of a document.

    Args:
        header: Leading bytes of the document (at least 8 for a compound file)
        filename: Advisory filename used when no signature matches
        allowed: Formats the caller accepts (all when None)

    Returns:
        Detected format

    Raises:
        UnrecognizedFormatError: If neither signature nor extension identify the file
        UnsupportedFormatError: If the detected format is not allowed
    """
    if header[:len(ZIP_SIGNATURE)] == ZIP_SIGNATURE:
        detected = DocumentFormat.MODERN
    elif header[:len(CFB_SIGNATURE)] == CFB_SIGNATURE:
        detected = DocumentFormat.LEGACY
    else:
        detected = _from_extension(filename)
        if detected is None:
            raise UnrecognizedFormatError("Unrecognized document format", filename or None)
        logger.debug(f"No signature matched, using extension of {filename}")

    if allowed is not None and detected not in set(allowed):
        raise UnsupportedFormatError(f"Unsupported document format: .{detected.value}", filename or None)
    return detected


def detect_file_format(path: Union[str, Path], filename: Optional[str] = None,
                       allowed: Optional[Iterable[DocumentFormat]] = None) -> DocumentFormat:
    """
    Detect the format of a file on disk.

    Args:
        path: File to inspect
        filename: Advisory filename (defaults to the path's own name)
        allowed: Formats the caller accepts (all when None)

    Returns:
        Detected format
    """
    path = Path(path)
    with open(path, "rb") as handle:
        header = handle.read(HEADER_SIZE)
    detected = detect_format(header, filename or path.name, allowed)
    logger.debug(f"Detected {path} as .{detected.value}")
    return detected
