# docstitch/core/functions/file_format.py
"""
File Format Detection

Identifies the word-processing container behind a byte buffer by its magic
number, falling back to the file extension.

- OLE2 compound file (legacy .doc):  D0 CF 11 E0 A1 B1 1A E1
- ZIP package with [Content_Types].xml (.docx)
"""
import io
import logging
import zipfile
from enum import Enum
from typing import Optional

logger = logging.getLogger("document-processor")


class DocumentFormat(Enum):
    """Container format of a word-processing document."""
    OLE = "doc"
    OOXML = "docx"
    UNKNOWN = "unknown"


MAGIC_NUMBERS = {
    'OLE': b'\xd0\xcf\x11\xe0\xa1\xb1\x1a\xe1',
    'ZIP': b'PK\x03\x04',
}

EXTENSION_FORMATS = {
    'doc': DocumentFormat.OLE,
    'dot': DocumentFormat.OLE,
    'docx': DocumentFormat.OOXML,
    'docm': DocumentFormat.OOXML,
    'dotx': DocumentFormat.OOXML,
}


def detect_format_from_bytes(file_data: bytes) -> DocumentFormat:
    """Detect the container format from the leading bytes."""
    header = file_data[:8]
    if not header:
        return DocumentFormat.UNKNOWN

    if header.startswith(MAGIC_NUMBERS['OLE']):
        return DocumentFormat.OLE

    if header.startswith(MAGIC_NUMBERS['ZIP']):
        try:
            with zipfile.ZipFile(io.BytesIO(file_data), 'r') as zf:
                if '[Content_Types].xml' in zf.namelist():
                    return DocumentFormat.OOXML
        except zipfile.BadZipFile:
            logger.debug("ZIP signature found but archive is unreadable")

    return DocumentFormat.UNKNOWN


def detect_document_format(
    file_data: bytes,
    file_extension: Optional[str] = None
) -> DocumentFormat:
    """
    Detect the container format, trusting content over the file name.

    Args:
        file_data: Raw file bytes
        file_extension: Extension without dot (optional)

    Returns:
        DocumentFormat (UNKNOWN when neither signature nor extension match)
    """
    detected = detect_format_from_bytes(file_data)
    if detected != DocumentFormat.UNKNOWN:
        return detected

    ext = (file_extension or "").lower().lstrip('.')
    fallback = EXTENSION_FORMATS.get(ext, DocumentFormat.UNKNOWN)
    if fallback != DocumentFormat.UNKNOWN:
        logger.debug(f"No known signature, using extension '{ext}'")
    return fallback


__all__ = [
    "DocumentFormat",
    "MAGIC_NUMBERS",
    "detect_format_from_bytes",
    "detect_document_format",
]
