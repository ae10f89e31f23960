# docstitch/core/functions/exceptions.py
# docstitch/core/functions/exceptions.py
"""Errors raised out of a document conversion."""


class DocumentParseError(RuntimeError):
    """The document container cannot be opened or decoded."""


class UnsupportedFormatError(ValueError):
    """The bytes are neither an OLE2 Word file nor an OOXML package."""


__all__ = ["DocumentParseError", "UnsupportedFormatError"]
