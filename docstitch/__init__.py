# docstitch/__init__.py
"""
docstitch Library

Converts legacy Word documents (.doc and .docx) to markdown prose with every
table embedded as HTML at its original position.

Package Structure:
- core: Document processing core module
    - DocumentProcessor: Main entry point
    - processor: Format handlers and the two-pass coordinator
    - functions: Table model, rendering, format detection, utilities

Usage:
    from docstitch import DocumentProcessor

    processor = DocumentProcessor()
    text = processor.extract_text("document.docx")
"""

__version__ = "0.1.0"

from docstitch.core import (
    BatchResult,
    DocumentProcessor,
    DocumentResult,
    ErrorHandlingStrategy,
    ProcessorConfig,
)
from docstitch.core.functions.exceptions import DocumentParseError, UnsupportedFormatError

__all__ = [
    "__version__",
    "DocumentProcessor",
    "DocumentResult",
    "BatchResult",
    "ProcessorConfig",
    "ErrorHandlingStrategy",
    "DocumentParseError",
    "UnsupportedFormatError",
]
