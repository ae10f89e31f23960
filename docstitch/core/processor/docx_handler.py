# docstitch/core/processor/docx_handler.py
"""
DOCX Handler - DOCX Document Processor

Key Features:
- Table extraction from explicit merge markup (w:gridSpan / w:vMerge)
- Prose streaming in body order (paragraphs, headings, line breaks, images)
- Tables placed back at their position as HTML or Markdown

All parsing goes through python-docx. A file that python-docx cannot open
is a DocumentParseError; there is no fallback to other formats.
"""
import logging
import zipfile
from typing import Any, TYPE_CHECKING

from docx import Document
from docx.opc.exceptions import PackageNotFoundError
from lxml import etree

from docstitch.core.functions.exceptions import DocumentParseError
from docstitch.core.processor.base_handler import BaseHandler
from docstitch.core.processor.docx_helper.docx_event_source import DOCXEventSource
from docstitch.core.processor.docx_helper.docx_table_extractor import DOCXTableExtractor

if TYPE_CHECKING:
    from docstitch.core.document_processor import CurrentFile

logger = logging.getLogger("document-processor")


# ============================================================================
# DOCXHandler Class
# ============================================================================

class DOCXHandler(BaseHandler):
    """
    DOCX Document Processing Handler

    Usage:
        handler = DOCXHandler(config=config)
        text = handler.extract_text(current_file)
    """

    def open_document(self, current_file: "CurrentFile") -> Any:
        file_path = current_file.get("file_path", "unknown")
        self.logger.info(f"DOCX processing: {file_path}")

        try:
            return Document(self.get_file_stream(current_file))
        except (zipfile.BadZipFile, PackageNotFoundError) as e:
            raise DocumentParseError(f"Not a valid DOCX archive: {file_path}") from e
        except (KeyError, ValueError, etree.XMLSyntaxError) as e:
            raise DocumentParseError(f"Cannot read DOCX package {file_path}: {e}") from e

    def create_table_extractor(self) -> DOCXTableExtractor:
        return DOCXTableExtractor()

    def create_event_source(self, document: Any) -> DOCXEventSource:
        return DOCXEventSource(document)


__all__ = ["DOCXHandler"]
