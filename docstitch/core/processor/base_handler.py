# docstitch/core/processor/base_handler.py
"""
BaseHandler - Abstract base class for document conversion handlers

Runs the two-pass conversion shared by every format:

1. open_document()            decode the container (hard failure on error)
2. structural pass            table extractor → TableData list → rendered queue
3. streaming prose pass       event source → MarkdownContentHandler → temp file
4. assembly                   placeholders replaced in order, leftovers handled

The structural pass always finishes before the prose pass starts. The
temporary markdown file belongs to one conversion and is removed on every
exit path.

Usage Example:
    class DOCXHandler(BaseHandler):
        def open_document(self, current_file): ...
        def create_table_extractor(self): ...
        def create_event_source(self, document): ...
"""
import io
import logging
import os
import tempfile
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, List, Optional, TYPE_CHECKING

from docstitch.core.config import ProcessorConfig
from docstitch.core.functions.table_extractor import BaseTableExtractor, TableData
from docstitch.core.functions.table_processor import (
    TableOutputFormat,
    TableProcessor,
    TableProcessorConfig,
)
from docstitch.core.processor.markdown_helper.event_source import BaseEventSource
from docstitch.core.processor.markdown_helper.heading_classifier import HeadingClassifier
from docstitch.core.processor.markdown_helper.markdown_content_handler import (
    MarkdownContentHandler,
)
from docstitch.core.processor.markdown_helper.table_placeholder import (
    TableQueue,
    substitute_table_placeholders,
)

if TYPE_CHECKING:
    from docstitch.core.document_processor import CurrentFile

logger = logging.getLogger("document-processor")


@dataclass
class ConversionOutput:
    """What one conversion produced.

    Attributes:
        content: Markdown with tables in place
        tables: Rendered tables in document order
        placeholder_count: Tables met by the prose pass
        mismatches: Disagreements between the two passes (logged)
    """
    content: str = ""
    tables: List[str] = field(default_factory=list)
    placeholder_count: int = 0
    mismatches: int = 0


class BaseHandler(ABC):
    """
    Abstract base class for document handlers.

    Attributes:
        config: ProcessorConfig passed from DocumentProcessor
        table_processor: Renders resolved tables
        heading_classifier: Heading lookup used by the prose pass
        logger: Logging instance
    """

    def __init__(
        self,
        config: Optional[ProcessorConfig] = None,
        table_processor: Optional[TableProcessor] = None,
        heading_classifier: Optional[HeadingClassifier] = None
    ):
        self._config = config or ProcessorConfig()
        self._table_processor = table_processor or self._create_table_processor()
        self._heading_classifier = heading_classifier or HeadingClassifier()
        self._logger = logging.getLogger(f"document-processor.{self.__class__.__name__}")

    def _create_table_processor(self) -> TableProcessor:
        output_format = TableOutputFormat.HTML if self._config.table_as_html else TableOutputFormat.MARKDOWN
        return TableProcessor(TableProcessorConfig(output_format=output_format))

    @property
    def config(self) -> ProcessorConfig:
        return self._config

    @property
    def table_processor(self) -> TableProcessor:
        return self._table_processor

    @property
    def heading_classifier(self) -> HeadingClassifier:
        return self._heading_classifier

    @property
    def logger(self) -> logging.Logger:
        return self._logger

    # ========================================================================
    # Format-specific parts
    # ========================================================================

    @abstractmethod
    def open_document(self, current_file: "CurrentFile") -> Any:
        """
        Decode the container into the document object both passes read.

        Raises:
            DocumentParseError: If the container cannot be decoded
        """
        pass

    @abstractmethod
    def create_table_extractor(self) -> BaseTableExtractor:
        """Table source for this format."""
        pass

    @abstractmethod
    def create_event_source(self, document: Any) -> BaseEventSource:
        """Prose event source for this format."""
        pass

    # ========================================================================
    # Conversion
    # ========================================================================

    def extract_text(self, current_file: "CurrentFile", **kwargs) -> str:
        """
        Convert a file to markdown with embedded tables.

        Args:
            current_file: CurrentFile dict containing file info and binary data

        Returns:
            Assembled text
        """
        return self.convert(current_file).content

    def extract_tables(self, current_file: "CurrentFile") -> List[str]:
        """Rendered tables of a file, in document order, without prose."""
        document = self.open_document(current_file)
        tables = self.create_table_extractor().extract_tables(document)
        return [self._table_processor.format_table(table) for table in tables]

    def convert(self, current_file: "CurrentFile") -> ConversionOutput:
        """
        Run both passes over one file and assemble the result.

        Args:
            current_file: CurrentFile dict containing file info and binary data

        Returns:
            ConversionOutput
        """
        file_name = current_file.get("file_name", "unknown")
        document = self.open_document(current_file)

        # Pass 1: structural table extraction
        tables: List[TableData] = self.create_table_extractor().extract_tables(document)
        queue = TableQueue.from_tables(tables, self._table_processor)

        # Pass 2: streaming prose into a temporary file
        fd, temp_path = tempfile.mkstemp(prefix="docstitch-", suffix=".md")
        try:
            with open(fd, "w", encoding="utf-8") as out:
                handler = MarkdownContentHandler(out, self._heading_classifier)
                fingerprints = self.create_event_source(document).emit(handler)

            with open(temp_path, "r", encoding="utf-8") as f:
                prose = f.read()
        finally:
            os.remove(temp_path)

        mismatches = queue.check_consistency(fingerprints)

        content = substitute_table_placeholders(prose, queue)

        self.logger.info(
            f"Converted {file_name}: {len(tables)} tables, {len(fingerprints)} placeholders"
        )
        return ConversionOutput(
            content=content,
            tables=queue.rendered_tables() if self._config.enable_table_extraction else [],
            placeholder_count=len(fingerprints),
            mismatches=mismatches,
        )

    def get_file_stream(self, current_file: "CurrentFile") -> io.BytesIO:
        """
        Get a fresh BytesIO stream from current_file.

        Args:
            current_file: CurrentFile dict

        Returns:
            BytesIO stream positioned at the start
        """
        stream = current_file.get("file_stream")
        if stream is not None:
            stream.seek(0)
            return stream
        return io.BytesIO(current_file.get("file_data", b""))


__all__ = ["BaseHandler", "ConversionOutput"]
