# docstitch/core/document_processor.py
"""DocumentProcessor - Document Processing Class

Main entry point of the docstitch library. Converts legacy binary Word
(.doc) and Word XML package (.docx) files into markdown prose with every
table embedded at its original position.

Usage Example:
    from docstitch.core.document_processor import DocumentProcessor
    from docstitch.core.config import ProcessorConfig

    processor = DocumentProcessor(ProcessorConfig.rag_optimized())

    # Markdown with embedded HTML tables
    text = processor.extract_text("report.docx")

    # Full result with timing and metadata
    result = processor.parse("report.doc")
    if result.success:
        print(result.table_count)

    # Several files, each converted in isolation
    batch = processor.parse_batch(["a.doc", "b.docx"])
    print(f"{batch.success_rate:.0%}")
"""
import io
import logging
import os
import shutil
import tempfile
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, BinaryIO, Dict, Iterable, List, Optional, TypedDict, Union

from docstitch.core.config import ErrorHandlingStrategy, ProcessorConfig
from docstitch.core.functions.exceptions import UnsupportedFormatError
from docstitch.core.functions.file_format import DocumentFormat, detect_document_format
from docstitch.core.processor.base_handler import BaseHandler
from docstitch.core.processor.doc_handler import DOCHandler
from docstitch.core.processor.docx_handler import DOCXHandler

logger = logging.getLogger("document-processor")


class CurrentFile(TypedDict, total=False):
    """
    TypedDict containing file information.

    Standard structure for reading files at binary level and passing to handlers.
    Resolves file system issues such as non-ASCII (Korean, etc.) paths.

    Attributes:
        file_path: Absolute path of the original file
        file_name: File name (including extension)
        file_extension: File extension (lowercase, without dot)
        file_data: Binary data of the file
        file_stream: BytesIO stream (reusable)
        file_size: File size in bytes
    """
    file_path: str
    file_name: str
    file_extension: str
    file_data: bytes
    file_stream: io.BytesIO
    file_size: int


@dataclass
class DocumentResult:
    """
    Outcome of one document conversion.

    Example:
        >>> result = processor.parse("report.docx")
        >>> result.has_content, result.table_count
        (True, 3)
    """
    file_path: str
    file_name: str = ""
    file_size: int = 0
    content: str = ""
    tables: List[str] = field(default_factory=list)
    metadata: Dict[str, Any] = field(default_factory=dict)
    success: bool = True
    error_message: Optional[str] = None
    processing_time_ms: float = 0.0

    @property
    def is_failure(self) -> bool:
        return not self.success

    @property
    def table_count(self) -> int:
        return len(self.tables)

    @property
    def has_content(self) -> bool:
        return bool(self.content and self.content.strip())


@dataclass
class BatchResult:
    """Results of parse_batch(), in input order."""
    results: List[DocumentResult] = field(default_factory=list)
    total_time_ms: float = 0.0

    @property
    def success_count(self) -> int:
        return sum(1 for r in self.results if r.success)

    @property
    def failure_count(self) -> int:
        return sum(1 for r in self.results if r.is_failure)

    @property
    def success_rate(self) -> float:
        if not self.results:
            return 0.0
        return self.success_count / len(self.results)

    def __len__(self) -> int:
        return len(self.results)

    def __iter__(self):
        return iter(self.results)


class DocumentProcessor:
    """
    docstitch Main Document Processing Class

    Attributes:
        config: ProcessorConfig used for every conversion
        supported_extensions: File extensions accepted by parse()

    Example:
        >>> processor = DocumentProcessor()
        >>> text = processor.extract_text("document.docx")
    """

    SUPPORTED_EXTENSIONS = frozenset(['doc', 'dot', 'docx', 'docm', 'dotx'])

    def __init__(self, config: Optional[ProcessorConfig] = None):
        self._config = config or ProcessorConfig.default()
        self._config.validate()
        self._logger = logging.getLogger("document-processor.processor")

        # Handler registry
        self._handler_registry: Optional[Dict[DocumentFormat, BaseHandler]] = None

    # =========================================================================
    # Public Properties
    # =========================================================================

    @property
    def config(self) -> ProcessorConfig:
        return self._config

    @property
    def supported_extensions(self) -> List[str]:
        return sorted(self.SUPPORTED_EXTENSIONS)

    # =========================================================================
    # Public Methods
    # =========================================================================

    def extract_text(self, file_path: Union[str, Path]) -> str:
        """
        Convert a file to markdown with embedded tables.

        Args:
            file_path: File path

        Returns:
            Assembled text

        Raises:
            FileNotFoundError: If file cannot be found
            ValueError: If the file is too large
            UnsupportedFormatError: If the file is neither DOC nor DOCX
            DocumentParseError: If the container cannot be decoded
        """
        current_file = self._load(file_path)
        handler = self._get_handler(current_file)
        return handler.extract_text(current_file)

    def extract_tables(self, file_path: Union[str, Path]) -> List[str]:
        """
        Rendered tables of a file in document order, without prose.

        Raises:
            Same as extract_text()
        """
        current_file = self._load(file_path)
        handler = self._get_handler(current_file)
        return handler.extract_tables(current_file)

    def parse(self, file_path: Union[str, Path]) -> DocumentResult:
        """
        Convert a file and report content, tables, timing and metadata.

        Under FAIL_FAST any error is re-raised; under LOG_AND_CONTINUE it is
        logged and returned as a failed DocumentResult.

        Args:
            file_path: File path

        Returns:
            DocumentResult
        """
        file_path_str = str(file_path)
        started = time.perf_counter()
        result = DocumentResult(
            file_path=os.path.abspath(file_path_str),
            file_name=os.path.basename(file_path_str),
        )

        try:
            current_file = self._load(file_path_str)
            result.file_size = current_file["file_size"]
            handler = self._get_handler(current_file)
            output = handler.convert(current_file)

            result.content = output.content
            result.tables = output.tables
            result.metadata = {
                "file_name": current_file["file_name"],
                "file_size": current_file["file_size"],
                "file_extension": current_file["file_extension"],
                "format": self._detect_format(current_file).value,
                "placeholder_count": output.placeholder_count,
                "table_mismatches": output.mismatches,
            }
        except Exception as e:
            self._logger.error(f"Failed to process {file_path_str}: {e}")
            if self._config.error_handling_strategy == ErrorHandlingStrategy.FAIL_FAST:
                raise
            result.success = False
            result.error_message = str(e)
        finally:
            result.processing_time_ms = (time.perf_counter() - started) * 1000

        if self._config.verbose_logging and result.success:
            self._logger.info(
                f"Processed {result.file_name} in {result.processing_time_ms:.1f} ms "
                f"({result.table_count} tables)"
            )
        return result

    def parse_stream(self, stream: BinaryIO, file_name: str) -> DocumentResult:
        """
        Convert a document read from a binary stream.

        The stream is spooled to a temporary file named after file_name; the
        file is removed afterwards.

        Args:
            stream: Readable binary stream
            file_name: Original file name (its extension is a format hint)

        Returns:
            DocumentResult
        """
        temp_dir = tempfile.mkdtemp(prefix="docstitch-")
        temp_path = os.path.join(temp_dir, os.path.basename(file_name) or "document")
        try:
            with open(temp_path, "wb") as f:
                shutil.copyfileobj(stream, f)
            return self.parse(temp_path)
        finally:
            shutil.rmtree(temp_dir, ignore_errors=True)

    def parse_batch(self, file_paths: Iterable[Union[str, Path]]) -> BatchResult:
        """
        Convert several files, one after another.

        Every file gets its own conversion; under FAIL_FAST the first failure
        stops the batch.
        """
        started = time.perf_counter()
        batch = BatchResult()
        for file_path in file_paths:
            batch.results.append(self.parse(file_path))
        batch.total_time_ms = (time.perf_counter() - started) * 1000

        self._logger.info(
            f"Batch finished: {batch.success_count} succeeded, {batch.failure_count} failed"
        )
        return batch

    def is_supported(self, file_extension: str) -> bool:
        """
        Check if a file extension is supported.

        Args:
            file_extension: File extension

        Returns:
            Whether supported
        """
        ext = file_extension.lower().lstrip('.')
        return ext in self.SUPPORTED_EXTENSIONS

    # =========================================================================
    # Internal Methods
    # =========================================================================

    def _load(self, file_path: Union[str, Path]) -> CurrentFile:
        file_path_str = str(file_path)

        if not os.path.exists(file_path_str):
            raise FileNotFoundError(f"File not found: {file_path_str}")
        if not os.path.isfile(file_path_str):
            raise ValueError(f"Not a file: {file_path_str}")

        size = os.path.getsize(file_path_str)
        if size > self._config.max_document_size_bytes:
            raise ValueError(
                f"File too large: {size} bytes (limit {self._config.max_document_size_mb} MB)"
            )

        ext = os.path.splitext(file_path_str)[1].lstrip('.').lower()
        return self._create_current_file(file_path_str, ext)

    def _create_current_file(self, file_path: str, ext: str) -> CurrentFile:
        """
        Create a CurrentFile dict from a file path.

        Reads the file at binary level to avoid path encoding issues
        (e.g., Korean characters in Windows paths).
        """
        file_path = os.path.abspath(file_path)
        file_name = os.path.basename(file_path)

        with open(file_path, 'rb') as f:
            file_data = f.read()

        return {
            "file_path": file_path,
            "file_name": file_name,
            "file_extension": ext,
            "file_data": file_data,
            "file_stream": io.BytesIO(file_data),
            "file_size": len(file_data)
        }

    def _get_handler_registry(self) -> Dict[DocumentFormat, BaseHandler]:
        if self._handler_registry is None:
            self._handler_registry = {
                DocumentFormat.OLE: DOCHandler(config=self._config),
                DocumentFormat.OOXML: DOCXHandler(config=self._config),
            }
        return self._handler_registry

    @staticmethod
    def _detect_format(current_file: CurrentFile) -> DocumentFormat:
        return detect_document_format(
            current_file.get("file_data", b""),
            current_file.get("file_extension")
        )

    def _get_handler(self, current_file: CurrentFile) -> BaseHandler:
        """Handler for the detected container format."""
        document_format = self._detect_format(current_file)
        handler = self._get_handler_registry().get(document_format)
        if handler is None:
            raise UnsupportedFormatError(
                f"Unsupported file format: {current_file.get('file_name', 'unknown')}"
            )
        return handler

    # =========================================================================
    # Context Manager Support
    # =========================================================================

    def __enter__(self) -> "DocumentProcessor":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self._handler_registry = None

    def __repr__(self) -> str:
        return f"DocumentProcessor(config={self._config!r})"


__all__ = [
    "CurrentFile",
    "DocumentResult",
    "BatchResult",
    "DocumentProcessor",
]
