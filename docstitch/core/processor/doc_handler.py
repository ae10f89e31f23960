# docstitch/core/processor/doc_handler.py
"""
DOC Handler - 구형 Microsoft Word 바이너리 문서 처리기

주요 기능:
- OLE Compound Document (.doc) 파싱 (olefile)
- 단락/스타일/표 구조를 WordDocument 스트림에서 직접 읽음
- 병합 선언이 없으므로 셀 병합은 격자 모양으로 추론 (heuristic)
- 표는 원래 위치에 HTML 또는 Markdown으로 삽입

RTF or HTML saved with a .doc extension is not handled here; format
detection rejects such files before they reach this handler.
"""
import logging
from typing import Any, Optional, TYPE_CHECKING

from docstitch.core.config import ProcessorConfig
from docstitch.core.processor.base_handler import BaseHandler
from docstitch.core.processor.ole_helper.ole_event_source import OLEEventSource
from docstitch.core.processor.ole_helper.ole_file_converter import OLEFileConverter
from docstitch.core.processor.ole_helper.ole_table_extractor import (
    OLETableExtractor,
    OLETableExtractorConfig,
)
from docstitch.core.processor.ole_helper.ole_word_stream import WordDocumentStream

if TYPE_CHECKING:
    from docstitch.core.document_processor import CurrentFile

logger = logging.getLogger("document-processor")


class DOCHandler(BaseHandler):
    """
    Legacy DOC Processing Handler

    Usage:
        handler = DOCHandler(config=config)
        text = handler.extract_text(current_file)
    """

    def __init__(
        self,
        config: Optional[ProcessorConfig] = None,
        extractor_config: Optional[OLETableExtractorConfig] = None,
        **kwargs
    ):
        super().__init__(config, **kwargs)
        self._extractor_config = extractor_config or OLETableExtractorConfig()
        self._converter = OLEFileConverter(self._extractor_config.use_paragraph_properties)

    def open_document(self, current_file: "CurrentFile") -> WordDocumentStream:
        file_path = current_file.get("file_path", "unknown")
        self.logger.info(f"DOC processing: {file_path}")

        stream = self._converter.convert(current_file.get("file_data", b""))
        if not stream.has_paragraph_properties:
            self.logger.warning(
                f"No paragraph properties in {file_path}; table rows are guessed from cell marks"
            )
        return stream

    def create_table_extractor(self) -> OLETableExtractor:
        return OLETableExtractor(self._extractor_config)

    def create_event_source(self, document: Any) -> OLEEventSource:
        return OLEEventSource(document, self._extractor_config.paragraph_separator)


__all__ = ["DOCHandler"]
