# docstitch/core/processor/ole_helper/__init__.py
"""
OLE Helper Module

- ole_file_converter: olefile로 OLE 컨테이너 열기
- ole_word_stream: WordDocument 스트림 (FIB, 조각 테이블, 단락 속성)
- ole_table_extractor: 구조 기반 병합 추론
- ole_event_source: 단락 → 이벤트
"""

from docstitch.core.processor.ole_helper.ole_event_source import OLEEventSource
from docstitch.core.processor.ole_helper.ole_file_converter import OLEFileConverter
from docstitch.core.processor.ole_helper.ole_table_extractor import (
    OLETableExtractor,
    OLETableExtractorConfig,
)
from docstitch.core.processor.ole_helper.ole_word_stream import (
    WordDocumentStream,
    WordParagraph,
)

__all__ = [
    "OLEEventSource",
    "OLEFileConverter",
    "OLETableExtractor",
    "OLETableExtractorConfig",
    "WordDocumentStream",
    "WordParagraph",
]
