# docstitch/core/functions/__init__.py
"""
Functions - 공통 기능 모듈

- table_extractor: 표 모델 (TableCell, TableData) 및 추출기 인터페이스
- table_processor: 표를 HTML / Markdown / 텍스트로 출력
- file_format: 매직 넘버 기반 형식 감지
- utils: 셀 텍스트 정리, HTML 이스케이프, 지문(fingerprint)
- exceptions: DocumentParseError, UnsupportedFormatError
"""

from docstitch.core.functions.exceptions import DocumentParseError, UnsupportedFormatError
from docstitch.core.functions.file_format import DocumentFormat, detect_document_format
from docstitch.core.functions.table_extractor import (
    BaseTableExtractor,
    TableCell,
    TableData,
    TableExtractorConfig,
    TableRegion,
)
from docstitch.core.functions.table_processor import (
    TableOutputFormat,
    TableProcessor,
    TableProcessorConfig,
)

__all__ = [
    "DocumentParseError",
    "UnsupportedFormatError",
    "DocumentFormat",
    "detect_document_format",
    "BaseTableExtractor",
    "TableCell",
    "TableData",
    "TableExtractorConfig",
    "TableRegion",
    "TableOutputFormat",
    "TableProcessor",
    "TableProcessorConfig",
]
