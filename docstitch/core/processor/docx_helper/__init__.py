# docstitch/core/processor/docx_helper/__init__.py
"""
DOCX Helper Module

- docx_constants: vMerge 상태
- docx_table_extractor: gridSpan / vMerge 기반 표 추출
- docx_event_source: 본문 순서대로 이벤트 발생
"""

from docstitch.core.processor.docx_helper.docx_constants import VMergeState
from docstitch.core.processor.docx_helper.docx_event_source import DOCXEventSource
from docstitch.core.processor.docx_helper.docx_table_extractor import (
    DOCXTableExtractor,
    DOCXTableExtractorConfig,
)

__all__ = [
    "VMergeState",
    "DOCXEventSource",
    "DOCXTableExtractor",
    "DOCXTableExtractorConfig",
]
