# docstitch/core/processor/__init__.py
"""
Processor - 형식별 문서 핸들러

- base_handler: 두 단계 변환 (표 추출 → 본문 스트리밍 → 표 삽입)
- docx_handler: DOCX (명시적 병합 정보)
- doc_handler: DOC (구조 기반 병합 추론)
"""

from docstitch.core.processor.base_handler import BaseHandler, ConversionOutput
from docstitch.core.processor.doc_handler import DOCHandler
from docstitch.core.processor.docx_handler import DOCXHandler

__all__ = ["BaseHandler", "ConversionOutput", "DOCHandler", "DOCXHandler"]
