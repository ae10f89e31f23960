# docstitch/core/__init__.py
"""
Core - 문서 처리 핵심 모듈

모듈 구조:
- document_processor: 메인 DocumentProcessor 클래스
- config: ProcessorConfig, ErrorHandlingStrategy
- processor/: 형식별 핸들러와 두 단계 변환 코디네이터
    - docx_handler: DOCX 문서 처리
    - doc_handler: DOC 문서 처리
- functions/: 표 모델, 렌더링, 형식 감지, 유틸리티

사용 예시:
    from docstitch.core import DocumentProcessor, ProcessorConfig
"""

from docstitch.core.config import ErrorHandlingStrategy, ProcessorConfig
from docstitch.core.document_processor import (
    BatchResult,
    CurrentFile,
    DocumentProcessor,
    DocumentResult,
)

__all__ = [
    "DocumentProcessor",
    "DocumentResult",
    "BatchResult",
    "CurrentFile",
    "ProcessorConfig",
    "ErrorHandlingStrategy",
]
