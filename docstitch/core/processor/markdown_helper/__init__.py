# docstitch/core/processor/markdown_helper/__init__.py
"""
Markdown Helper Module

- event_source: 이벤트 소스 인터페이스
- heading_classifier: 제목 태그 / 스타일 클래스 → 제목 수준
- markdown_content_handler: 스트리밍 본문 렌더러
- table_placeholder: 표 대기열과 자리표시자 치환
"""

from docstitch.core.processor.markdown_helper.event_source import BaseEventSource
from docstitch.core.processor.markdown_helper.heading_classifier import HeadingClassifier
from docstitch.core.processor.markdown_helper.markdown_content_handler import (
    MarkdownContentHandler,
)
from docstitch.core.processor.markdown_helper.table_placeholder import (
    TABLE_PLACEHOLDER,
    TableQueue,
    substitute_table_placeholders,
)

__all__ = [
    "BaseEventSource",
    "HeadingClassifier",
    "MarkdownContentHandler",
    "TABLE_PLACEHOLDER",
    "TableQueue",
    "substitute_table_placeholders",
]
