# docstitch/core/processor/markdown_helper/event_source.py
"""
Event Source - Abstract Interface for the Streaming Prose Pass

An event source walks a decoded document in document order and drives an
event target (start / data / end / close, the lxml parser-target interface).
Each source format implements a subclass.
"""
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional


class BaseEventSource(ABC):
    """Walks one document and fires events on a target."""

    def __init__(self, document: Any):
        self.document = document
        self.logger = logging.getLogger("document-processor")

    @abstractmethod
    def walk(self, target: Any) -> None:
        """Fire start/data/end events for the whole body."""
        pass

    def emit(self, target: Any) -> Any:
        """Walk the document, then close the target and return its result."""
        self.walk(target)
        return target.close()

    @staticmethod
    def element(
        target: Any,
        tag: str,
        attrib: Optional[Dict[str, str]] = None,
        text: Optional[str] = None
    ) -> None:
        """Fire a complete element: start, optional data, end."""
        target.start(tag, attrib or {})
        if text:
            target.data(text)
        target.end(tag)

    def table(self, target: Any, rows: List[List[str]]) -> None:
        """Fire a table of plain-text cells."""
        target.start("table", {})
        for row in rows:
            target.start("tr", {})
            for text in row:
                self.element(target, "td", text=text)
            target.end("tr")
        target.end("table")


__all__ = ["BaseEventSource"]
