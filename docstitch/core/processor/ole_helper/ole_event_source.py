# docstitch/core/processor/ole_helper/ole_event_source.py
"""
OLE Event Source

Turns the paragraphs of a WordDocumentStream into prose events:

- paragraph              -> p (class = style name with spaces as underscores)
  - 0x0B line break      -> br
  - picture anchor       -> img
- run of table paragraphs -> table / tr / td with the cell text
"""
import logging
import re
from typing import Any

from docstitch.core.processor.markdown_helper.event_source import BaseEventSource
from docstitch.core.processor.ole_helper.ole_table_extractor import group_table_rows
from docstitch.core.processor.ole_helper.ole_word_stream import (
    IMAGE_MARK,
    LINE_BREAK,
    WordDocumentStream,
)

logger = logging.getLogger("document-processor")

_INLINE_SPLIT = re.compile(f"([{LINE_BREAK}{IMAGE_MARK}])")


class OLEEventSource(BaseEventSource):
    """Prose event source over a WordDocumentStream."""

    def __init__(self, document: WordDocumentStream, paragraph_separator: str = " "):
        super().__init__(document)
        self._paragraph_separator = paragraph_separator

    def walk(self, target: Any) -> None:
        paragraphs = self.document.paragraphs()
        tables = {
            raw.first_paragraph: raw
            for raw in group_table_rows(paragraphs, self._paragraph_separator)
        }
        logger.debug(f"OLE prose pass: {len(paragraphs)} paragraphs, {len(tables)} tables")

        index = 0
        while index < len(paragraphs):
            raw = tables.get(index)
            if raw is not None:
                self.table(target, raw.cell_contents)
                index = raw.last_paragraph + 1
                continue

            paragraph = paragraphs[index]
            target.start("p", {"class": paragraph.style_name.replace(" ", "_")})
            for piece in _INLINE_SPLIT.split(paragraph.text):
                if piece == LINE_BREAK:
                    self.element(target, "br")
                elif piece == IMAGE_MARK:
                    self.element(target, "img")
                elif piece:
                    target.data(piece)
            target.end("p")
            index += 1


__all__ = ["OLEEventSource"]
