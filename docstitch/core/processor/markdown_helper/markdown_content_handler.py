# docstitch/core/processor/markdown_helper/markdown_content_handler.py
"""
Markdown Content Handler

Streaming prose renderer. Receives start/data/end/close events (the lxml
parser-target interface, so it can also be driven by lxml.etree.XMLParser)
and writes markdown to a text stream.

Event vocabulary:
- h1..h9                      heading
- p (attribute "class")       paragraph; a heading style class makes it a heading
- table / tr / td / th        table; only the outermost table is seen, and it is
                              written as TABLE_PLACEHOLDER on its own line
- br                          line break
- img (attributes "alt", "src") image reference

Prose and heading text is written with &, < and > escaped.

Table contents are never written. Their text is only fingerprinted, so the
placeholder can later be checked against the table it stands for.
"""
import logging
from typing import Dict, List, Optional, TextIO

from docstitch.core.functions.utils import content_fingerprint, escape_prose
from docstitch.core.processor.markdown_helper.heading_classifier import HeadingClassifier
from docstitch.core.processor.markdown_helper.table_placeholder import TABLE_PLACEHOLDER

logger = logging.getLogger("document-processor")


class MarkdownContentHandler:
    """
    Event target that renders prose markdown with table placeholders.

    Example:
        >>> out = io.StringIO()
        >>> handler = MarkdownContentHandler(out)
        >>> handler.start("h1", {})
        >>> handler.data("Title")
        >>> handler.end("h1")
        >>> fingerprints = handler.close()
        >>> out.getvalue()
        '# Title\\n\\n'
    """

    def __init__(
        self,
        out: TextIO,
        classifier: Optional[HeadingClassifier] = None,
        placeholder: str = TABLE_PLACEHOLDER,
    ):
        self._out = out
        self._classifier = classifier or HeadingClassifier()
        self._placeholder = placeholder

        self._table_depth = 0
        self._table_text: List[str] = []
        self._fingerprints: List[str] = []

        # heading currently open: (tag, prefix) and its buffered text
        self._heading: Optional[tuple] = None
        self._heading_text: List[str] = []
        self._image_count = 0

    @property
    def placeholder_count(self) -> int:
        return len(self._fingerprints)

    @property
    def placeholder_fingerprints(self) -> List[str]:
        return list(self._fingerprints)

    # ========================================================================
    # Target interface
    # ========================================================================

    def start(self, tag: str, attrib: Optional[Dict[str, str]] = None) -> None:
        tag = tag.lower()
        attrib = attrib or {}

        if tag == "table":
            if self._table_depth == 0:
                self._out.write(f"\n\n{self._placeholder}\n\n")
                self._table_text = []
            self._table_depth += 1
            return

        if self._table_depth:
            return

        if self._heading is None:
            prefix = self._classifier.prefix(tag, attrib.get("class"))
            if prefix:
                self._heading = (tag, prefix)
                self._heading_text = []
                return

        if tag == "br":
            self._write_text("\n")
        elif tag == "img":
            self._write_image(attrib)

    def end(self, tag: str) -> None:
        tag = tag.lower()

        if tag == "table":
            if self._table_depth == 0:
                logger.debug("Unbalanced table end event ignored")
                return
            self._table_depth -= 1
            if self._table_depth == 0:
                self._fingerprints.append(content_fingerprint(self._table_text))
            return

        if self._table_depth:
            return

        if self._heading is not None and tag == self._heading[0]:
            text = "".join(self._heading_text).strip()
            if text:
                self._out.write(f"{self._heading[1]} {text}\n\n")
            self._heading = None
            return

        if tag == "p":
            self._out.write("\n\n")

    def data(self, data: str) -> None:
        if self._table_depth:
            self._table_text.append(data)
        else:
            self._write_text(escape_prose(data))

    def close(self) -> List[str]:
        """Finish the stream; returns the fingerprint of each placeholder."""
        if self._table_depth:
            logger.warning("Event stream ended inside a table")
            self._fingerprints.append(content_fingerprint(self._table_text))
            self._table_depth = 0
        return self.placeholder_fingerprints

    # ========================================================================
    # Helpers
    # ========================================================================

    def _write_text(self, text: str) -> None:
        if self._heading is not None:
            self._heading_text.append(" " if text == "\n" else text)
        else:
            self._out.write(text)

    def _write_image(self, attrib: Dict[str, str]) -> None:
        self._image_count += 1
        alt = attrib.get("alt") or f"image{self._image_count}"
        src = attrib.get("src")
        marker = f"![{alt}]({src})" if src else f"![{alt}]"
        if self._heading is not None:
            self._heading_text.append(marker)
        else:
            self._out.write(f"\n\n{marker}\n\n")


__all__ = ["MarkdownContentHandler"]
