# docstitch/core/processor/docx_helper/docx_event_source.py
"""
DOCX Event Source

Walks the body of a python-docx Document in document order and fires prose
events:

- w:p    -> p (class = style name with spaces as underscores)
  - w:t    -> data
  - w:tab  -> data("\\t")
  - w:br / w:cr (not page breaks) -> br
  - w:drawing -> img (alt from wp:docPr, src from the a:blip relationship)
- w:tbl  -> table / tr / td with the cell text (outermost tables only)
"""
import logging
from typing import Any, Dict, List

from docx.oxml.ns import qn

from docstitch.core.processor.docx_helper.docx_table_extractor import (
    iter_body_blocks,
    iter_cells,
    iter_rows,
)
from docstitch.core.processor.markdown_helper.event_source import BaseEventSource

logger = logging.getLogger("document-processor")

_RUN_CONTENT = (qn('w:t'), qn('w:tab'), qn('w:br'), qn('w:cr'), qn('w:drawing'))


class DOCXEventSource(BaseEventSource):
    """Prose event source over a python-docx Document."""

    def __init__(self, document: Any):
        super().__init__(document)
        self._style_names = self._load_style_names()

    def _load_style_names(self) -> Dict[str, str]:
        names = {}
        for style in self.document.styles:
            if style.style_id and style.name:
                names[style.style_id] = style.name
        return names

    def walk(self, target: Any) -> None:
        body = self.document.element.body
        for block in iter_body_blocks(body):
            if block.tag == qn('w:tbl'):
                self._walk_table(target, block)
            else:
                self._walk_paragraph(target, block)

    def style_class(self, p) -> str:
        """Paragraph style name as a class value ("Heading 1" -> "Heading_1")."""
        style_id = p.find(f"{qn('w:pPr')}/{qn('w:pStyle')}")
        if style_id is not None:
            name = self._style_names.get(style_id.get(qn('w:val')), style_id.get(qn('w:val')))
        else:
            name = "Normal"
        return (name or "").replace(" ", "_")

    def _walk_paragraph(self, target: Any, p) -> None:
        target.start("p", {"class": self.style_class(p)})
        for elem in self._run_content(p):
            if elem.tag == qn('w:t'):
                if elem.text:
                    target.data(elem.text)
            elif elem.tag == qn('w:tab'):
                target.data("\t")
            elif elem.tag in (qn('w:br'), qn('w:cr')):
                if elem.get(qn('w:type')) not in ('page', 'column'):
                    self.element(target, "br")
            elif elem.tag == qn('w:drawing'):
                self.element(target, "img", self._image_attributes(elem))
        target.end("p")

    def _run_content(self, p):
        """Run-level content of a paragraph, skipping text boxes inside drawings."""
        for run in p.iter(qn('w:r')):
            if self._inside_drawing(run):
                continue
            for elem in run.iter(*_RUN_CONTENT):
                if elem.tag == qn('w:drawing') or not self._inside_drawing(elem):
                    yield elem

    @staticmethod
    def _inside_drawing(elem) -> bool:
        return next(elem.iterancestors(qn('w:drawing')), None) is not None

    def _image_attributes(self, drawing) -> Dict[str, str]:
        attrib = {}
        doc_pr = drawing.find(f".//{qn('wp:docPr')}")
        if doc_pr is not None:
            alt = doc_pr.get('descr') or doc_pr.get('name')
            if alt:
                attrib["alt"] = alt

        blip = drawing.find(f".//{qn('a:blip')}")
        if blip is not None:
            rel_id = blip.get(qn('r:embed'))
            part = self.document.part.related_parts.get(rel_id) if rel_id else None
            if part is not None:
                attrib["src"] = str(part.partname).lstrip('/')
        return attrib

    def _walk_table(self, target: Any, tbl) -> None:
        rows: List[List[str]] = []
        for tr in iter_rows(tbl):
            rows.append([
                ''.join(t.text or '' for t in tc.iter(qn('w:t')))
                for tc in iter_cells(tr)
            ])
        logger.debug(f"DOCX prose pass: table with {len(rows)} rows")
        self.table(target, rows)


__all__ = ["DOCXEventSource"]
