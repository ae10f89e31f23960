"""Unit tests for the prose event sources.

Tests cover:
  - DOCXEventSource: paragraph classes, headings, breaks, images, tables
  - OLEEventSource: paragraphs, inline marks, tables from grouped rows
"""

# pylint: disable=missing-class-docstring,missing-function-docstring

from conftest import CELL, paragraph
from docx import Document

from docstitch.core.processor.docx_helper.docx_event_source import DOCXEventSource
from docstitch.core.processor.ole_helper.ole_event_source import OLEEventSource
from docstitch.core.processor.ole_helper.ole_word_stream import IMAGE_MARK


class ParagraphSource:
    def __init__(self, paragraphs):
        self._paragraphs = paragraphs

    def paragraphs(self):
        return self._paragraphs


def paragraph_classes(recorder):
    return [e[2].get("class") for e in recorder.events if e[0] == "start" and e[1] == "p"]


# ===========================================================================
# DOCXEventSource
# ===========================================================================


class TestDOCXEventSource:
    def test_body_order(self, docx_document, recorder):
        DOCXEventSource(docx_document).emit(recorder)
        starts = [tag for tag in recorder.tags() if tag in ("p", "table")]
        assert starts[:4] == ["p", "p", "table", "p"]
        assert recorder.tags("start").count("table") == 2
        assert recorder.events[-1] == ("close",)

    def test_style_classes(self, docx_document, recorder):
        DOCXEventSource(docx_document).walk(recorder)
        classes = paragraph_classes(recorder)
        assert classes[0] == "Heading_1"
        assert classes[1] == "Normal"
        assert "Heading_2" in classes

    def test_table_cell_text(self, docx_document, recorder):
        DOCXEventSource(docx_document).walk(recorder)
        assert "ABVcdef" in recorder.text()

    def test_break_and_image(self, image_docx, recorder):
        DOCXEventSource(Document(str(image_docx))).walk(recorder)
        assert recorder.tags().count("br") == 1
        images = [e[2] for e in recorder.events if e[0] == "start" and e[1] == "img"]
        assert len(images) == 1
        assert images[0]["src"].startswith("word/media/")

    def test_page_break_is_not_a_line_break(self, recorder):
        from docx.enum.text import WD_BREAK

        doc = Document()
        doc.add_paragraph("x").add_run().add_break(WD_BREAK.PAGE)
        DOCXEventSource(doc).walk(recorder)
        assert "br" not in recorder.tags()


# ===========================================================================
# OLEEventSource
# ===========================================================================


class TestOLEEventSource:
    def test_paragraphs_and_tables(self, recorder):
        source = ParagraphSource([
            paragraph("Title", style="heading 1"),
            paragraph(f"one\x0btwo{IMAGE_MARK}"),
            paragraph("a", CELL, in_table=True),
            paragraph("", CELL, in_table=True, row_end=True),
            paragraph("End"),
        ])
        OLEEventSource(source).emit(recorder)

        assert paragraph_classes(recorder) == ["heading_1", "", ""]
        assert recorder.tags() == ["p", "p", "br", "img", "table", "tr", "td", "p"]
        assert recorder.text() == "Titleonetwoa" + "End"
