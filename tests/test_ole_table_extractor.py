"""Unit tests for the DOC heuristic-merge table source.

Tests cover:
  - group_table_rows: cells, rows, multi-paragraph and nested cells, table boundaries
  - detect_colspan_by_structure / detect_rowspan_by_structure / should_skip_cell_by_structure
  - OLETableExtractor: resolved tables and best-effort coverage warnings
"""

# pylint: disable=missing-class-docstring,missing-function-docstring

from conftest import CELL, paragraph

from docstitch.core.processor.ole_helper.ole_table_extractor import (
    OLETableExtractor,
    detect_colspan_by_structure,
    detect_rowspan_by_structure,
    group_table_rows,
    resolve_table_cells,
    should_skip_cell_by_structure,
)
from docstitch.core.processor.ole_helper.ole_word_stream import IMAGE_MARK, mark_row_ends_by_cell_marks


def cell(text, **kwargs):
    return paragraph(text, CELL, in_table=True, **kwargs)


def row_end():
    return paragraph("", CELL, in_table=True, row_end=True)


class ParagraphSource:
    """Stands in for WordDocumentStream."""

    def __init__(self, paragraphs):
        self._paragraphs = paragraphs

    def paragraphs(self):
        return self._paragraphs


# ===========================================================================
# group_table_rows
# ===========================================================================


class TestGroupTableRows:
    def test_rows_and_cells(self):
        paragraphs = [
            paragraph("Before"),
            cell("a"), cell("b"), row_end(),
            cell("c"), cell("d"), row_end(),
            paragraph("After"),
        ]
        tables = group_table_rows(paragraphs)
        assert len(tables) == 1
        assert tables[0].cell_contents == [["a", "b"], ["c", "d"]]
        assert tables[0].first_paragraph == 1
        assert tables[0].last_paragraph == 6
        assert tables[0].row_cell_counts == [2, 2]

    def test_two_tables_split_by_prose(self):
        paragraphs = [cell("a"), row_end(), paragraph("gap"), cell("b"), row_end()]
        tables = group_table_rows(paragraphs)
        assert [t.cell_contents for t in tables] == [[["a"]], [["b"]]]

    def test_multi_paragraph_cell(self):
        paragraphs = [
            paragraph("line one", in_table=True),
            cell("line two"),
            cell("x"),
            row_end(),
        ]
        assert group_table_rows(paragraphs)[0].cell_contents == [["line one line two", "x"]]
        assert group_table_rows(paragraphs, " | ")[0].cell_contents == [["line one | line two", "x"]]

    def test_nested_table_text_stays_in_outer_cell(self):
        paragraphs = [
            paragraph("inner", CELL, in_table=True, level=2),
            paragraph("", CELL, in_table=True, level=2),
            cell("outer"),
            row_end(),
        ]
        assert group_table_rows(paragraphs)[0].cell_contents == [["inner outer"]]

    def test_line_breaks_and_images_in_cells(self):
        paragraphs = [cell(f"a\x0bb{IMAGE_MARK}"), row_end()]
        assert group_table_rows(paragraphs)[0].cell_contents == [["a b"]]

    def test_unterminated_table_at_end(self):
        paragraphs = [cell("a"), cell("b")]
        assert group_table_rows(paragraphs)[0].cell_contents == [["a", "b"]]


class TestRowEndFallback:
    def test_empty_mark_after_cell_mark_ends_row(self):
        paragraphs = [
            paragraph("Before"),
            paragraph("a", CELL), paragraph("b", CELL), paragraph("", CELL),
            paragraph("c", CELL), paragraph("", CELL),
            paragraph("After"),
        ]
        mark_row_ends_by_cell_marks(paragraphs)
        assert [p.in_table for p in paragraphs] == [False, True, True, True, True, True, False]
        assert [p.row_end for p in paragraphs] == [False, False, False, True, False, True, False]
        assert group_table_rows(paragraphs)[0].cell_contents == [["a", "b"], ["c"]]

    def test_empty_middle_cell_is_read_as_row_end(self):
        # without paragraph properties "a", "", "c" cannot be told apart
        # from a one-cell row followed by a row starting with "c"
        paragraphs = [
            paragraph("a", CELL), paragraph("", CELL), paragraph("c", CELL), paragraph("", CELL),
        ]
        mark_row_ends_by_cell_marks(paragraphs)
        assert [p.row_end for p in paragraphs] == [False, True, False, True]
        assert group_table_rows(paragraphs)[0].cell_contents == [["a"], ["c"]]

    def test_consecutive_empty_marks(self):
        paragraphs = [paragraph("a", CELL), paragraph("", CELL), paragraph("", CELL)]
        mark_row_ends_by_cell_marks(paragraphs)
        assert [p.row_end for p in paragraphs] == [False, True, False]


# ===========================================================================
# Structural inference
# ===========================================================================


class TestColspan:
    def test_full_rows_do_not_span(self):
        assert detect_colspan_by_structure(0, 3, 3) == 1

    def test_single_cell_takes_full_width(self):
        assert detect_colspan_by_structure(0, 1, 3) == 3

    def test_remainder_goes_to_last_cell(self):
        assert [detect_colspan_by_structure(i, 2, 5) for i in range(2)] == [2, 3]


class TestRowspan:
    def test_span_stops_at_next_value(self):
        contents = [["A", "x"], ["", "y"], ["", "z"], ["B", "w"]]
        assert detect_rowspan_by_structure(contents, 0, 0) == 3
        assert detect_rowspan_by_structure(contents, 3, 0) == 1

    def test_empty_cells_never_span(self):
        contents = [["", "x"], ["", "y"]]
        assert detect_rowspan_by_structure(contents, 0, 0) == 1

    def test_span_stops_at_blank_row(self):
        contents = [["A", "x"], ["", ""], ["", "y"]]
        assert detect_rowspan_by_structure(contents, 0, 0) == 1

    def test_span_stops_at_short_row(self):
        contents = [["a", "B"], ["c"]]
        assert detect_rowspan_by_structure(contents, 0, 1) == 1


class TestSkip:
    def test_covered_cells_are_skipped(self):
        contents = [["A", "x"], ["", "y"], ["", "z"], ["B", "w"]]
        assert [should_skip_cell_by_structure(contents, r, 0) for r in range(4)] == [False, True, True, False]

    def test_empty_cell_below_blank_row_is_not_skipped(self):
        contents = [["A", "x"], ["", ""], ["", "y"]]
        assert not should_skip_cell_by_structure(contents, 2, 0)

    def test_resolve_table_cells_agrees(self):
        contents = [["A", "x"], ["", "y"]]
        rows = resolve_table_cells(contents)
        assert rows[0][0].row_span == 2
        assert rows[1][0].is_skip


# ===========================================================================
# OLETableExtractor
# ===========================================================================


class TestOLETableExtractor:
    def test_extract_tables(self):
        source = ParagraphSource([
            cell("Name"), cell("Qty"), row_end(),
            cell("Apple"), cell("3"), row_end(),
            cell("Total"), row_end(),
        ])
        tables = OLETableExtractor().extract_tables(source)
        assert len(tables) == 1
        table = tables[0]
        assert table.num_cols == 2
        assert table.num_rows == 3
        assert table.source_format == "doc"
        assert table.rows[2][0].col_span == 2
        assert table.coverage_report().is_clean

    def test_best_effort_table_logs_gaps(self, caplog):
        caplog.set_level("WARNING", logger="document-processor")
        table = OLETableExtractor().build_table([["A", "B", "C"], ["x", ""]])
        assert table.rows[0][1].row_span == 2
        assert table.rows[1][1].is_skip
        assert table.coverage_report().gaps == ((1, 2),)
        assert "gaps" in caplog.text
