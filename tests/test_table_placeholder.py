"""Unit tests for placeholder substitution.

Tests cover:
  - TableQueue: order, consume-once, remaining
  - substitute_table_placeholders: in-order splicing, surplus placeholders,
    leftover tables, blank-line collapsing
  - check_consistency: count and fingerprint warnings
"""

# pylint: disable=missing-class-docstring,missing-function-docstring

from docstitch.core.functions.table_extractor import TableCell, TableData
from docstitch.core.functions.table_processor import TableProcessor
from docstitch.core.processor.markdown_helper.table_placeholder import (
    TABLE_PLACEHOLDER,
    TableQueue,
    fingerprint_table,
    substitute_table_placeholders,
)

P = TABLE_PLACEHOLDER


def one_cell(text):
    return TableData(rows=[[TableCell(text)]], num_rows=1, num_cols=1)


# ===========================================================================
# TableQueue
# ===========================================================================


class TestTableQueue:
    def test_pop_in_order_then_none(self):
        queue = TableQueue(["t1", "t2"])
        assert queue.pop().rendered == "t1"
        assert queue.pop().rendered == "t2"
        assert queue.pop() is None
        assert queue.consumed == 2

    def test_remaining_consumes_the_rest(self):
        queue = TableQueue(["t1", "t2", "t3"])
        queue.pop()
        assert [e.rendered for e in queue.remaining()] == ["t2", "t3"]
        assert queue.remaining() == []
        assert queue.rendered_tables() == ["t1", "t2", "t3"]

    def test_from_tables(self):
        queue = TableQueue.from_tables([one_cell("a"), one_cell("b")], TableProcessor())
        assert len(queue) == 2
        first = queue.pop()
        assert ">a</td>" in first.rendered
        assert first.fingerprint == fingerprint_table(one_cell("a"))


# ===========================================================================
# substitute_table_placeholders
# ===========================================================================


class TestSubstitution:
    def test_tables_fill_placeholders_in_order(self):
        text = f"a\n{P}\nb\n{P}\nc\n"
        result = substitute_table_placeholders(text, TableQueue(["<table>1</table>", "<table>2</table>"]))
        assert result == "a\n<table>1</table>\nb\n<table>2</table>\nc\n"

    def test_leftover_tables_are_appended(self, caplog):
        caplog.set_level("WARNING", logger="document-processor")
        text = f"a\n{P}\nb\n{P}\nc"
        queue = TableQueue(["<table>1</table>", "<table>2</table>", "<table>3</table>"])
        result = substitute_table_placeholders(text, queue)
        assert result == "a\n<table>1</table>\nb\n<table>2</table>\nc\n<table>3</table>\n"
        assert "appended" in caplog.text

    def test_surplus_placeholders_are_removed(self, caplog):
        caplog.set_level("WARNING", logger="document-processor")
        text = f"a\n{P}\nb\n{P}\nc\n"
        result = substitute_table_placeholders(text, TableQueue(["<table>1</table>"]))
        assert result == "a\n<table>1</table>\nb\nc\n"
        assert P not in result
        assert "removed" in caplog.text

    def test_no_tables_at_all(self):
        assert substitute_table_placeholders("a\n\n\nb\n", TableQueue([])) == "a\nb\n"

    def test_tables_are_cleaned(self):
        text = f"{P}\n"
        result = substitute_table_placeholders(text, TableQueue(["<table>\n<tr><td>x</td>\u00a0</tr></table>"]))
        assert result == "<table><tr><td>x</td></tr></table>\n"

    def test_custom_placeholder(self):
        result = substitute_table_placeholders("x [[T]] y", TableQueue(["T1"]), placeholder="[[T]]")
        assert result == "x T1 y"


# ===========================================================================
# check_consistency
# ===========================================================================


class TestConsistency:
    def test_matching_passes(self):
        tables = [one_cell("a"), one_cell("b")]
        queue = TableQueue.from_tables(tables, TableProcessor())
        assert queue.check_consistency([fingerprint_table(t) for t in tables]) == 0

    def test_count_mismatch(self, caplog):
        caplog.set_level("WARNING", logger="document-processor")
        queue = TableQueue.from_tables([one_cell("a")], TableProcessor())
        assert queue.check_consistency([]) == 1
        assert "count mismatch" in caplog.text

    def test_fingerprint_mismatch(self, caplog):
        caplog.set_level("WARNING", logger="document-processor")
        queue = TableQueue.from_tables([one_cell("a"), one_cell("b")], TableProcessor())
        swapped = [fingerprint_table(one_cell("b")), fingerprint_table(one_cell("a"))]
        assert queue.check_consistency(swapped) == 2
        assert "differs" in caplog.text
