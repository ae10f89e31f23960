# docstitch/core/functions/table_processor.py
"""
Table Processor - Common Table Rendering Module

Serializes a resolved TableData into HTML, Markdown or plain text.

================================================================================
TABLE PROCESSOR ARCHITECTURE
================================================================================

Main Entry Point:
    format_table(table: TableData) → str

Internal Processing Functions (called from format_table):
    ├─ format_table_as_html()     - canonical HTML (rowspan/colspan)
    ├─ format_table_as_markdown() - pipe table (spans flattened)
    └─ format_table_as_text()     - tab separated text

Common Utility:
    └─ _clean_cell_content()      - whitespace normalization

================================================================================
HTML OUTPUT
================================================================================

<table border="1" style="border-collapse: collapse;">
  <tr>
    <td colspan="2" rowspan="3" style="border: 1px solid #ccc; padding: 8px;">text</td>
  </tr>
</table>

- colspan/rowspan are written only when greater than 1 (colspan first)
- skipped cells (covered by another cell's span) are not written
- empty text is written as &nbsp;
- text is escaped (& < > " ')

Rendering is a pure function of the table: the same table always renders to
the same string.

================================================================================
"""
import logging
import re
from enum import Enum
from dataclasses import dataclass
from typing import Optional

from docstitch.core.functions.table_extractor import TableData
from docstitch.core.functions.utils import escape_html

logger = logging.getLogger("document-processor")


class TableOutputFormat(Enum):
    """Table output format options."""
    HTML = "html"
    MARKDOWN = "markdown"
    TEXT = "text"


@dataclass(frozen=True)
class TableProcessorConfig:
    """Configuration for table rendering.

    The HTML defaults are the wire format consumers rely on.
    """
    output_format: TableOutputFormat = TableOutputFormat.HTML
    table_attributes: str = 'border="1" style="border-collapse: collapse;"'
    cell_style: str = "border: 1px solid #ccc; padding: 8px;"
    empty_cell: str = "&nbsp;"
    clean_whitespace: bool = False


class TableProcessor:
    """
    Main table rendering class.

    Public Methods:
        format_table()             ← Main Entry Point (routes on config.output_format)
        format_table_as_html()
        format_table_as_markdown()
        format_table_as_text()
    """

    def __init__(self, config: Optional[TableProcessorConfig] = None):
        self.config = config or TableProcessorConfig()
        self.logger = logging.getLogger("document-processor")

    def format_table(self, table: TableData) -> str:
        """
        Main entry point for table formatting.

        Args:
            table: Resolved TableData

        Returns:
            Formatted string (HTML/Markdown/Text)
        """
        logger.debug(f"Formatting table {table.num_rows}x{table.num_cols} as {self.config.output_format.value}")
        if self.config.output_format == TableOutputFormat.HTML:
            return self.format_table_as_html(table)
        elif self.config.output_format == TableOutputFormat.MARKDOWN:
            return self.format_table_as_markdown(table)
        else:
            return self.format_table_as_text(table)

    # ==========================================================================
    # format_table_as_html()
    # ==========================================================================

    def format_table_as_html(self, table: TableData) -> str:
        """Convert TableData to the canonical HTML table."""
        html_parts = [f"<table {self.config.table_attributes}>"]

        for row in table.rendered_rows():
            html_parts.append("  <tr>")
            for cell in row:
                attrs = ""
                if cell.col_span > 1:
                    attrs += f' colspan="{cell.col_span}"'
                if cell.row_span > 1:
                    attrs += f' rowspan="{cell.row_span}"'

                content = cell.content
                if self.config.clean_whitespace:
                    content = self._clean_cell_content(content)
                text = escape_html(content) if content else self.config.empty_cell

                html_parts.append(
                    f'    <td{attrs} style="{self.config.cell_style}">{text}</td>'
                )
            html_parts.append("  </tr>")

        html_parts.append("</table>")
        return "\n".join(html_parts)

    # ==========================================================================
    # format_table_as_markdown()
    # ==========================================================================

    def format_table_as_markdown(self, table: TableData) -> str:
        """
        Convert TableData to a Markdown pipe table.

        Markdown has no spans: a cell spanning N columns is followed by N-1
        empty cells, and rowspan-covered positions are written empty.
        """
        grid = self._expand_to_grid(table)
        if not grid:
            return ""

        lines = []
        for row_idx, row in enumerate(grid):
            cells = [self._clean_cell_content(text).replace("|", "\\|") for text in row]
            lines.append("| " + " | ".join(cells) + " |")
            if row_idx == 0:
                lines.append("| " + " | ".join(["---"] * len(row)) + " |")

        return "\n".join(lines)

    # ==========================================================================
    # format_table_as_text()
    # ==========================================================================

    def format_table_as_text(self, table: TableData) -> str:
        """Convert TableData to tab separated plain text (one line per row)."""
        lines = []
        for row in table.rendered_rows():
            cells = [self._clean_cell_content(cell.content) for cell in row]
            lines.append("\t".join(cells))
        return "\n".join(lines)

    def _expand_to_grid(self, table: TableData) -> list:
        width = table.num_cols
        grid = [[""] * width for _ in range(table.num_rows)]
        taken = [[False] * width for _ in range(table.num_rows)]

        for r, row in enumerate(table.rendered_rows()):
            col = 0
            for cell in row:
                while col < width and taken[r][col]:
                    col += 1
                if col >= width:
                    break
                grid[r][col] = cell.content
                for dr in range(cell.row_span):
                    for dc in range(cell.col_span):
                        if r + dr < table.num_rows and col + dc < width:
                            taken[r + dr][col + dc] = True
                col += cell.col_span

        return grid

    def _clean_cell_content(self, content: str) -> str:
        """Collapse runs of whitespace to a single space."""
        if not content:
            return ""
        return re.sub(r'\s+', ' ', content).strip()


__all__ = [
    "TableOutputFormat",
    "TableProcessorConfig",
    "TableProcessor",
]
