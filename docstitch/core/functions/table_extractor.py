# docstitch/core/functions/table_extractor.py
"""
Table Extractor - Neutral Table Model and Extraction Interface

Defines the format-independent representation of a table (a grid of logical
cells carrying span metadata) and the abstract interface every format-specific
table source implements.

Module Components:
- TableCell: One logical cell (text, spans, skip flag)
- TableData: One resolved table (rows of cells, logical width, source index)
- TableRegion: A located table inside a document (pass 1 result)
- CoverageReport: Gaps/overlaps found when laying the spans out on a grid
- BaseTableExtractor: Abstract table source (extract_tables() capability)
- NullTableExtractor: Table source that never yields tables

Usage Example:
    from docstitch.core.functions.table_extractor import (
        BaseTableExtractor,
        TableData,
        TableRegion,
    )

    class MyTableExtractor(BaseTableExtractor):
        def detect_table_regions(self, content):
            ...

        def extract_table_from_region(self, content, region):
            ...
"""
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

logger = logging.getLogger("document-processor")


@dataclass(frozen=True)
class TableCell:
    """Represents a single logical table cell.

    Attributes:
        content: Cleaned cell text (empty string for blank cells)
        row_span: Number of grid rows this cell occupies (>= 1)
        col_span: Number of grid columns this cell occupies (>= 1)
        is_header: Whether this cell is a header cell
        row_index: Row position in the source table
        col_index: Physical cell position inside its source row
        is_skip: True when the position is covered by an earlier cell's span
            and must not be rendered on its own
    """
    content: str = ""
    row_span: int = 1
    col_span: int = 1
    is_header: bool = False
    row_index: int = 0
    col_index: int = 0
    is_skip: bool = False


@dataclass(frozen=True)
class CoverageReport:
    """Result of laying a table's rendered cells out on its logical grid.

    Attributes:
        gaps: Grid positions that no rendered cell covers
        overlaps: Grid positions claimed by more than one cell, or claimed
            outside the logical width
    """
    gaps: Tuple[Tuple[int, int], ...] = ()
    overlaps: Tuple[Tuple[int, int], ...] = ()

    @property
    def is_clean(self) -> bool:
        return not self.gaps and not self.overlaps


@dataclass(frozen=True)
class TableData:
    """Data class for one resolved table.

    A table is built once per conversion and never modified afterwards.

    Attributes:
        rows: Source rows, each the physical cells in source order
            (skipped cells included, flagged with is_skip)
        num_rows: Number of rows
        num_cols: Logical grid width
        has_header: Whether the first row is a header row
        start_offset: Position of first occurrence in the source
            (table index or character position)
        end_offset: End position in the source
        source_format: Source format identifier ("doc", "docx")
        metadata: Additional information about the table
    """
    rows: List[List[TableCell]] = field(default_factory=list)
    num_rows: int = 0
    num_cols: int = 0
    has_header: bool = False
    start_offset: int = 0
    end_offset: int = 0
    source_format: str = ""
    metadata: Dict[str, Any] = field(default_factory=dict)

    def is_valid(self, min_rows: int = 1, min_cols: int = 1) -> bool:
        """Check if this table meets minimum requirements."""
        return self.num_rows >= min_rows and self.num_cols >= min_cols

    @property
    def declared_cell_counts(self) -> List[int]:
        """Physical cell count of every row, before span expansion."""
        return [len(row) for row in self.rows]

    def rendered_rows(self) -> List[List[TableCell]]:
        """Rows with skipped cells removed."""
        return [[cell for cell in row if not cell.is_skip] for row in self.rows]

    def coverage_report(self) -> CoverageReport:
        """Lay the rendered cells on a rows x num_cols occupancy grid.

        Cells are placed the way an HTML table lays them out: each cell takes
        the next free column of its row, skipping positions held by rowspans
        from above.
        """
        height = self.num_rows
        width = self.num_cols
        occupied = [[False] * width for _ in range(height)]
        overlaps: List[Tuple[int, int]] = []

        for r, row in enumerate(self.rendered_rows()):
            col = 0
            for cell in row:
                while col < width and occupied[r][col]:
                    col += 1
                for dr in range(cell.row_span):
                    for dc in range(cell.col_span):
                        rr, cc = r + dr, col + dc
                        if rr >= height or cc >= width or occupied[rr][cc]:
                            overlaps.append((rr, cc))
                        else:
                            occupied[rr][cc] = True
                col += cell.col_span

        gaps = [
            (r, c)
            for r in range(height)
            for c in range(width)
            if not occupied[r][c]
        ]
        return CoverageReport(gaps=tuple(gaps), overlaps=tuple(overlaps))


@dataclass
class TableRegion:
    """Represents a located table in the document.

    Used for the 2-Pass table extraction approach:
    - Pass 1: Locate tables (TableRegion objects)
    - Pass 2: Build resolved tables from regions (TableData objects)

    Attributes:
        start_offset: Start position in the document
        end_offset: End position in the document
        row_count: Number of rows
        col_count: Estimated number of columns
        metadata: Format-specific payload needed by pass 2
    """
    start_offset: int = 0
    end_offset: int = 0
    row_count: int = 0
    col_count: int = 0
    metadata: dict = field(default_factory=dict)


@dataclass
class TableExtractorConfig:
    """Configuration for table extraction.

    Tables are never filtered by size: every table found by pass 1 yields a
    TableData so that table order matches the prose pass.

    Attributes:
        include_header_row: Whether to mark the first row as header
    """
    include_header_row: bool = False


class BaseTableExtractor(ABC):
    """Abstract table source.

    Each source format implements a subclass with format-specific logic.
    Extraction follows a 2-Pass approach:
    1. detect_table_regions(): locate every outermost table in document order
    2. extract_table_from_region(): resolve spans and text for one table

    A failure inside pass 2 never aborts the document; the table is replaced
    by an empty best-effort table so positions stay aligned.
    """

    format_name = ""

    def __init__(self, config: Optional[TableExtractorConfig] = None):
        """Initialize the extractor.

        Args:
            config: Table extraction configuration
        """
        self.config = config or TableExtractorConfig()
        self.logger = logging.getLogger("document-processor")

    @abstractmethod
    def detect_table_regions(self, content: Any) -> List[TableRegion]:
        """Locate tables in the document content.

        Args:
            content: Format-specific document object

        Returns:
            List of TableRegion objects in document order
        """
        pass

    @abstractmethod
    def extract_table_from_region(
        self,
        content: Any,
        region: TableRegion
    ) -> Optional[TableData]:
        """Build a resolved table from a located region.

        Args:
            content: Format-specific document object
            region: TableRegion identifying the table

        Returns:
            TableData object or None if nothing could be read
        """
        pass

    def extract_tables(self, content: Any) -> List[TableData]:
        """Extract all tables from document content, in document order.

        Args:
            content: Format-specific document object

        Returns:
            List of TableData objects, one per detected region
        """
        tables = []

        regions = self.detect_table_regions(content)
        self.logger.debug(f"Detected {len(regions)} table regions")

        seen_offsets = set()
        for region in regions:
            if region.start_offset in seen_offsets:
                self.logger.debug(f"Duplicate table at offset {region.start_offset}, skipped")
                continue
            seen_offsets.add(region.start_offset)

            try:
                table = self.extract_table_from_region(content, region)
            except Exception as e:
                self.logger.warning(
                    f"Table at offset {region.start_offset} could not be read: {e}"
                )
                table = None

            if table is None:
                table = TableData(
                    start_offset=region.start_offset,
                    end_offset=region.end_offset,
                    source_format=self.format_name,
                    metadata={"best_effort": True},
                )
            tables.append(table)

        self.logger.debug(f"Extracted {len(tables)} tables")
        return tables


class NullTableExtractor(BaseTableExtractor):
    """Table source for documents without tables support."""

    def detect_table_regions(self, content: Any) -> List[TableRegion]:
        return []

    def extract_table_from_region(
        self,
        content: Any,
        region: TableRegion
    ) -> Optional[TableData]:
        return None

    def extract_tables(self, content: Any) -> List[TableData]:
        return []


__all__ = [
    "TableCell",
    "TableData",
    "TableRegion",
    "CoverageReport",
    "TableExtractorConfig",
    "BaseTableExtractor",
    "NullTableExtractor",
]
