# docstitch/core/processor/markdown_helper/table_placeholder.py
"""
Table Placeholder Substitution

The streaming prose pass writes TABLE_PLACEHOLDER wherever it meets a table.
The structural pass has already rendered every table. This module puts the
two together:

1. TableQueue holds the rendered tables in document order (an arena plus a
   read cursor); each placeholder consumes the next entry
2. check_consistency() compares counts and per-position fingerprints and
   logs a warning for every disagreement
3. substitute_table_placeholders() replaces placeholders left to right,
   deletes surplus placeholders, appends unconsumed tables at the end and
   removes blank lines
"""
import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence

from docstitch.core.functions.table_extractor import TableData
from docstitch.core.functions.table_processor import TableProcessor
from docstitch.core.functions.utils import (
    clean_table_html,
    collapse_blank_lines,
    content_fingerprint,
)

logger = logging.getLogger("document-processor")

TABLE_PLACEHOLDER = "<!-- TABLE_PLACEHOLDER -->"


def fingerprint_table(table: TableData) -> str:
    """Fingerprint of all cell text of a table, skipped cells included."""
    return content_fingerprint(cell.content for row in table.rows for cell in row)


@dataclass(frozen=True)
class QueuedTable:
    """A rendered table waiting for its placeholder."""
    index: int
    rendered: str
    fingerprint: str = ""


class TableQueue:
    """
    Ordered, consume-once queue of rendered tables.

    Example:
        >>> queue = TableQueue.from_tables(tables, TableProcessor())
        >>> first = queue.pop()
    """

    def __init__(self, rendered: Iterable[str], fingerprints: Optional[Sequence[str]] = None):
        rendered = list(rendered)
        fingerprints = list(fingerprints or [])
        fingerprints += [""] * (len(rendered) - len(fingerprints))
        self._arena = tuple(
            QueuedTable(index=i, rendered=text, fingerprint=fp)
            for i, (text, fp) in enumerate(zip(rendered, fingerprints))
        )
        self._cursor = 0

    @classmethod
    def from_tables(cls, tables: List[TableData], processor: TableProcessor) -> "TableQueue":
        """Render tables in order and queue them with their fingerprints."""
        return cls(
            [processor.format_table(table) for table in tables],
            [fingerprint_table(table) for table in tables],
        )

    def __len__(self) -> int:
        return len(self._arena)

    @property
    def consumed(self) -> int:
        return self._cursor

    def pop(self) -> Optional[QueuedTable]:
        """Next unconsumed table, or None when the queue is exhausted."""
        if self._cursor >= len(self._arena):
            return None
        entry = self._arena[self._cursor]
        self._cursor += 1
        return entry

    def remaining(self) -> List[QueuedTable]:
        """Consume and return every table not yet consumed."""
        rest = list(self._arena[self._cursor:])
        self._cursor = len(self._arena)
        return rest

    def rendered_tables(self) -> List[str]:
        return [entry.rendered for entry in self._arena]

    def check_consistency(self, placeholder_fingerprints: Sequence[str]) -> int:
        """
        Compare the queue with the placeholders the prose pass produced.

        Args:
            placeholder_fingerprints: Fingerprint of the table behind each
                placeholder, in order

        Returns:
            Number of disagreements found (each one logged as a warning)
        """
        problems = 0
        if len(placeholder_fingerprints) != len(self._arena):
            logger.warning(
                f"Table count mismatch: {len(self._arena)} extracted tables, "
                f"{len(placeholder_fingerprints)} placeholders"
            )
            problems += 1

        for entry, fingerprint in zip(self._arena, placeholder_fingerprints):
            if entry.fingerprint and fingerprint and entry.fingerprint != fingerprint:
                logger.warning(f"Table {entry.index} content differs from its placeholder position")
                problems += 1

        return problems


def substitute_table_placeholders(
    text: str,
    queue: TableQueue,
    placeholder: str = TABLE_PLACEHOLDER
) -> str:
    """
    Replace placeholders with queued tables in a single left-to-right scan.

    Args:
        text: Prose containing placeholders
        queue: Rendered tables in document order
        placeholder: Marker written by the prose pass

    Returns:
        Final text with tables in place and blank lines removed
    """
    segments = text.split(placeholder)
    parts = [segments[0]]
    surplus = 0

    for segment in segments[1:]:
        entry = queue.pop()
        if entry is None:
            surplus += 1
        else:
            parts.append(clean_table_html(entry.rendered))
        parts.append(segment)

    if surplus:
        logger.warning(f"{surplus} placeholders had no extracted table and were removed")

    leftovers = queue.remaining()
    if leftovers:
        logger.warning(f"{len(leftovers)} tables had no placeholder and were appended")
    for entry in leftovers:
        parts.append("\n\n" + clean_table_html(entry.rendered) + "\n\n")

    result = "".join(parts).replace(placeholder, "")
    return collapse_blank_lines(result)


__all__ = [
    "TABLE_PLACEHOLDER",
    "QueuedTable",
    "TableQueue",
    "fingerprint_table",
    "substitute_table_placeholders",
]
