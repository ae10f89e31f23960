# docstitch/core/functions/utils.py
"""
문서 처리 공통 유틸리티 모듈

Text helpers shared by the table extractors, the table renderer and the
placeholder substitution step.
"""
import hashlib
import re
from typing import Iterable, Optional

# Word cell-end mark
CELL_MARK = "\u0007"

_CONTROL_CHARS = re.compile(r"[\u0000-\u001F\u007F]")

_INVISIBLE = (
    "[\u0000-\u001F\u007F-\u009F\u00A0\u1680\u180E\u2000-\u200F"
    "\u2028\u2029\u202F\u205F\u3000\uFEFF]+"
)
_INVISIBLE_BEFORE_TD = re.compile(_INVISIBLE + r"(<td)")
_INVISIBLE_BEFORE_TR = re.compile(_INVISIBLE + r"(<tr)")
_INVISIBLE_AFTER_TD = re.compile(r"(</td>)" + _INVISIBLE)
_INVISIBLE_AFTER_TR = re.compile(r"(</tr>)" + _INVISIBLE)

_BLANK_LINES = re.compile(r"^\s*$\n", re.MULTILINE)

_FINGERPRINT_STRIP = re.compile("[\\s\u0000-\u001F\u007F-\u009F\uFEFF]+")

_HTML_ESCAPES = str.maketrans({
    "&": "&amp;",
    "<": "&lt;",
    ">": "&gt;",
    '"': "&quot;",
    "'": "&#39;",
})

_PROSE_ESCAPES = str.maketrans({"&": "&amp;", "<": "&lt;", ">": "&gt;"})


def clean_cell_text(text: Optional[str]) -> str:
    """
    셀 텍스트를 정리합니다.

    Trims the text, drops a trailing cell-end mark and removes every
    remaining control character.

    Args:
        text: Raw cell text (may be None)

    Returns:
        Cleaned text, never None
    """
    if not text:
        return ""
    cleaned = text.strip()
    if cleaned.endswith(CELL_MARK):
        cleaned = cleaned[:-1]
    cleaned = _CONTROL_CHARS.sub("", cleaned)
    return cleaned.strip()


def escape_html(text: str) -> str:
    """Escape &, <, >, " and ' for insertion into HTML text."""
    return text.translate(_HTML_ESCAPES)


def escape_prose(text: str) -> str:
    """Escape &, < and > in prose text; quotes are left as written."""
    return text.translate(_PROSE_ESCAPES)


def clean_table_html(table_html: Optional[str]) -> Optional[str]:
    """
    Remove invisible characters around row and cell tags.

    Args:
        table_html: Rendered table HTML

    Returns:
        Cleaned HTML (None and empty input are returned unchanged)
    """
    if not table_html:
        return table_html
    cleaned = _INVISIBLE_BEFORE_TD.sub(r"\1", table_html)
    cleaned = _INVISIBLE_BEFORE_TR.sub(r"\1", cleaned)
    cleaned = _INVISIBLE_AFTER_TD.sub(r"\1", cleaned)
    cleaned = _INVISIBLE_AFTER_TR.sub(r"\1", cleaned)
    return cleaned


def collapse_blank_lines(text: str) -> str:
    """Remove every line that is empty or whitespace-only."""
    return _BLANK_LINES.sub("", text)


def content_fingerprint(parts: Iterable[str]) -> str:
    """
    Cheap identity of a table's text content.

    Whitespace and control characters are ignored so the structural pass and
    the streaming pass produce the same value for the same table.

    Args:
        parts: Text fragments in document order

    Returns:
        MD5 hex digest of the normalized text
    """
    normalized = _FINGERPRINT_STRIP.sub("", "".join(parts))
    return hashlib.md5(normalized.encode("utf-8")).hexdigest()


__all__ = [
    "CELL_MARK",
    "clean_cell_text",
    "escape_html",
    "escape_prose",
    "clean_table_html",
    "collapse_blank_lines",
    "content_fingerprint",
]
