"""Shared test fixtures: python-docx documents and synthetic Word binary streams."""

import io
import struct
from typing import Dict, List, Optional, Sequence, Tuple

import pytest
from docx import Document

from docstitch.core.processor.ole_helper.ole_word_stream import WordParagraph

# 1x1 transparent PNG
PNG_1X1 = bytes.fromhex(
    "89504e470d0a1a0a0000000d49484452000000010000000108060000001f15c4"
    "890000000d4944415478da636460f85f0f0002870180eb47ba920000000049454e44ae426082"
)

CELL = "\x07"
IN_TABLE = struct.pack("<HB", 0x2416, 1)
ROW_END = struct.pack("<HB", 0x2417, 1)


def depth(level: int) -> bytes:
    """sprmPItap operand for a nesting level."""
    return struct.pack("<Hi", 0x6649, level)


# ---------------------------------------------------------------------------
# Event recording
# ---------------------------------------------------------------------------


class RecordingTarget:
    """Event target that records start/data/end/close calls."""

    def __init__(self):
        self.events: List[Tuple] = []

    def start(self, tag, attrib=None):
        self.events.append(("start", tag, dict(attrib or {})))

    def data(self, text):
        self.events.append(("data", text))

    def end(self, tag):
        self.events.append(("end", tag))

    def close(self):
        self.events.append(("close",))
        return self.events

    def tags(self, kind="start"):
        return [event[1] for event in self.events if event[0] == kind]

    def text(self):
        return "".join(event[1] for event in self.events if event[0] == "data")


@pytest.fixture
def recorder():
    return RecordingTarget()


# ---------------------------------------------------------------------------
# Synthetic Word 97-2003 streams
# ---------------------------------------------------------------------------

TEXT_FC = 1024
FKP_PN = 1


class FakeOleFile:
    """Just enough of olefile.OleFileIO for WordDocumentStream."""

    def __init__(self, streams: Dict[str, bytes]):
        self._streams = streams
        self.closed = False

    def exists(self, name):
        return name in self._streams

    def openstream(self, name):
        return io.BytesIO(self._streams[name])

    def close(self):
        self.closed = True


def build_fib(ccp_text: int, fc_lcb: Dict[int, Tuple[int, int]], flags: int = 0, size: int = 512) -> bytearray:
    """FIB with csw=14, cslw=22 and 93 fc/lcb pairs."""
    fib = bytearray(size)
    struct.pack_into("<H", fib, 0, 0xA5EC)
    struct.pack_into("<H", fib, 0x0A, flags)
    struct.pack_into("<H", fib, 32, 14)
    struct.pack_into("<H", fib, 62, 22)
    struct.pack_into("<i", fib, 76, ccp_text)
    struct.pack_into("<H", fib, 152, 93)
    for index, (fc, lcb) in fc_lcb.items():
        struct.pack_into("<II", fib, 154 + index * 8, fc, lcb)
    return fib


def build_clx(cp_count: int, fc: int, compressed: bool = True) -> bytes:
    fc_value = (fc * 2) | 0x40000000 if compressed else fc
    plc = struct.pack("<II", 0, cp_count) + struct.pack("<HIH", 0, fc_value, 0)
    return b"\x02" + struct.pack("<I", len(plc)) + plc


def build_fkp_page(runs: Sequence[Tuple[int, int, int, bytes]]) -> bytes:
    """One PAPX FKP page from (fc_start, fc_end, istd, grpprl) runs."""
    page = bytearray(512)
    crun = len(runs)
    boundaries = [run[0] for run in runs] + [runs[-1][1]]
    struct.pack_into(f"<{crun + 1}I", page, 0, *boundaries)
    bx_start = (crun + 1) * 4

    offset = 256
    for i, (_, _, istd, grpprl) in enumerate(runs):
        data = struct.pack("<H", istd) + grpprl
        if len(data) % 2:
            data += b"\x00"
        page[offset] = 0
        page[offset + 1] = len(data) // 2
        page[offset + 2:offset + 2 + len(data)] = data
        page[bx_start + i * 13] = offset // 2
        offset += 2 + len(data)
    page[511] = crun
    return bytes(page)


def std_entry(name: str, base: int = 10) -> bytes:
    body = bytes(base) + struct.pack("<H", len(name)) + name.encode("utf-16-le") + b"\x00\x00"
    return struct.pack("<H", len(body)) + body


def build_stsh(names: Sequence[str]) -> bytes:
    return struct.pack("<H", 4) + struct.pack("<HH", len(names), 10) + b"".join(std_entry(n) for n in names)


def build_word_streams(
    paragraphs: Sequence[Tuple[str, str, bytes, int]],
    styles: Optional[Sequence[str]] = None,
    with_papx: bool = True,
) -> Dict[str, bytes]:
    """
    WordDocument and 0Table streams for a list of
    (text, terminator, grpprl, istd) paragraphs stored as cp1252 text.
    """
    full_text = "".join(text + terminator for text, terminator, _, _ in paragraphs)
    encoded = full_text.encode("cp1252")

    table = bytearray()
    fc_lcb = {}

    clx = build_clx(len(full_text), TEXT_FC)
    fc_lcb[33] = (len(table), len(clx))
    table += clx

    word = build_fib(len(full_text), {}, size=TEXT_FC)

    if with_papx:
        runs = []
        cp = 0
        for text, terminator, grpprl, istd in paragraphs:
            end = cp + len(text) + len(terminator)
            runs.append((TEXT_FC + cp, TEXT_FC + end, istd, grpprl))
            cp = end
        page = build_fkp_page(runs)
        word[FKP_PN * 512:FKP_PN * 512 + 512] = page

        plc = struct.pack("<III", TEXT_FC, TEXT_FC + len(full_text), FKP_PN)
        fc_lcb[13] = (len(table), len(plc))
        table += plc

    if styles:
        stsh = build_stsh(styles)
        fc_lcb[1] = (len(table), len(stsh))
        table += stsh

    for index, (fc, lcb) in fc_lcb.items():
        struct.pack_into("<II", word, 154 + index * 8, fc, lcb)

    return {"WordDocument": bytes(word) + encoded, "0Table": bytes(table)}


def paragraph(text: str, terminator: str = "\r", in_table=False, row_end=False, level=0, style="") -> WordParagraph:
    """WordParagraph shorthand for grouping tests."""
    return WordParagraph(
        text=text,
        terminator=terminator,
        cp=0,
        in_table=in_table,
        row_end=row_end,
        depth=level or (1 if in_table else 0),
        style_name=style,
    )


# A small report: heading, intro, 3-row table with a single-cell total row
REPORT_PARAGRAPHS = [
    ("Quarterly", "\r", b"", 1),
    ("Intro text.", "\r", b"", 0),
    ("Name", CELL, IN_TABLE, 0),
    ("Qty", CELL, IN_TABLE, 0),
    ("", CELL, IN_TABLE + ROW_END, 0),
    ("Apple", CELL, IN_TABLE, 0),
    ("3", CELL, IN_TABLE, 0),
    ("", CELL, IN_TABLE + ROW_END, 0),
    ("Total 3", CELL, IN_TABLE, 0),
    ("", CELL, IN_TABLE + ROW_END, 0),
    ("After table.", "\r", b"", 0),
]


@pytest.fixture
def report_streams():
    return build_word_streams(REPORT_PARAGRAPHS, styles=["Normal", "heading 1,h1"])


# ---------------------------------------------------------------------------
# python-docx documents
# ---------------------------------------------------------------------------


def build_merged_table(doc):
    """3x3 table: "B" spans columns 1-2 of row 0, "V" spans rows 1-2 of column 0."""
    table = doc.add_table(rows=3, cols=3)
    table.cell(0, 0).text = "A"
    table.cell(0, 1).merge(table.cell(0, 2)).text = "B"
    table.cell(1, 0).merge(table.cell(2, 0)).text = "V"
    table.cell(1, 1).text = "c"
    table.cell(1, 2).text = "d"
    table.cell(2, 1).text = "e"
    table.cell(2, 2).text = "f"
    return table


@pytest.fixture
def report_docx(tmp_path):
    """DOCX with a heading, prose, one merged table, and a second simple table."""
    doc = Document()
    doc.add_heading("Quarterly Report", level=1)
    doc.add_paragraph("Intro text.")
    build_merged_table(doc)
    doc.add_heading("Details", level=2)
    second = doc.add_table(rows=1, cols=2)
    second.cell(0, 0).text = "x < y"
    second.cell(0, 1).text = ""
    doc.add_paragraph("Closing words.")

    path = tmp_path / "report.docx"
    doc.save(str(path))
    return path


@pytest.fixture
def docx_document(report_docx):
    return Document(str(report_docx))


@pytest.fixture
def image_docx(tmp_path):
    image = tmp_path / "dot.png"
    image.write_bytes(PNG_1X1)

    doc = Document()
    para = doc.add_paragraph("Line one")
    run = para.add_run()
    run.add_break()
    para.add_run("Line two")
    doc.add_picture(str(image))

    path = tmp_path / "image.docx"
    doc.save(str(path))
    return path
