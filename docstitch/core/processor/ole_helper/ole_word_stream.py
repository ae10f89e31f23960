# docstitch/core/processor/ole_helper/ole_word_stream.py
"""
OLE Word Stream Reader

Reads the main-document paragraphs of a Word 97-2003 binary document
(MS-DOC) out of its OLE compound file.

Streams used:
- WordDocument: FIB, text pieces, FKP pages with paragraph properties
- 0Table / 1Table (picked by FIB.fWhichTblStm): piece table (CLX),
  PAPX bin table (PlcBtePapx), style sheet (STSH)

Paragraph properties read from PAPX grpprl:
- sprmPFInTable (0x2416): paragraph belongs to a table
- sprmPFTtp (0x2417): table terminating paragraph (row end)
- sprmPItap (0x6649): table nesting depth
- sprmPFInnerTableCell (0x244B) / sprmPFInnerTtp (0x244C): nested table marks

Special characters in the text stream:
- 0x0D paragraph end, 0x07 cell / row end
- 0x13 .. 0x14 .. 0x15 field (instruction is dropped, result is kept)
- 0x0B line break, 0x0C page/section break
- 0x01 / 0x08 picture / drawn object anchors
"""
import bisect
import logging
import struct
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

import olefile

from docstitch.core.functions.exceptions import DocumentParseError

logger = logging.getLogger("document-processor")


# ============================================================================
# Constants
# ============================================================================

FIB_IDENT = 0xA5EC
FIB_FLAG_ENCRYPTED = 0x0100
FIB_FLAG_WHICH_TABLE = 0x0200

# FibRgFcLcb97 pair indices
FC_STSHF = 1
FC_PLCF_BTE_PAPX = 13
FC_CLX = 33

SPRM_P_F_IN_TABLE = 0x2416
SPRM_P_F_TTP = 0x2417
SPRM_P_F_INNER_TABLE_CELL = 0x244B
SPRM_P_F_INNER_TTP = 0x244C
SPRM_P_ITAP = 0x6649
SPRM_T_DEF_TABLE = 0xD608
SPRM_P_CHG_TABS = 0xC615

# operand size by spra (sprm >> 13); None = variable
SPRA_OPERAND_SIZE = (1, 1, 2, 4, 2, 2, None, 3)

FKP_PAGE_SIZE = 512
BX_SIZE = 13

PARAGRAPH_END = "\r"
CELL_MARK = "\x07"
FIELD_BEGIN = "\x13"
FIELD_SEPARATOR = "\x14"
FIELD_END = "\x15"
LINE_BREAK = "\x0b"
PAGE_BREAK = "\x0c"

# picture / drawn object anchors are kept as this character
IMAGE_MARK = "\ufffc"

_CHAR_MAP = {
    "\x01": IMAGE_MARK,
    "\x08": IMAGE_MARK,
    PAGE_BREAK: LINE_BREAK,
    "\x1e": "-",
    "\xad": "",
}
_KEPT_CONTROLS = {"\t", LINE_BREAK}


# ============================================================================
# Data classes
# ============================================================================

@dataclass
class FibInfo:
    """The FIB fields this reader needs."""
    flags: int
    ccp_text: int
    fc_lcb: Dict[int, Tuple[int, int]] = field(default_factory=dict)

    @property
    def encrypted(self) -> bool:
        return bool(self.flags & FIB_FLAG_ENCRYPTED)

    @property
    def table_stream_name(self) -> str:
        return "1Table" if self.flags & FIB_FLAG_WHICH_TABLE else "0Table"


@dataclass
class Piece:
    """One entry of the piece table."""
    cp_start: int
    cp_end: int
    fc: int
    compressed: bool

    def fc_of(self, cp: int) -> int:
        return self.fc + (cp - self.cp_start) * (1 if self.compressed else 2)


@dataclass
class ParagraphProperties:
    """Table-related properties of one paragraph."""
    istd: int = 0
    in_table: bool = False
    row_end: bool = False
    inner_cell: bool = False
    inner_row_end: bool = False
    depth: int = 0


@dataclass
class WordParagraph:
    """One main-document paragraph.

    Attributes:
        text: Paragraph text without its terminator; fields are reduced to
            their result, line breaks are kept as 0x0B and picture anchors
            as IMAGE_MARK
        terminator: "\\r" or "\\x07"
        cp: Character position of the terminator
        in_table: Paragraph is table content
        row_end: Paragraph ends an outermost table row
        depth: Table nesting depth (0 outside tables)
        style_name: Name of the paragraph style
    """
    text: str
    terminator: str
    cp: int
    in_table: bool = False
    row_end: bool = False
    depth: int = 0
    style_name: str = ""


# ============================================================================
# Binary parsing helpers
# ============================================================================

def parse_fib(word_stream: bytes) -> FibInfo:
    """Parse the FIB at the start of the WordDocument stream."""
    if len(word_stream) < 0x44:
        raise DocumentParseError("WordDocument stream too short for a FIB")

    w_ident, = struct.unpack_from('<H', word_stream, 0)
    if w_ident != FIB_IDENT:
        raise DocumentParseError(f"Unexpected FIB signature 0x{w_ident:04X}")

    flags, = struct.unpack_from('<H', word_stream, 0x0A)

    # FibBase (32) | csw | fibRgW | cslw | fibRgLw | cbRgFcLcb | fibRgFcLcb
    csw, = struct.unpack_from('<H', word_stream, 32)
    rg_lw_offset = 34 + csw * 2
    cslw, = struct.unpack_from('<H', word_stream, rg_lw_offset)
    rg_lw_start = rg_lw_offset + 2
    ccp_text, = struct.unpack_from('<i', word_stream, rg_lw_start + 12)

    fc_lcb_offset = rg_lw_start + cslw * 4
    cb_rg_fc_lcb, = struct.unpack_from('<H', word_stream, fc_lcb_offset)
    blob_start = fc_lcb_offset + 2

    fc_lcb = {}
    for index in (FC_STSHF, FC_PLCF_BTE_PAPX, FC_CLX):
        if index < cb_rg_fc_lcb:
            fc_lcb[index] = struct.unpack_from('<II', word_stream, blob_start + index * 8)

    return FibInfo(flags=flags, ccp_text=max(ccp_text, 0), fc_lcb=fc_lcb)


def parse_piece_table(clx: bytes) -> List[Piece]:
    """Parse the CLX: skip Prc entries, then read the PlcPcd."""
    pos = 0
    while pos < len(clx) and clx[pos] == 0x01:
        cb_grpprl, = struct.unpack_from('<h', clx, pos + 1)
        pos += 3 + cb_grpprl

    if pos >= len(clx) or clx[pos] != 0x02:
        raise DocumentParseError("Piece table (Pcdt) not found in CLX")

    lcb, = struct.unpack_from('<I', clx, pos + 1)
    plc = clx[pos + 5:pos + 5 + lcb]
    count = (lcb - 4) // 12

    cps = struct.unpack_from(f'<{count + 1}I', plc, 0)
    pieces = []
    for i in range(count):
        pcd_offset = (count + 1) * 4 + i * 8
        fc_value, = struct.unpack_from('<I', plc, pcd_offset + 2)
        compressed = bool(fc_value & 0x40000000)
        fc = fc_value & 0x3FFFFFFF
        if compressed:
            fc //= 2
        pieces.append(Piece(cp_start=cps[i], cp_end=cps[i + 1], fc=fc, compressed=compressed))
    return pieces


def sprm_operand_size(grpprl: bytes, pos: int, sprm: int) -> Tuple[int, int]:
    """Return (header bytes before the operand, operand length) of a sprm."""
    size = SPRA_OPERAND_SIZE[(sprm >> 13) & 0x7]
    if size is not None:
        return 0, size
    if sprm == SPRM_T_DEF_TABLE:
        cb, = struct.unpack_from('<H', grpprl, pos)
        return 2, cb - 1
    if sprm == SPRM_P_CHG_TABS and pos < len(grpprl) and grpprl[pos] == 255:
        deletions = grpprl[pos + 1]
        additions = grpprl[pos + 2 + deletions * 4]
        return 1, 2 + deletions * 4 + additions * 3
    return 1, grpprl[pos]


def parse_paragraph_grpprl(istd: int, grpprl: bytes) -> ParagraphProperties:
    """Read the table-related sprms of a paragraph."""
    props = ParagraphProperties(istd=istd)
    pos = 0
    while pos + 2 <= len(grpprl):
        sprm, = struct.unpack_from('<H', grpprl, pos)
        pos += 2
        header, size = sprm_operand_size(grpprl, pos, sprm)
        operand = grpprl[pos + header:pos + header + size]
        pos += header + size

        if not operand:
            continue
        if sprm == SPRM_P_F_IN_TABLE:
            props.in_table = operand[0] != 0
        elif sprm == SPRM_P_F_TTP:
            props.row_end = operand[0] != 0
        elif sprm == SPRM_P_F_INNER_TABLE_CELL:
            props.inner_cell = operand[0] != 0
        elif sprm == SPRM_P_F_INNER_TTP:
            props.inner_row_end = operand[0] != 0
        elif sprm == SPRM_P_ITAP and len(operand) == 4:
            props.depth, = struct.unpack('<i', operand)

    if props.in_table and props.depth == 0:
        props.depth = 1
    return props


def parse_fkp_page(page: bytes) -> List[Tuple[int, int, ParagraphProperties]]:
    """Parse one PAPX FKP page into (fc_start, fc_end, properties) runs."""
    crun = page[FKP_PAGE_SIZE - 1]
    rgfc = struct.unpack_from(f'<{crun + 1}I', page, 0)
    bx_start = (crun + 1) * 4

    runs = []
    for i in range(crun):
        b_offset = page[bx_start + i * BX_SIZE]
        props = ParagraphProperties()
        if b_offset:
            offset = b_offset * 2
            cb = page[offset]
            if cb == 0:
                length = page[offset + 1] * 2
                data = page[offset + 2:offset + 2 + length]
            else:
                length = cb * 2 - 1
                data = page[offset + 1:offset + 1 + length]
            if len(data) >= 2:
                istd, = struct.unpack_from('<H', data, 0)
                props = parse_paragraph_grpprl(istd, data[2:])
        runs.append((rgfc[i], rgfc[i + 1], props))
    return runs


def parse_style_names(stsh: bytes) -> Dict[int, str]:
    """Map style index (istd) to style name from the STSH."""
    names: Dict[int, str] = {}
    if len(stsh) < 6:
        return names

    cb_stshi, = struct.unpack_from('<H', stsh, 0)
    cstd, cb_std_base = struct.unpack_from('<HH', stsh, 2)

    pos = 2 + cb_stshi
    for istd in range(cstd):
        if pos + 2 > len(stsh):
            break
        cb_std, = struct.unpack_from('<H', stsh, pos)
        std = stsh[pos + 2:pos + 2 + cb_std]
        pos += 2 + cb_std
        if not cb_std or len(std) < cb_std_base + 2:
            continue

        cch, = struct.unpack_from('<H', std, cb_std_base)
        raw = std[cb_std_base + 2:cb_std_base + 2 + cch * 2]
        name = raw.decode('utf-16-le', errors='ignore')
        # "heading 1,h1": the first alias is the name
        names[istd] = name.split(',')[0].strip()
    return names


# ============================================================================
# WordDocumentStream
# ============================================================================

class WordDocumentStream:
    """
    Main-document reader for a binary Word document.

    Usage:
        with olefile.OleFileIO(BytesIO(data)) as ole:
            stream = WordDocumentStream(ole)
            for paragraph in stream.paragraphs():
                ...
    """

    def __init__(self, ole: olefile.OleFileIO, use_paragraph_properties: bool = True):
        if not ole.exists('WordDocument'):
            raise DocumentParseError("No WordDocument stream in OLE file")

        self._word = ole.openstream('WordDocument').read()
        try:
            self.fib = parse_fib(self._word)
        except struct.error as e:
            raise DocumentParseError(f"Unreadable FIB: {e}") from e
        if self.fib.encrypted:
            raise DocumentParseError("Encrypted DOC files are not supported")

        table_name = self.fib.table_stream_name
        if not ole.exists(table_name):
            raise DocumentParseError(f"Table stream {table_name} is missing")
        self._table = ole.openstream(table_name).read()

        fc_clx, lcb_clx = self.fib.fc_lcb.get(FC_CLX, (0, 0))
        if not lcb_clx:
            raise DocumentParseError("Document has no piece table")
        try:
            self.pieces = parse_piece_table(self._table[fc_clx:fc_clx + lcb_clx])
        except (struct.error, IndexError) as e:
            raise DocumentParseError(f"Unreadable piece table: {e}") from e

        self._papx_runs: List[Tuple[int, int, ParagraphProperties]] = []
        self.style_names: Dict[int, str] = {}
        if use_paragraph_properties:
            self._papx_runs = self._read_papx_runs()
            self.style_names = self._read_style_names()
        self._papx_starts = [run[0] for run in self._papx_runs]
        self._paragraphs: Optional[List[WordParagraph]] = None

    @property
    def has_paragraph_properties(self) -> bool:
        return bool(self._papx_runs)

    def _read_papx_runs(self) -> List[Tuple[int, int, ParagraphProperties]]:
        fc, lcb = self.fib.fc_lcb.get(FC_PLCF_BTE_PAPX, (0, 0))
        if lcb < 4:
            return []
        plc = self._table[fc:fc + lcb]
        count = (lcb - 4) // 8
        pns = struct.unpack_from(f'<{count}I', plc, (count + 1) * 4)

        runs = []
        for pn in pns:
            offset = (pn & 0x3FFFFF) * FKP_PAGE_SIZE
            page = self._word[offset:offset + FKP_PAGE_SIZE]
            if len(page) < FKP_PAGE_SIZE:
                logger.warning(f"PAPX page {pn} lies outside the WordDocument stream")
                continue
            try:
                runs.extend(parse_fkp_page(page))
            except (struct.error, IndexError) as e:
                logger.warning(f"Unreadable PAPX page {pn}: {e}")
        runs.sort(key=lambda run: run[0])
        return runs

    def _read_style_names(self) -> Dict[int, str]:
        fc, lcb = self.fib.fc_lcb.get(FC_STSHF, (0, 0))
        if not lcb:
            return {}
        try:
            return parse_style_names(self._table[fc:fc + lcb])
        except struct.error as e:
            logger.warning(f"Unreadable style sheet: {e}")
            return {}

    def properties_at(self, fc: int) -> ParagraphProperties:
        """Paragraph properties of the paragraph whose mark is at fc."""
        index = bisect.bisect_right(self._papx_starts, fc) - 1
        if index >= 0:
            start, end, props = self._papx_runs[index]
            if start <= fc < end:
                return props
        return ParagraphProperties()

    def main_text_chars(self):
        """Yield (cp, fc, char) for every main-document character."""
        limit = self.fib.ccp_text
        for piece in self.pieces:
            if piece.cp_start >= limit:
                break
            cp_end = min(piece.cp_end, limit)
            length = cp_end - piece.cp_start
            if piece.compressed:
                raw = self._word[piece.fc:piece.fc + length]
                text = raw.decode('cp1252', errors='replace')
            else:
                raw = self._word[piece.fc:piece.fc + length * 2]
                text = raw.decode('utf-16-le', errors='replace')
            for i, ch in enumerate(text):
                cp = piece.cp_start + i
                yield cp, piece.fc_of(cp), ch

    def paragraphs(self) -> List[WordParagraph]:
        """Main-document paragraphs in document order."""
        if self._paragraphs is None:
            self._paragraphs = self._build_paragraphs()
        return self._paragraphs

    def _build_paragraphs(self) -> List[WordParagraph]:
        paragraphs: List[WordParagraph] = []
        buffer: List[str] = []
        # one entry per open field: True while inside its instruction
        fields: List[bool] = []

        for cp, fc, ch in self.main_text_chars():
            if ch == FIELD_BEGIN:
                fields.append(True)
                continue
            if ch == FIELD_SEPARATOR:
                if fields:
                    fields[-1] = False
                continue
            if ch == FIELD_END:
                if fields:
                    fields.pop()
                continue

            if ch in (PARAGRAPH_END, CELL_MARK):
                paragraphs.append(self._make_paragraph(''.join(buffer), ch, cp, fc))
                buffer = []
                continue

            if any(fields):
                continue

            ch = _CHAR_MAP.get(ch, ch)
            if len(ch) == 1 and ord(ch) < 0x20 and ch not in _KEPT_CONTROLS:
                continue
            buffer.append(ch)

        if buffer and ''.join(buffer).strip():
            paragraphs.append(self._make_paragraph(''.join(buffer), PARAGRAPH_END, self.fib.ccp_text, -1))

        if not self.has_paragraph_properties:
            mark_row_ends_by_cell_marks(paragraphs)

        logger.debug(f"Read {len(paragraphs)} paragraphs from WordDocument stream")
        return paragraphs

    def _make_paragraph(self, text: str, terminator: str, cp: int, fc: int) -> WordParagraph:
        paragraph = WordParagraph(text=text, terminator=terminator, cp=cp)
        if self.has_paragraph_properties and fc >= 0:
            props = self.properties_at(fc)
            paragraph.in_table = props.in_table
            paragraph.depth = props.depth
            paragraph.row_end = props.row_end and props.depth <= 1
            paragraph.style_name = self.style_names.get(props.istd, "")
        return paragraph


def mark_row_ends_by_cell_marks(paragraphs: List[WordParagraph]) -> None:
    """Flag table paragraphs from cell marks alone.

    Used when paragraph properties are unavailable: every paragraph ended by
    a cell mark is table content, and an empty one directly after another
    cell mark closes the row. An empty cell after a non-empty one in the
    middle of a row is therefore read as a row end and splits the row.
    """
    previous: Optional[WordParagraph] = None
    for paragraph in paragraphs:
        if paragraph.terminator == CELL_MARK:
            paragraph.in_table = True
            paragraph.depth = 1
            paragraph.row_end = (
                not paragraph.text
                and previous is not None
                and previous.terminator == CELL_MARK
                and not previous.row_end
            )
        previous = paragraph


__all__ = [
    "FibInfo",
    "Piece",
    "ParagraphProperties",
    "WordParagraph",
    "WordDocumentStream",
    "IMAGE_MARK",
    "LINE_BREAK",
    "CELL_MARK",
    "parse_fib",
    "parse_piece_table",
    "parse_paragraph_grpprl",
    "parse_fkp_page",
    "parse_style_names",
    "mark_row_ends_by_cell_marks",
]
