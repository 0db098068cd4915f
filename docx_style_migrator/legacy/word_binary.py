"""
Word 97-2003 binary document reader.

Reads the main document story of a ``.doc`` compound file: text from the
piece table, paragraph and character properties from the formatted disk
pages (FKPs), the stylesheet and the font table. Paragraphs inside
tables are grouped into top-level tables, with nested tables flattened
into their enclosing cell.
"""

import bisect
import logging
import struct
from dataclasses import replace
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

import olefile

from ..exceptions import LegacyFormatError, UnsupportedFormatError
from .fib import FC_CLX, FC_PLCF_BTE_CHPX, FC_PLCF_BTE_PAPX, FC_STSHF, FC_STTBF_FFN, Fib
from .models import (
    LegacyDocument,
    LegacyParagraph,
    LegacyRun,
    LegacyStyle,
    LegacyTable,
    LegacyTableCell,
    LegacyTableRow,
    STK_CHARACTER,
)
from .sprm import CharacterProperties, ParagraphProperties, character_style_index
from .stylesheet import parse_font_table, parse_stylesheet

logger = logging.getLogger(__name__)

WORD_DOCUMENT_STREAM = "WordDocument"
PAGE_SIZE = 512
COMPRESSED_FLAG = 0x40000000

PARAGRAPH_MARK = "\r"
CELL_MARK = "\x07"

FIELD_BEGIN = "\x13"
FIELD_SEPARATOR = "\x14"
FIELD_END = "\x15"

_SPECIAL_CHARACTERS = str.maketrans({
    "\x1e": "\u2011",  # non-breaking hyphen
    "\x1f": "\u00ad",  # optional hyphen
})

# (cp_start, cp_end, fc_start, bytes per character)
Piece = Tuple[int, int, int, int]
# (start, end, payload) over CPs or FCs
Interval = Tuple[int, int, object]


class LegacyDocumentReader:
    """
    Reader for legacy Word binary documents.

    Usage:
        reader = LegacyDocumentReader.from_path("report.doc")
        document = reader.read()
    """

    def __init__(self, word_document: bytes, table: bytes):
        """
        Initialize reader from raw streams.

        Args:
            word_document: Content of the ``WordDocument`` stream
            table: Content of the table stream the FIB selects

        Raises:
            LegacyFormatError: If the FIB is invalid or the file is encrypted
        """
        self.word_document = word_document
        self.table = table
        self.fib = Fib.parse(word_document)

    @classmethod
    def from_path(cls, path: Union[str, Path]) -> "LegacyDocumentReader":
        """
        Open a ``.doc`` compound file.

        Raises:
            UnsupportedFormatError: If the compound file is not a Word document
            LegacyFormatError: If the document cannot be decoded
        """
        path = Path(path)
        if not olefile.isOleFile(str(path)):
            raise UnsupportedFormatError("Not a compound file", path.name)

        with olefile.OleFileIO(str(path)) as ole:
            if not ole.exists(WORD_DOCUMENT_STREAM):
                raise UnsupportedFormatError("Compound file has no WordDocument stream", path.name)
            word_document = ole.openstream(WORD_DOCUMENT_STREAM).read()
            fib = Fib.parse(word_document)
            table_name = fib.table_stream_name
            if not ole.exists(table_name):
                raise LegacyFormatError(f"Missing {table_name} stream", path.name)
            table = ole.openstream(table_name).read()

        logger.debug(f"Opened {path}: {len(word_document)} byte WordDocument, {len(table)} byte {table_name}")
        return cls(word_document, table)

    def _table_slice(self, index: int) -> bytes:
        fc, lcb = self.fib.pair(index)
        if lcb == 0:
            return b""
        if fc + lcb > len(self.table):
            raise LegacyFormatError("Table stream structure out of bounds", f"pair {index}")
        return self.table[fc:fc + lcb]

    # Piece table

    def read_pieces(self) -> List[Piece]:
        """Read the piece table from the CLX."""
        clx = self._table_slice(FC_CLX)
        if not clx:
            raise LegacyFormatError("Document has no piece table")

        pos = 0
        while pos < len(clx) and clx[pos] == 0x01:
            cb_grpprl = struct.unpack_from("<h", clx, pos + 1)[0]
            pos += 3 + cb_grpprl
        if pos >= len(clx) or clx[pos] != 0x02:
            raise LegacyFormatError("Malformed piece table")

        lcb = struct.unpack_from("<I", clx, pos + 1)[0]
        plc = clx[pos + 5:pos + 5 + lcb]
        count = (len(plc) - 4) // 12
        cps = struct.unpack_from(f"<{count + 1}I", plc, 0)

        pieces = []
        for i in range(count):
            fc_raw = struct.unpack_from("<I", plc, 4 * (count + 1) + 8 * i + 2)[0]
            if fc_raw & COMPRESSED_FLAG:
                pieces.append((cps[i], cps[i + 1], (fc_raw & ~COMPRESSED_FLAG) // 2, 1))
            else:
                pieces.append((cps[i], cps[i + 1], fc_raw, 2))
        return pieces

    def read_text(self, pieces: List[Piece], limit: int) -> str:
        """Decode the story text up to CP ``limit``; one character per CP."""
        chunks = []
        for cp_start, cp_end, fc, width in pieces:
            if cp_start >= limit:
                break
            length = min(cp_end, limit) - cp_start
            raw = self.word_document[fc:fc + length * width]
            if width == 1:
                chunks.append(raw.decode("cp1252", errors="replace"))
            else:
                units = struct.unpack_from(f"<{len(raw) // 2}H", raw)
                chunks.append("".join(map(chr, units)))
        return "".join(chunks)

    # Formatted disk pages

    def _bin_table_pages(self, index: int) -> List[int]:
        plc = self._table_slice(index)
        if len(plc) < 4:
            return []
        count = (len(plc) - 4) // 8
        return [pn & 0x3FFFFF for pn in struct.unpack_from(f"<{count}I", plc, 4 * (count + 1))]

    def _page(self, pn: int) -> bytes:
        page = self.word_document[pn * PAGE_SIZE:(pn + 1) * PAGE_SIZE]
        if len(page) != PAGE_SIZE:
            raise LegacyFormatError("Formatted disk page out of bounds", f"pn={pn}")
        return page

    def read_chpx_intervals(self) -> List[Interval]:
        """Read character property runs as (fc_start, fc_end, grpprl)."""
        intervals = []
        for pn in self._bin_table_pages(FC_PLCF_BTE_CHPX):
            page = self._page(pn)
            crun = page[511]
            rgfc = struct.unpack_from(f"<{crun + 1}I", page, 0)
            for i in range(crun):
                offset = page[4 * (crun + 1) + i] * 2
                grpprl = b""
                if offset:
                    cb = page[offset]
                    grpprl = page[offset + 1:offset + 1 + cb]
                intervals.append((rgfc[i], rgfc[i + 1], grpprl))
        return intervals

    def read_papx_intervals(self) -> List[Interval]:
        """Read paragraph property runs as (fc_start, fc_end, (istd, grpprl))."""
        intervals = []
        for pn in self._bin_table_pages(FC_PLCF_BTE_PAPX):
            page = self._page(pn)
            crun = page[511]
            rgfc = struct.unpack_from(f"<{crun + 1}I", page, 0)
            for i in range(crun):
                offset = page[4 * (crun + 1) + 13 * i] * 2
                istd, grpprl = 0, b""
                if offset:
                    cb = page[offset]
                    if cb == 0:
                        data = page[offset + 2:offset + 2 + 2 * page[offset + 1]]
                    else:
                        data = page[offset + 1:offset + 1 + 2 * cb - 1]
                    if len(data) >= 2:
                        istd = struct.unpack_from("<H", data, 0)[0]
                        grpprl = data[2:]
                intervals.append((rgfc[i], rgfc[i + 1], (istd, grpprl)))
        return intervals

    @staticmethod
    def to_cp_intervals(pieces: List[Piece], fc_intervals: List[Interval], default) -> List[Interval]:
        """
        Project FC intervals onto CP space through the piece table.

        CP ranges no interval covers get ``default``.
        """
        ordered = sorted(fc_intervals, key=lambda item: item[0])
        starts = [item[0] for item in ordered]
        result = []
        for cp_start, cp_end, fc_start, width in pieces:
            fc_end = fc_start + (cp_end - cp_start) * width
            cursor = cp_start
            index = max(bisect.bisect_right(starts, fc_start) - 1, 0)
            while index < len(ordered) and ordered[index][0] < fc_end:
                efc_start, efc_end, payload = ordered[index]
                index += 1
                lo, hi = max(fc_start, efc_start), min(fc_end, efc_end)
                if lo >= hi:
                    continue
                cp_lo = cp_start + (lo - fc_start) // width
                cp_hi = cp_start + (hi - fc_start + width - 1) // width
                if cp_lo > cursor:
                    result.append((cursor, cp_lo, default))
                if cp_hi > cp_lo:
                    result.append((cp_lo, cp_hi, payload))
                    cursor = cp_hi
            if cursor < cp_end:
                result.append((cursor, cp_end, default))
        return result

    # Styles

    def resolve_style_properties(self, styles: Dict[int, LegacyStyle]
                                 ) -> Tuple[Dict[int, ParagraphProperties], Dict[int, CharacterProperties]]:
        """Resolve each style's properties through its basedOn chain."""
        para_cache: Dict[int, ParagraphProperties] = {}
        char_cache: Dict[int, CharacterProperties] = {}

        def resolve(istd: int, visiting: set) -> Tuple[ParagraphProperties, CharacterProperties]:
            if istd in para_cache:
                return para_cache[istd], char_cache[istd]
            style = styles.get(istd)
            if style is None or istd in visiting:
                return ParagraphProperties(), CharacterProperties()
            visiting.add(istd)
            base_para, base_char = (ParagraphProperties(), CharacterProperties())
            if style.based_on is not None:
                base_para, base_char = resolve(style.based_on, visiting)
            para_cache[istd] = base_para.apply(style.papx)
            char_cache[istd] = base_char.apply(style.chpx)
            return para_cache[istd], char_cache[istd]

        for istd in styles:
            resolve(istd, set())
        return para_cache, char_cache

    # Assembly

    def read(self) -> LegacyDocument:
        """
        Read the main document story.

        Returns:
            LegacyDocument with paragraphs, top-level tables, styles and fonts
        """
        pieces = self.read_pieces()
        limit = min(self.fib.ccp_text, pieces[-1][1]) if pieces else 0
        text = self.read_text(pieces, limit)

        styles, default_ftc = self._read_styles()
        fonts = self._read_fonts()
        style_para, style_char = self.resolve_style_properties(styles)

        papx = self.to_cp_intervals(pieces, self.read_papx_intervals(), (0, b""))
        chpx = self.to_cp_intervals(pieces, self.read_chpx_intervals(), b"")

        paragraphs = self._build_paragraphs(text, papx, chpx, styles, fonts, style_para, style_char)
        tables = group_tables(paragraphs)

        default_font = fonts[default_ftc] if default_ftc is not None and default_ftc < len(fonts) else None
        logger.info(f"Read legacy document: {len(paragraphs)} paragraphs, {len(tables)} tables, "
                    f"{len(styles)} styles")
        return LegacyDocument(
            text=text,
            paragraphs=paragraphs,
            tables=tables,
            styles=styles,
            fonts=fonts,
            default_font=default_font,
            style_paragraph_properties=style_para,
            style_character_properties=style_char,
        )

    def _read_styles(self) -> Tuple[Dict[int, LegacyStyle], Optional[int]]:
        data = self._table_slice(FC_STSHF)
        if not data:
            return {}, None
        return parse_stylesheet(data)

    def _read_fonts(self) -> List[str]:
        try:
            return parse_font_table(self._table_slice(FC_STTBF_FFN))
        except (struct.error, LegacyFormatError) as e:
            logger.warning(f"Unreadable font table, font names dropped: {e}")
            return []

    def _build_paragraphs(self, text, papx, chpx, styles, fonts, style_para, style_char) -> List[LegacyParagraph]:
        para_starts = [item[0] for item in papx]
        chp_starts = [item[0] for item in chpx]
        in_field_code: List[bool] = []

        paragraphs = []
        start = 0
        for cp, char in enumerate(text):
            is_mark = char in (PARAGRAPH_MARK, CELL_MARK)
            if is_mark or cp == len(text) - 1:
                paragraphs.append(LegacyParagraph(start=start, end=cp + 1, mark=char if is_mark else ""))
                start = cp + 1

        for paragraph in paragraphs:
            istd, grpprl = _lookup(papx, para_starts, paragraph.end - 1, (0, b""))
            base = style_para.get(istd, ParagraphProperties())
            paragraph.properties = replace(base.apply(grpprl), istd=istd)

            paragraph_chp = style_char.get(paragraph.istd, CharacterProperties())
            paragraph.runs = self._build_runs(
                text, paragraph.start, paragraph.end, chpx, chp_starts,
                paragraph_chp, styles, fonts, in_field_code,
            )
        return paragraphs

    def _build_runs(self, text, start, end, chpx, chp_starts, paragraph_chp, styles, fonts,
                    in_field_code) -> List[LegacyRun]:
        runs = []
        index = max(bisect.bisect_right(chp_starts, start) - 1, 0)
        cursor = start
        while cursor < end:
            if index < len(chpx) and chpx[index][0] <= cursor < chpx[index][1]:
                run_end = min(end, chpx[index][1])
                grpprl = chpx[index][2]
            else:
                run_end = end
                for item_start, _, _ in chpx[index:]:
                    if item_start > cursor:
                        run_end = min(end, item_start)
                        break
                grpprl = b""

            style_chp = paragraph_chp
            char_istd = character_style_index(grpprl)
            char_style = styles.get(char_istd) if char_istd is not None else None
            if char_style is not None and char_style.stk == STK_CHARACTER:
                style_chp = paragraph_chp.apply(char_style.chpx)
            chp = style_chp.apply(grpprl, toggle_base=style_chp)

            run_text = _visible_text(text[cursor:run_end], in_field_code)
            if run_text:
                runs.append(LegacyRun(
                    text=run_text,
                    bold=chp.bold,
                    italic=chp.italic,
                    underline=chp.underline,
                    font_size=chp.half_points,
                    font_name=fonts[chp.font_index] if chp.font_index is not None and chp.font_index < len(fonts)
                    else None,
                ))
            cursor = run_end
            while index < len(chpx) and chpx[index][1] <= cursor:
                index += 1
        return runs


def _lookup(intervals: List[Interval], starts: List[int], cp: int, default):
    index = bisect.bisect_right(starts, cp) - 1
    if index >= 0 and intervals[index][0] <= cp < intervals[index][1]:
        return intervals[index][2]
    return default


def _visible_text(raw: str, in_field_code: List[bool]) -> str:
    """
    Drop field instructions, keeping field results.

    ``in_field_code`` is a stack with one entry per open field, True while
    that field is still in its instruction part.
    """
    out = []
    for char in raw:
        if char == FIELD_BEGIN:
            in_field_code.append(True)
        elif char == FIELD_SEPARATOR:
            if in_field_code:
                in_field_code[-1] = False
        elif char == FIELD_END:
            if in_field_code:
                in_field_code.pop()
        elif not any(in_field_code):
            out.append(char)
    text = "".join(out).translate(_SPECIAL_CHARACTERS)
    # Combine UTF-16 surrogate pairs decoded one code unit at a time
    return text.encode("utf-16-le", "surrogatepass").decode("utf-16-le", "replace")


def group_tables(paragraphs: List[LegacyParagraph]) -> List[LegacyTable]:
    """
    Group in-table paragraphs into top-level tables.

    A row-end paragraph closes a row; a cell mark closes an outer cell.
    Nested-table rows are flattened into the enclosing cell and their
    row-end paragraphs dropped.
    """
    tables: List[LegacyTable] = []
    table: Optional[LegacyTable] = None
    row: Optional[LegacyTableRow] = None
    cell: Optional[LegacyTableCell] = None

    def close_table():
        nonlocal table, row, cell
        if table is None:
            return
        if cell is not None and cell.paragraphs:
            row = row or LegacyTableRow()
            row.cells.append(cell)
        if row is not None and row.cells:
            table.rows.append(row)
        tables.append(table)
        table, row, cell = None, None, None

    for paragraph in paragraphs:
        if not paragraph.in_table:
            close_table()
            continue

        if table is None:
            table = LegacyTable(start=paragraph.start, end=paragraph.end)
        table.end = paragraph.end
        table.paragraph_count += 1

        if paragraph.is_row_end:
            if cell is not None and cell.paragraphs:
                row = row or LegacyTableRow()
                row.cells.append(cell)
            table.rows.append(row or LegacyTableRow())
            row, cell = None, None
            continue
        if paragraph.is_inner_row_end:
            continue

        cell = cell or LegacyTableCell()
        cell.paragraphs.append(paragraph)
        if paragraph.mark == CELL_MARK and paragraph.properties.itap <= 1:
            row = row or LegacyTableRow()
            row.cells.append(cell)
            cell = None

    close_table()
    return tables
