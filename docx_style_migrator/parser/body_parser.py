"""
Body parser: builds a read-only ContentTree view of ``word/document.xml``.
"""

import logging
from typing import Optional

from lxml import etree

from ..models.content import ContentTree, Paragraph, Run, Table, TableCell, TableRow
from ..utils.enums import Alignment
from ..utils.xml_utils import w, w_val

logger = logging.getLogger(__name__)

_ALIGNMENTS = {
    "left": Alignment.LEFT,
    "start": Alignment.LEFT,
    "center": Alignment.CENTER,
    "right": Alignment.RIGHT,
    "end": Alignment.RIGHT,
    "both": Alignment.JUSTIFIED,
    "distribute": Alignment.JUSTIFIED,
}


def _toggle(element: Optional[etree._Element]) -> bool:
    if element is None:
        return False
    return w_val(element) not in ("0", "false", "off")


class BodyParser:
    """Parser for the document body."""

    def __init__(self, root: etree._Element):
        self.root = root

    def parse(self) -> ContentTree:
        tree = ContentTree()
        body = self.root.find(w("body"))
        if body is None:
            logger.warning("Document has no body element")
            return tree

        for child in body:
            if child.tag == w("p"):
                tree.append(self.parse_paragraph(child))
            elif child.tag == w("tbl"):
                tree.append(self.parse_table(child))
        return tree

    def parse_paragraph(self, p_el: etree._Element) -> Paragraph:
        paragraph = Paragraph()
        p_pr = p_el.find(w("pPr"))
        if p_pr is not None:
            paragraph.alignment = _ALIGNMENTS.get(w_val(p_pr.find(w("jc"))), Alignment.LEFT)
            paragraph.style_id = w_val(p_pr.find(w("pStyle")))

        for r_el in p_el.iter(w("r")):
            run = self.parse_run(r_el)
            if run.text:
                paragraph.add_run(run)
        return paragraph

    def parse_run(self, r_el: etree._Element) -> Run:
        run = Run()
        r_pr = r_el.find(w("rPr"))
        if r_pr is not None:
            run.bold = _toggle(r_pr.find(w("b")))
            run.italic = _toggle(r_pr.find(w("i")))
            underline = w_val(r_pr.find(w("u")))
            run.underline = underline is not None and underline != "none"
            size = w_val(r_pr.find(w("sz")))
            if size and size.isdigit():
                run.font_size = int(size) // 2
            run.font_family = w_val(r_pr.find(w("rFonts")), "ascii")

        parts = []
        for child in r_el:
            if child.tag == w("t"):
                parts.append(child.text or "")
            elif child.tag == w("tab"):
                parts.append("\t")
            elif child.tag in (w("br"), w("cr")):
                parts.append("\n")
        run.text = "".join(parts)
        return run

    def parse_table(self, tbl_el: etree._Element) -> Table:
        table = Table()
        for tr_el in tbl_el.findall(w("tr")):
            row = TableRow()
            for tc_el in tr_el.findall(w("tc")):
                cell = TableCell()
                # Nested table paragraphs are flattened into the cell
                for p_el in tc_el.iter(w("p")):
                    cell.add_paragraph(self.parse_paragraph(p_el))
                row.cells.append(cell)
            table.rows.append(row)
        return table
