"""
DOCX writer.

Renders a ContentTree into ``word/document.xml`` and assembles a complete
new package around it (content types, relationships, styles part).
"""

import logging
import re
from pathlib import Path
from typing import Dict, Optional, Union

from lxml import etree

from ..models.content import ContentTree, Paragraph, Run, Table
from ..models.style import DocumentDefaults, StyleCollection
from ..parser.styles_parser import StylesParser, create_styles_root
from ..utils.enums import Alignment
from ..utils.xml_utils import (
    CT_STYLES,
    R_NS,
    RT_OFFICE_DOCUMENT,
    RT_STYLES,
    W_NS,
    XML_NS,
    serialize_xml,
    w,
    xml_safe_text,
)
from .package_writer import (
    default_content_types,
    generate_content_types_xml,
    generate_relationships_xml,
    main_document_overrides,
    write_package,
)

logger = logging.getLogger(__name__)

# A4 portrait, one inch margins (twentieths of a point)
PAGE_WIDTH = 11906
PAGE_HEIGHT = 16838
PAGE_MARGIN = 1440

_BREAKS = re.compile(r"(\t|\n)")


def render_run_properties(parent: etree._Element, run: Run) -> Optional[etree._Element]:
    """
    Append a ``w:rPr`` for the run's formatting to ``parent``.

    Only font family, bold, italic, size and single underline are written,
    in schema order. Returns None when the run has no formatting.
    """
    if not (run.font_family or run.bold or run.italic or run.font_size or run.underline):
        return None

    r_pr = etree.SubElement(parent, w("rPr"))
    if run.font_family:
        fonts = etree.SubElement(r_pr, w("rFonts"))
        fonts.set(w("ascii"), run.font_family)
        fonts.set(w("hAnsi"), run.font_family)
        fonts.set(w("cs"), run.font_family)
    if run.bold:
        etree.SubElement(r_pr, w("b"))
    if run.italic:
        etree.SubElement(r_pr, w("i"))
    if run.font_size:
        half_points = str(run.font_size * 2)
        etree.SubElement(r_pr, w("sz")).set(w("val"), half_points)
        etree.SubElement(r_pr, w("szCs")).set(w("val"), half_points)
    if run.underline:
        etree.SubElement(r_pr, w("u")).set(w("val"), "single")
    return r_pr


def _append_text(r_el: etree._Element, text: str) -> None:
    for piece in _BREAKS.split(text):
        if not piece:
            continue
        if piece == "\t":
            etree.SubElement(r_el, w("tab"))
        elif piece == "\n":
            etree.SubElement(r_el, w("br"))
        else:
            piece = xml_safe_text(piece)
            if not piece:
                continue
            t_el = etree.SubElement(r_el, w("t"))
            t_el.text = piece
            if piece != piece.strip():
                t_el.set(f"{{{XML_NS}}}space", "preserve")


class DocumentXmlWriter:
    """Renders body content as WordprocessingML."""

    def render(self, content: ContentTree) -> etree._Element:
        """
        Render a complete ``w:document`` root.

        Args:
            content: Body content

        Returns:
            Document root element
        """
        document = etree.Element(w("document"), nsmap={"w": W_NS, "r": R_NS})
        body = etree.SubElement(document, w("body"))
        for node in content:
            if isinstance(node, Table):
                self.render_table(body, node)
            else:
                self.render_paragraph(body, node)
        self.render_section(body)
        return document

    def render_paragraph(self, parent: etree._Element, paragraph: Paragraph) -> etree._Element:
        p_el = etree.SubElement(parent, w("p"))
        if paragraph.style_id or paragraph.alignment != Alignment.LEFT:
            p_pr = etree.SubElement(p_el, w("pPr"))
            if paragraph.style_id:
                etree.SubElement(p_pr, w("pStyle")).set(w("val"), paragraph.style_id)
            if paragraph.alignment != Alignment.LEFT:
                etree.SubElement(p_pr, w("jc")).set(w("val"), paragraph.alignment.value)

        for run in paragraph.runs:
            text = run.text.replace("\x0b", "\n")
            if not xml_safe_text(text):
                continue
            r_el = etree.SubElement(p_el, w("r"))
            render_run_properties(r_el, run)
            _append_text(r_el, text)
        return p_el

    def render_table(self, parent: etree._Element, table: Table) -> etree._Element:
        tbl_el = etree.SubElement(parent, w("tbl"))
        tbl_pr = etree.SubElement(tbl_el, w("tblPr"))
        tbl_w = etree.SubElement(tbl_pr, w("tblW"))
        tbl_w.set(w("w"), "0")
        tbl_w.set(w("type"), "auto")

        grid = etree.SubElement(tbl_el, w("tblGrid"))
        for _ in range(table.column_count):
            etree.SubElement(grid, w("gridCol"))

        for row in table.rows:
            tr_el = etree.SubElement(tbl_el, w("tr"))
            for cell in row.cells:
                tc_el = etree.SubElement(tr_el, w("tc"))
                tc_w = etree.SubElement(etree.SubElement(tc_el, w("tcPr")), w("tcW"))
                tc_w.set(w("w"), "0")
                tc_w.set(w("type"), "auto")
                for paragraph in cell.paragraphs:
                    self.render_paragraph(tc_el, paragraph)
                # A cell must end with a paragraph
                if tc_el.find(w("p")) is None:
                    etree.SubElement(tc_el, w("p"))
        return tbl_el

    def render_section(self, body: etree._Element) -> etree._Element:
        sect_pr = etree.SubElement(body, w("sectPr"))
        pg_sz = etree.SubElement(sect_pr, w("pgSz"))
        pg_sz.set(w("w"), str(PAGE_WIDTH))
        pg_sz.set(w("h"), str(PAGE_HEIGHT))
        pg_mar = etree.SubElement(sect_pr, w("pgMar"))
        for side in ("top", "right", "bottom", "left"):
            pg_mar.set(w(side), str(PAGE_MARGIN))
        for side in ("header", "footer"):
            pg_mar.set(w(side), "720")
        pg_mar.set(w("gutter"), "0")
        return sect_pr


class DocxWriter:
    """Builds a new DOCX package from a content tree and a set of styles."""

    def __init__(self, content: ContentTree, styles: Optional[StyleCollection] = None,
                 doc_defaults: Optional[DocumentDefaults] = None):
        self.content = content
        self.styles = styles if styles is not None else StyleCollection()
        self.doc_defaults = doc_defaults

    def build_parts(self) -> Dict[str, bytes]:
        """Assemble all package parts in archive order."""
        overrides = main_document_overrides()
        overrides["word/styles.xml"] = CT_STYLES

        styles = StyleCollection(style.copy() for style in self.styles)
        doc_defaults = self.doc_defaults.copy() if self.doc_defaults is not None else None
        styles_root = StylesParser(create_styles_root()).update(styles, doc_defaults, None)

        return {
            "[Content_Types].xml": generate_content_types_xml(default_content_types(), overrides),
            "_rels/.rels": generate_relationships_xml([("rId1", RT_OFFICE_DOCUMENT, "word/document.xml")]),
            "word/document.xml": serialize_xml(DocumentXmlWriter().render(self.content)),
            "word/_rels/document.xml.rels": generate_relationships_xml([("rId1", RT_STYLES, "styles.xml")]),
            "word/styles.xml": serialize_xml(styles_root),
        }

    def write(self, output_path: Union[str, Path]) -> Path:
        """
        Write the package.

        Args:
            output_path: Destination path

        Returns:
            Destination path
        """
        parts = self.build_parts()
        path = write_package(parts, output_path)
        logger.info(f"Wrote document with {len(self.content)} body nodes and {len(self.styles)} styles to {path}")
        return path
