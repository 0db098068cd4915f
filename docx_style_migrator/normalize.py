"""
Format normalization of legacy Word documents.

The main entry point is :func:`normalize_doc`, which reads a ``.doc``
file, rebuilds its main story as a ContentTree (paragraphs, runs with
minimal formatting, tables) and writes it as a fresh ``.docx`` package
together with the styles imported from the legacy stylesheet.
"""

import logging
import re
from pathlib import Path
from typing import Dict, Optional, Tuple, Union

from lxml import etree

from .export.docx_writer import DocxWriter, render_run_properties
from .legacy.models import (
    STK_CHARACTER,
    STK_NUMBERING,
    STK_PARAGRAPH,
    STK_TABLE,
    LegacyDocument,
    LegacyParagraph,
    LegacyRun,
    LegacyStyle,
    LegacyTable,
)
from .legacy.sprm import (
    SPRM_C_FBOLD,
    SPRM_C_FITALIC,
    SPRM_C_HPS,
    SPRM_C_KUL,
    SPRM_C_RGFTC0,
    CharacterProperties,
    ParagraphProperties,
    iter_sprms,
)
from .legacy.word_binary import LegacyDocumentReader
from .models.content import ContentTree, Paragraph, Run, Table
from .models.style import DocumentDefaults, StyleCollection, StyleDefinition
from .utils.enums import Alignment
from .utils.xml_utils import W_NS, w

logger = logging.getLogger(__name__)

JUSTIFICATION = {
    1: Alignment.CENTER,
    2: Alignment.RIGHT,
    3: Alignment.JUSTIFIED,
}

STRIPPED_CHARACTERS = str.maketrans("", "", "\r\x07")

# Built-in default styles by istd and kind
DEFAULT_STYLE_SLOTS = {0: STK_PARAGRAPH, 10: STK_CHARACTER, 11: STK_TABLE, 12: STK_NUMBERING}

DEFAULT_HALF_POINTS = 20

_NON_ALNUM = re.compile(r"[\W_]+", re.UNICODE)


def convert_alignment(justification: int) -> Alignment:
    """Map a legacy justification code; unrecognized codes align left."""
    return JUSTIFICATION.get(justification, Alignment.LEFT)


def convert_run(legacy_run: LegacyRun) -> Optional[Run]:
    """
    Convert a legacy run.

    Returns:
        Run, or None when nothing remains after stripping paragraph and cell marks
    """
    text = legacy_run.text.translate(STRIPPED_CHARACTERS)
    if not text:
        return None
    run = Run(text=text, bold=legacy_run.bold, italic=legacy_run.italic, underline=legacy_run.underline != 0)
    if legacy_run.font_size is not None:
        run.font_size = legacy_run.font_size // 2
    if legacy_run.font_name:
        run.font_family = legacy_run.font_name
    return run


def style_id_from_name(name: str, taken: set, fallback: str) -> str:
    """Derive a unique style id by dropping non-alphanumerics from a style name."""
    base = _NON_ALNUM.sub("", name) or fallback
    candidate = base
    counter = 1
    while candidate.lower() in taken:
        candidate = f"{base}{counter}"
        counter += 1
    taken.add(candidate.lower())
    return candidate


class FormatNormalizer:
    """Builds modern content and styles from a legacy document."""

    def __init__(self, document: LegacyDocument):
        self.document = document
        self.style_ids: Dict[int, str] = {}

    # Styles

    def build_styles(self) -> Tuple[StyleCollection, Optional[DocumentDefaults]]:
        """
        Import the legacy stylesheet.

        Returns:
            Tuple of (styles in istd order, document defaults)
        """
        styles = {istd: s for istd, s in sorted(self.document.styles.items()) if s.style_type}
        taken: set = set()
        self.style_ids = {
            istd: style_id_from_name(style.name, taken, f"Style{istd}") for istd, style in styles.items()
        }

        collection = StyleCollection()
        for style in styles.values():
            collection.add(self._convert_style(style))
        logger.debug(f"Imported {len(collection)} legacy styles")
        return collection, self._build_defaults()

    def _convert_style(self, style: LegacyStyle) -> StyleDefinition:
        based_on = self.style_ids.get(style.based_on) if style.based_on is not None else None
        definition = StyleDefinition.create(self.style_ids[style.istd], style.name or None, style.style_type,
                                            based_on)
        if DEFAULT_STYLE_SLOTS.get(style.istd) == style.stk:
            definition.element.set(w("default"), "1")

        own_para = ParagraphProperties().apply(style.papx)
        if own_para.justification_set and convert_alignment(own_para.justification) != Alignment.LEFT:
            p_pr = etree.SubElement(definition.element, w("pPr"))
            etree.SubElement(p_pr, w("jc")).set(w("val"), convert_alignment(own_para.justification).value)

        r_pr = self._style_run_properties(style)
        if r_pr is not None:
            definition.element.append(r_pr)
        return definition

    def _style_run_properties(self, style: LegacyStyle) -> Optional[etree._Element]:
        if not style.chpx:
            return None
        touched = {sprm for sprm, _ in iter_sprms(style.chpx)}
        base = self.document.style_character_properties.get(style.based_on, CharacterProperties()) \
            if style.based_on is not None else CharacterProperties()
        own = base.apply(style.chpx)

        r_pr = etree.Element(w("rPr"), nsmap={"w": W_NS})
        if SPRM_C_RGFTC0 in touched and own.font_index is not None and own.font_index < len(self.document.fonts):
            font = self.document.fonts[own.font_index]
            fonts = etree.SubElement(r_pr, w("rFonts"))
            fonts.set(w("ascii"), font)
            fonts.set(w("hAnsi"), font)
        for sprm, tag, value in ((SPRM_C_FBOLD, "b", own.bold), (SPRM_C_FITALIC, "i", own.italic)):
            if sprm in touched:
                toggle = etree.SubElement(r_pr, w(tag))
                if not value:
                    toggle.set(w("val"), "0")
        if SPRM_C_HPS in touched and own.half_points:
            etree.SubElement(r_pr, w("sz")).set(w("val"), str(own.half_points))
            etree.SubElement(r_pr, w("szCs")).set(w("val"), str(own.half_points))
        if SPRM_C_KUL in touched:
            etree.SubElement(r_pr, w("u")).set(w("val"), "single" if own.underline else "none")
        return r_pr if len(r_pr) else None

    def _build_defaults(self) -> Optional[DocumentDefaults]:
        if not self.document.default_font:
            return None
        defaults = etree.Element(w("docDefaults"), nsmap={"w": W_NS})
        r_pr_default = etree.SubElement(defaults, w("rPrDefault"))
        render_run_properties(r_pr_default, Run(font_family=self.document.default_font,
                                                font_size=DEFAULT_HALF_POINTS // 2))
        etree.SubElement(defaults, w("pPrDefault"))
        return DocumentDefaults(defaults)

    # Content

    def convert_paragraph(self, legacy_paragraph: LegacyParagraph) -> Paragraph:
        paragraph = Paragraph(alignment=convert_alignment(legacy_paragraph.justification))
        style = self.document.styles.get(legacy_paragraph.istd)
        if legacy_paragraph.istd != 0 and style is not None and style.stk == STK_PARAGRAPH:
            paragraph.style_id = self.style_ids.get(legacy_paragraph.istd)
        for legacy_run in legacy_paragraph.runs:
            run = convert_run(legacy_run)
            if run is not None:
                paragraph.add_run(run)
        return paragraph

    def convert_table(self, legacy_table: LegacyTable) -> Table:
        """
        Convert a legacy table.

        The destination starts in the default shape (one row, one cell, one
        empty paragraph) and is reconciled to the legacy row and cell counts.
        """
        table = Table.with_default_shape()
        if legacy_table.row_count == 0:
            table.remove_row(0)

        for row_index, legacy_row in enumerate(legacy_table.rows):
            row = table.rows[0] if row_index == 0 else table.add_row()
            row.ensure_cell_count(len(legacy_row.cells))
            for cell, legacy_cell in zip(row.cells, legacy_row.cells):
                converted = [self.convert_paragraph(p) for p in legacy_cell.paragraphs]
                if converted:
                    cell.paragraphs = converted
        return table

    def build_content_tree(self) -> ContentTree:
        """
        Merge paragraphs and table ranges into one ordered body.

        A paragraph inside the next unconsumed table range emits the whole
        table and skips the table's paragraphs.
        """
        tree = ContentTree()
        paragraphs = self.document.paragraphs
        tables = self.document.tables
        table_index = 0
        index = 0
        while index < len(paragraphs):
            paragraph = paragraphs[index]
            while table_index < len(tables) and tables[table_index].end <= paragraph.start:
                table_index += 1

            if table_index < len(tables):
                table = tables[table_index]
                if paragraph.start >= table.start and paragraph.end <= table.end:
                    tree.append(self.convert_table(table))
                    index += max(table.paragraph_count, 1)
                    table_index += 1
                    continue

            tree.append(self.convert_paragraph(paragraph))
            index += 1
        return tree


def normalize_doc(doc_path: Union[str, Path], output_path: Union[str, Path]) -> Path:
    """
    Convert a legacy ``.doc`` file into a new ``.docx`` file.

    Args:
        doc_path: Legacy document to read
        output_path: Path of the package to create

    Returns:
        Path of the written package

    Raises:
        UnsupportedFormatError: If the file is not a Word compound document
        LegacyFormatError: If the document cannot be decoded
        OSError: On I/O failures
    """
    doc_path = Path(doc_path)
    output_path = Path(output_path)
    if output_path.resolve() == doc_path.resolve():
        raise ValueError("Normalized output must not overwrite its input")

    document = LegacyDocumentReader.from_path(doc_path).read()
    normalizer = FormatNormalizer(document)
    styles, defaults = normalizer.build_styles()
    content = normalizer.build_content_tree()

    DocxWriter(content, styles, defaults).write(output_path)
    logger.info(f"Normalized {doc_path.name} into {output_path.name}")
    return output_path
