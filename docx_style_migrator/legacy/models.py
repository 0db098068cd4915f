"""
Structures produced by the legacy document reader.

Positions are character positions (CPs) in the main document story;
``end`` is exclusive and includes the paragraph or cell mark.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .sprm import CharacterProperties, ParagraphProperties

# Style kinds (stk)
STK_PARAGRAPH = 1
STK_CHARACTER = 2
STK_TABLE = 3
STK_NUMBERING = 4

STYLE_TYPES = {
    STK_PARAGRAPH: "paragraph",
    STK_CHARACTER: "character",
    STK_TABLE: "table",
    STK_NUMBERING: "numbering",
}

ISTD_NIL = 0x0FFF


@dataclass
class LegacyRun:
    """A run of text with uniform character properties."""

    text: str
    bold: bool = False
    italic: bool = False
    underline: int = 0
    font_size: Optional[int] = None  # half-points
    font_name: Optional[str] = None


@dataclass
class LegacyParagraph:
    """A paragraph of the main document story."""

    start: int
    end: int
    mark: str = ""
    properties: ParagraphProperties = field(default_factory=ParagraphProperties)
    runs: List[LegacyRun] = field(default_factory=list)

    @property
    def text(self) -> str:
        return "".join(run.text for run in self.runs)

    @property
    def justification(self) -> int:
        return self.properties.justification

    @property
    def istd(self) -> int:
        return self.properties.istd or 0

    @property
    def in_table(self) -> bool:
        return self.properties.in_table or self.properties.itap > 0

    @property
    def is_row_end(self) -> bool:
        return self.properties.ttp and self.properties.itap <= 1

    @property
    def is_inner_row_end(self) -> bool:
        return self.properties.inner_ttp or (self.properties.ttp and self.properties.itap > 1)


@dataclass
class LegacyTableCell:
    paragraphs: List[LegacyParagraph] = field(default_factory=list)


@dataclass
class LegacyTableRow:
    cells: List[LegacyTableCell] = field(default_factory=list)


@dataclass
class LegacyTable:
    """
    A top-level table.

    ``paragraph_count`` counts every paragraph of the story inside the
    table range, including row-end marks and flattened nested rows.
    """

    start: int
    end: int
    rows: List[LegacyTableRow] = field(default_factory=list)
    paragraph_count: int = 0

    @property
    def row_count(self) -> int:
        return len(self.rows)


@dataclass
class LegacyStyle:
    """A stylesheet entry."""

    istd: int
    name: str
    stk: int
    istd_base: int = ISTD_NIL
    istd_next: int = ISTD_NIL
    sti: int = 0
    papx: bytes = b""
    chpx: bytes = b""

    @property
    def style_type(self) -> str:
        return STYLE_TYPES.get(self.stk, "")

    @property
    def based_on(self) -> Optional[int]:
        return None if self.istd_base == ISTD_NIL else self.istd_base


@dataclass
class LegacyDocument:
    """Everything the reader extracts from a legacy document."""

    text: str
    paragraphs: List[LegacyParagraph]
    tables: List[LegacyTable]
    styles: Dict[int, LegacyStyle] = field(default_factory=dict)
    fonts: List[str] = field(default_factory=list)
    default_font: Optional[str] = None
    style_paragraph_properties: Dict[int, ParagraphProperties] = field(default_factory=dict)
    style_character_properties: Dict[int, CharacterProperties] = field(default_factory=dict)
