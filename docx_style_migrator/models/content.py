"""
Content tree model.

A ContentTree is an ordered sequence of body nodes, each either a Paragraph
or a Table. The format normalizer builds one per legacy input and the
package writer renders it into ``word/document.xml``; the body parser
produces the same structure as a read-only view of any DOCX body.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Union

from ..utils.enums import Alignment


@dataclass
class Run:
    """A run of text with consistent formatting."""

    text: str = ""
    bold: bool = False
    italic: bool = False
    underline: bool = False
    font_size: Optional[int] = None  # whole points
    font_family: Optional[str] = None


@dataclass
class Paragraph:
    """A paragraph: alignment plus an ordered sequence of runs."""

    alignment: Alignment = Alignment.LEFT
    runs: List[Run] = field(default_factory=list)
    style_id: Optional[str] = None

    def add_run(self, run: Run) -> Run:
        self.runs.append(run)
        return run

    def get_text(self) -> str:
        return "".join(run.text for run in self.runs)


@dataclass
class TableCell:
    """A table cell holding its own paragraphs."""

    paragraphs: List[Paragraph] = field(default_factory=list)

    @classmethod
    def empty(cls) -> "TableCell":
        """Create a cell the way a fresh table creates one: a single empty paragraph."""
        return cls(paragraphs=[Paragraph()])

    def add_paragraph(self, paragraph: Optional[Paragraph] = None) -> Paragraph:
        paragraph = paragraph if paragraph is not None else Paragraph()
        self.paragraphs.append(paragraph)
        return paragraph

    def get_text(self) -> str:
        return "\n".join(p.get_text() for p in self.paragraphs)


@dataclass
class TableRow:
    """A table row: an ordered sequence of cells."""

    cells: List[TableCell] = field(default_factory=list)

    def add_cell(self) -> TableCell:
        cell = TableCell.empty()
        self.cells.append(cell)
        return cell

    def ensure_cell_count(self, count: int) -> None:
        """Grow with empty cells, then drop trailing cells, until exactly ``count`` remain."""
        while len(self.cells) < count:
            self.add_cell()
        while len(self.cells) > count:
            self.cells.pop()


@dataclass
class Table:
    """A table: an ordered sequence of rows."""

    rows: List[TableRow] = field(default_factory=list)

    @classmethod
    def with_default_shape(cls) -> "Table":
        """Create a table in the shape a new document table starts with (one row, one cell)."""
        return cls(rows=[TableRow(cells=[TableCell.empty()])])

    def add_row(self) -> TableRow:
        row = TableRow()
        self.rows.append(row)
        return row

    def remove_row(self, index: int) -> None:
        if 0 <= index < len(self.rows):
            del self.rows[index]

    @property
    def column_count(self) -> int:
        return max((len(row.cells) for row in self.rows), default=0)


BodyNode = Union[Paragraph, Table]


@dataclass
class ContentTree:
    """Ordered body content of a document."""

    nodes: List[BodyNode] = field(default_factory=list)

    def append(self, node: BodyNode) -> None:
        self.nodes.append(node)

    def __iter__(self) -> Iterator[BodyNode]:
        return iter(self.nodes)

    def __len__(self) -> int:
        return len(self.nodes)

    def __getitem__(self, index: int) -> BodyNode:
        return self.nodes[index]

    @property
    def paragraphs(self) -> List[Paragraph]:
        return [node for node in self.nodes if isinstance(node, Paragraph)]

    @property
    def tables(self) -> List[Table]:
        return [node for node in self.nodes if isinstance(node, Table)]
