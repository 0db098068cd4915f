"""
Legacy Word 97-2003 (``.doc``) reading.

Only the main document story is read: text, paragraph alignment and
table membership, minimal character formatting, the stylesheet and the
font table.
"""

from .fib import Fib
from .models import (
    LegacyDocument,
    LegacyParagraph,
    LegacyRun,
    LegacyStyle,
    LegacyTable,
    LegacyTableCell,
    LegacyTableRow,
)
from .sprm import CharacterProperties, ParagraphProperties, iter_sprms
from .stylesheet import parse_font_table, parse_stylesheet
from .word_binary import LegacyDocumentReader, group_tables

__all__ = [
    "Fib",
    "LegacyDocument",
    "LegacyParagraph",
    "LegacyRun",
    "LegacyStyle",
    "LegacyTable",
    "LegacyTableCell",
    "LegacyTableRow",
    "CharacterProperties",
    "ParagraphProperties",
    "iter_sprms",
    "parse_font_table",
    "parse_stylesheet",
    "LegacyDocumentReader",
    "group_tables",
]
