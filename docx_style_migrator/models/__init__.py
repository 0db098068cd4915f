"""
Models for DOCX Style Migrator.

Style definitions and their collection, document-level metadata blocks
and the content tree produced by the format normalizer.
"""

from .style import (
    DocumentDefaults,
    LatentStyleSettings,
    NumberingDefinitions,
    StyleCollection,
    StyleDefinition,
    StyleInfo,
)
from .content import BodyNode, ContentTree, Paragraph, Run, Table, TableCell, TableRow

__all__ = [
    "DocumentDefaults",
    "LatentStyleSettings",
    "NumberingDefinitions",
    "StyleCollection",
    "StyleDefinition",
    "StyleInfo",
    "BodyNode",
    "ContentTree",
    "Paragraph",
    "Run",
    "Table",
    "TableCell",
    "TableRow",
]
