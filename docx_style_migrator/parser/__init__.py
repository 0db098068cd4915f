"""
Parsers for DOCX packages.

Package reading (OPC parts, content types, relationships), the styles
part and the document body view.
"""

from .package_reader import PackageReader, Relationship, parse_relationships, rels_part_name, resolve_target
from .styles_parser import StylesParser, create_styles_root
from .body_parser import BodyParser

__all__ = [
    "PackageReader",
    "Relationship",
    "parse_relationships",
    "rels_part_name",
    "resolve_target",
    "StylesParser",
    "create_styles_root",
    "BodyParser",
]
