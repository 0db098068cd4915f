"""
Export module for DOCX Style Migrator.

Package writing (zip parts, content types, relationships), document
rendering and CSV export of style listings.
"""

from .package_writer import add_content_type_override, add_relationship, write_package
from .docx_writer import DocumentXmlWriter, DocxWriter
from .csv_exporter import StyleCSVExporter, read_styles_csv

__all__ = [
    "add_content_type_override",
    "add_relationship",
    "write_package",
    "DocumentXmlWriter",
    "DocxWriter",
    "StyleCSVExporter",
    "read_styles_csv",
]
