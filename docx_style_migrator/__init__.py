"""
DOCX Style Migrator - style transfer between Word documents.

This package copies, replaces, lists, exports and removes paragraph,
character, table and numbering styles in Word documents. It reads both
modern ``.docx`` packages and legacy Word 97-2003 ``.doc`` files; legacy
inputs are normalized into ``.docx`` before any style operation.

Main Components:
- StyleMigrationService: orchestrates every operation and its temp files
- StyleGraphEngine: style lookup, dependency closure, transfer and removal
- StylePackage: a loaded ``.docx`` with its style model
- normalize_doc: legacy ``.doc`` to ``.docx`` conversion
- api: one-call convenience functions
"""

from .version import __version__
from .exceptions import (
    StyleMigratorError,
    FormatError,
    UnsupportedFormatError,
    UnrecognizedFormatError,
    LegacyFormatError,
    PackageError,
    StyleError,
    MissingStyleDefinitionsError,
    StyleNotFoundError,
    SelectionError,
    InvalidSelectionError,
    WildcardNotAllowedError,
)
from .detector import detect_format, detect_file_format
from .models import StyleCollection, StyleDefinition, StyleInfo
from .normalize import normalize_doc
from .package import StylePackage
from .selection import StyleSelection, parse_flag, parse_style_selection, read_style_keys
from .styles import StyleGraphEngine
from .migrator import CleanResult, MigrationOptions, StyleMigrationService
from .utils.enums import DocumentFormat
from . import api

__author__ = "DocQuill Team"

__all__ = [
    # Service and configuration
    "StyleMigrationService",
    "MigrationOptions",
    "CleanResult",

    # Core components
    "StyleGraphEngine",
    "StylePackage",
    "StyleCollection",
    "StyleDefinition",
    "StyleInfo",
    "DocumentFormat",
    "detect_format",
    "detect_file_format",
    "normalize_doc",

    # Selection helpers
    "StyleSelection",
    "parse_style_selection",
    "read_style_keys",
    "parse_flag",

    # Exceptions
    "StyleMigratorError",
    "FormatError",
    "UnsupportedFormatError",
    "UnrecognizedFormatError",
    "LegacyFormatError",
    "PackageError",
    "StyleError",
    "MissingStyleDefinitionsError",
    "StyleNotFoundError",
    "SelectionError",
    "InvalidSelectionError",
    "WildcardNotAllowedError",

    "api",
    "__version__",
]
