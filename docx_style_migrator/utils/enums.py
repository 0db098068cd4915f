"""Common enumerations used across the style migrator models."""

from __future__ import annotations

from enum import Enum


class DocumentFormat(str, Enum):
    """On-disk document formats, valued by their canonical extension."""

    LEGACY = "doc"
    MODERN = "docx"


class Alignment(str, Enum):
    """Paragraph alignment modes kept by the format normalizer."""

    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"
    JUSTIFIED = "both"


class StyleType(str, Enum):
    """High-level style families defined by Word processing documents."""

    PARAGRAPH = "paragraph"
    CHARACTER = "character"
    TABLE = "table"
    NUMBERING = "numbering"
