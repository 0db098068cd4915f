"""
Simple high-level API for DOCX Style Migrator.

Each function runs one operation with a fresh StyleMigrationService.

Example:
    >>> from docx_style_migrator import api
    >>>
    >>> # Copy two styles (and their parents) into a report
    >>> api.migrate_selected('template.docx', 'report.docx', ['Heading1', 'Quote'])
    >>>
    >>> # Replace all styles of a legacy document
    >>> api.migrate_all('template.docx', 'old.doc')
    PosixPath('old.docx')
    >>>
    >>> # List and export styles
    >>> api.list_styles('report.docx')
    >>> api.export_styles('report.docx', 'styles.csv')
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, List, Optional, Tuple, Union

from .migrator import MigrationOptions, StyleMigrationService
from .models.style import StyleInfo

logger = logging.getLogger(__name__)

__all__ = [
    "migrate_selected",
    "migrate_all",
    "list_styles",
    "export_styles",
    "clean_styles",
]


def _service(work_dir: Optional[Union[str, Path]] = None) -> StyleMigrationService:
    return StyleMigrationService(work_dir=work_dir)


def migrate_selected(
    source: Union[str, Path],
    destination: Union[str, Path],
    keys: Iterable[str],
    copy_numbering: bool = True,
    include_dependencies: bool = True,
    work_dir: Optional[Union[str, Path]] = None,
) -> Path:
    """Copy the selected styles from source into destination (convenience function)."""
    service = _service(work_dir)
    service.options = MigrationOptions(copy_numbering, include_dependencies)
    return service.migrate_selected(source, destination, keys)


def migrate_all(
    source: Union[str, Path],
    destination: Union[str, Path],
    copy_numbering: bool = True,
    work_dir: Optional[Union[str, Path]] = None,
) -> Path:
    """Replace all destination styles with the source's styles (convenience function)."""
    return _service(work_dir).migrate_all(source, destination, copy_numbering=copy_numbering)


def list_styles(document: Union[str, Path], work_dir: Optional[Union[str, Path]] = None) -> List[StyleInfo]:
    """List the styles of a document sorted by id (convenience function)."""
    return _service(work_dir).list_styles(document)


def export_styles(
    source: Union[str, Path],
    output_path: Union[str, Path],
    work_dir: Optional[Union[str, Path]] = None,
) -> None:
    """Export the style listing of a document to CSV (convenience function)."""
    _service(work_dir).export_styles(source, output_path)


def clean_styles(
    document: Union[str, Path],
    keys: Iterable[str],
    work_dir: Optional[Union[str, Path]] = None,
) -> Tuple[Path, int]:
    """Remove styles by id or name; returns (output path, removed count) (convenience function)."""
    result = _service(work_dir).clean_styles(document, keys)
    return result.path, result.removed
