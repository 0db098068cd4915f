"""
Package reader for DOCX files.

Reads every part of a DOCX (OPC zip) package into memory, parses content
types and relationships, and locates the main document part.
"""

import logging
import posixpath
import zipfile
from pathlib import Path
from typing import Dict, List, NamedTuple, Optional, Union

from ..exceptions import PackageError
from ..utils.xml_utils import CT_NS, PKG_REL_NS, RT_OFFICE_DOCUMENT, parse_xml

logger = logging.getLogger(__name__)

CONTENT_TYPES_PART = "[Content_Types].xml"
ROOT_RELS_PART = "_rels/.rels"


class Relationship(NamedTuple):
    """One entry of a ``.rels`` part."""

    rel_id: str
    rel_type: str
    target: str
    target_mode: Optional[str] = None

    @property
    def is_external(self) -> bool:
        return self.target_mode == "External"


def rels_part_name(part_name: str) -> str:
    """
    Get the relationships part name for a part.

    Example: ``word/document.xml`` -> ``word/_rels/document.xml.rels``
    """
    directory, file_name = posixpath.split(part_name)
    if directory:
        return f"{directory}/_rels/{file_name}.rels"
    return f"_rels/{file_name}.rels"


def resolve_target(source_part: str, target: str) -> str:
    """Resolve a relationship target against the directory of its source part."""
    if target.startswith("/"):
        return target.lstrip("/")
    base = posixpath.dirname(source_part)
    return posixpath.normpath(posixpath.join(base, target)).lstrip("/")


def parse_relationships(data: bytes) -> List[Relationship]:
    """Parse a ``.rels`` part into its relationships, in document order."""
    root = parse_xml(data)
    relationships = []
    for rel in root.findall(f"{{{PKG_REL_NS}}}Relationship"):
        rel_id = rel.get("Id", "")
        target = rel.get("Target", "")
        if rel_id and target:
            relationships.append(Relationship(rel_id, rel.get("Type", ""), target, rel.get("TargetMode")))
    return relationships


class PackageReader:
    """
    Reads and manages DOCX package contents.

    All parts are held as raw bytes in their original archive order, so a
    package can be written back without touching parts nobody modified.
    """

    def __init__(self, docx_path: Union[str, Path]):
        """
        Initialize package reader.

        Args:
            docx_path: Path to DOCX file

        Raises:
            FileNotFoundError: If the file does not exist
            zipfile.BadZipFile: If the file is not a zip archive
        """
        self.docx_path = Path(docx_path)
        self._parts: Dict[str, bytes] = {}
        self._content_types: Dict[str, str] = {}
        self._relationships: Dict[str, List[Relationship]] = {}

        self._read_package()
        self._parse_content_types()

    def _read_package(self) -> None:
        if not self.docx_path.exists():
            raise FileNotFoundError(f"DOCX file not found: {self.docx_path}")

        with zipfile.ZipFile(self.docx_path, "r") as zip_file:
            for info in zip_file.infolist():
                if not info.is_dir():
                    self._parts[info.filename] = zip_file.read(info.filename)

        logger.debug(f"Read {len(self._parts)} parts from {self.docx_path}")

    def _parse_content_types(self) -> None:
        data = self._parts.get(CONTENT_TYPES_PART)
        if data is None:
            logger.warning(f"Package has no {CONTENT_TYPES_PART}: {self.docx_path}")
            return

        root = parse_xml(data)
        for override in root.findall(f"{{{CT_NS}}}Override"):
            part_name = override.get("PartName", "")
            content_type = override.get("ContentType", "")
            if part_name and content_type:
                self._content_types[part_name.lstrip("/")] = content_type

        logger.debug(f"Parsed {len(self._content_types)} content type overrides")

    @property
    def parts(self) -> Dict[str, bytes]:
        return self._parts

    @property
    def content_types(self) -> Dict[str, str]:
        return self._content_types

    def has_part(self, part_name: str) -> bool:
        return part_name in self._parts

    def get_relationships(self, part_name: str) -> List[Relationship]:
        """
        Get relationships whose source is ``part_name``.

        Use ``""`` for the package-level relationships in ``_rels/.rels``.
        """
        rels_name = ROOT_RELS_PART if not part_name else rels_part_name(part_name)
        if rels_name not in self._relationships:
            data = self._parts.get(rels_name)
            self._relationships[rels_name] = parse_relationships(data) if data is not None else []
        return self._relationships[rels_name]

    def find_related_part(self, source_part: str, rel_type: str) -> Optional[str]:
        """Return the part name targeted by the first internal relationship of ``rel_type``."""
        for rel in self.get_relationships(source_part):
            if rel.rel_type == rel_type and not rel.is_external:
                return resolve_target(source_part, rel.target)
        return None

    def main_document_part(self) -> str:
        """
        Locate the main document part.

        Raises:
            PackageError: If the package declares no existing main document
        """
        part_name = self.find_related_part("", RT_OFFICE_DOCUMENT)
        if part_name is None and self.has_part("word/document.xml"):
            part_name = "word/document.xml"
        if part_name is None or not self.has_part(part_name):
            raise PackageError("Package has no main document part", str(self.docx_path))
        return part_name

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def close(self) -> None:
        self._relationships.clear()
