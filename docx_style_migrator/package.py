"""
Style package: the modern-format document aggregate.

A StylePackage owns the style collection, numbering definitions and
document-wide style metadata of one DOCX file, plus a read-only view of
its body. All other parts are carried verbatim, so a load/save cycle only
rewrites the parts the migrator models.
"""

import logging
import posixpath
from pathlib import Path
from typing import Dict, Optional, Union

from .exceptions import MissingStyleDefinitionsError
from .export.package_writer import add_content_type_override, add_relationship, write_package
from .models.content import ContentTree
from .models.style import DocumentDefaults, LatentStyleSettings, NumberingDefinitions, StyleCollection
from .parser.body_parser import BodyParser
from .parser.package_reader import CONTENT_TYPES_PART, PackageReader, rels_part_name
from .parser.styles_parser import StylesParser, create_styles_root
from .utils.xml_utils import CT_NUMBERING, CT_STYLES, RT_NUMBERING, RT_STYLES, parse_xml, serialize_xml

logger = logging.getLogger(__name__)


def _related_part(reader: PackageReader, main_part: str, rel_type: str, content_type: str) -> Optional[str]:
    part = reader.find_related_part(main_part, rel_type)
    if part is None:
        return None
    if not reader.has_part(part):
        logger.warning(f"Relationship {rel_type.rsplit('/', 1)[-1]} points to missing part {part}")
        return None
    declared = reader.content_types.get(part)
    if declared is not None and declared != content_type:
        logger.warning(f"Part {part} declares content type {declared}, expected {content_type}")
    return part


class StylePackage:
    """
    A loaded DOCX package.

    Source and destination packages are independent objects; nothing is
    shared between them except through explicit copies.
    """

    def __init__(self, parts: Dict[str, bytes], main_part: str, path: Optional[Path] = None,
                 styles_part: Optional[str] = None, numbering_part: Optional[str] = None):
        self.path = path
        self.main_part = main_part
        self._parts = dict(parts)
        self._styles_part = styles_part
        self._numbering_part = numbering_part
        self._new_parts: Dict[str, tuple] = {}
        self._body: Optional[ContentTree] = None

        self._styles_root = None
        self.styles: Optional[StyleCollection] = None
        self.doc_defaults: Optional[DocumentDefaults] = None
        self.latent_styles: Optional[LatentStyleSettings] = None
        self.numbering: Optional[NumberingDefinitions] = None

        if styles_part is not None:
            self._styles_root = parse_xml(self._parts[styles_part])
            self.styles, self.doc_defaults, self.latent_styles = StylesParser(self._styles_root).parse()
        if numbering_part is not None:
            self.numbering = NumberingDefinitions(parse_xml(self._parts[numbering_part]))

    @classmethod
    def load(cls, path: Union[str, Path]) -> "StylePackage":
        """
        Load a DOCX package.

        Args:
            path: Path to DOCX file

        Returns:
            Loaded package

        Raises:
            FileNotFoundError: If the file does not exist
            zipfile.BadZipFile: If the file is not a zip archive
            PackageError: If the package has no main document part
        """
        path = Path(path)
        with PackageReader(path) as reader:
            main_part = reader.main_document_part()
            styles_part = _related_part(reader, main_part, RT_STYLES, CT_STYLES)
            numbering_part = _related_part(reader, main_part, RT_NUMBERING, CT_NUMBERING)
            package = cls(reader.parts, main_part, path, styles_part, numbering_part)

        logger.debug(
            f"Loaded {path}: {len(package.styles) if package.styles is not None else 'no'} styles, "
            f"numbering={'yes' if package.numbering is not None else 'no'}"
        )
        return package

    @property
    def parts(self) -> Dict[str, bytes]:
        return self._parts

    @property
    def has_styles(self) -> bool:
        return self.styles is not None

    @property
    def body(self) -> ContentTree:
        """Read-only content view of the main document body."""
        if self._body is None:
            self._body = BodyParser(parse_xml(self._parts[self.main_part])).parse()
        return self._body

    def require_styles(self) -> StyleCollection:
        """
        Get the style collection of a package that must have one.

        Raises:
            MissingStyleDefinitionsError: If the package has no styles part
        """
        if self.styles is None:
            name = self.path.name if self.path else "document"
            raise MissingStyleDefinitionsError("Document lacks style definitions", name)
        return self.styles

    def ensure_styles(self) -> StyleCollection:
        """Get the style collection, creating an empty styles part when there is none."""
        if self.styles is None:
            self._styles_part = self._new_part_name("styles.xml")
            self._styles_root = create_styles_root()
            self.styles = StyleCollection()
            self._new_parts[self._styles_part] = (RT_STYLES, CT_STYLES)
            logger.debug(f"Created styles part {self._styles_part}")
        return self.styles

    def set_numbering(self, numbering: NumberingDefinitions) -> None:
        """Replace the numbering definitions, creating the numbering part when there is none."""
        if self._numbering_part is None:
            self._numbering_part = self._new_part_name("numbering.xml")
            self._new_parts[self._numbering_part] = (RT_NUMBERING, CT_NUMBERING)
            logger.debug(f"Created numbering part {self._numbering_part}")
        self.numbering = numbering

    def _new_part_name(self, file_name: str) -> str:
        directory = posixpath.dirname(self.main_part)
        base, ext = posixpath.splitext(file_name)
        candidate = posixpath.join(directory, file_name)
        counter = 1
        while candidate in self._parts or candidate in self._new_parts:
            candidate = posixpath.join(directory, f"{base}{counter}{ext}")
            counter += 1
        return candidate

    def _register_new_part(self, part_name: str, rel_type: str, content_type: str) -> None:
        self._parts[CONTENT_TYPES_PART] = add_content_type_override(
            self._parts.get(CONTENT_TYPES_PART), part_name, content_type
        )
        rels_name = rels_part_name(self.main_part)
        target = posixpath.relpath(part_name, posixpath.dirname(self.main_part) or ".")
        self._parts[rels_name], rel_id = add_relationship(self._parts.get(rels_name), rel_type, target)
        logger.debug(f"Registered {part_name} as {rel_id} of {self.main_part}")

    def to_parts(self) -> Dict[str, bytes]:
        """
        Serialize the package.

        Only the styles and numbering parts are regenerated; new parts are
        registered in the content types and main document relationships.

        Returns:
            Mapping of part name to content
        """
        if self.styles is not None:
            StylesParser(self._styles_root).update(self.styles, self.doc_defaults, self.latent_styles)
            self._parts[self._styles_part] = serialize_xml(self._styles_root)
        if self.numbering is not None:
            self._parts[self._numbering_part] = serialize_xml(self.numbering.element)

        for part_name, (rel_type, content_type) in self._new_parts.items():
            self._register_new_part(part_name, rel_type, content_type)
        self._new_parts.clear()
        return self._parts

    def save(self, path: Union[str, Path, None] = None) -> Path:
        """
        Save the package atomically.

        Args:
            path: Destination (defaults to the path it was loaded from)

        Returns:
            Path written
        """
        target = Path(path) if path is not None else self.path
        if target is None:
            raise ValueError("No path to save package to")
        write_package(self.to_parts(), target)
        logger.debug(f"Saved package to {target}")
        return target

    def __repr__(self):
        return f"StylePackage(path={str(self.path)!r}, main_part={self.main_part!r})"
