"""
Package writer for DOCX files.

Writes parts to a zip package and maintains the two bookkeeping parts a
new part needs: its ``[Content_Types].xml`` override and the relationship
from its source part.
"""

import logging
import os
import re
import tempfile
import zipfile
from pathlib import Path
from typing import Dict, Optional, Tuple, Union

from lxml import etree

from ..parser.package_reader import CONTENT_TYPES_PART, parse_relationships
from ..utils.xml_utils import CT_MAIN_DOCUMENT, CT_NS, CT_RELATIONSHIPS, CT_XML, PKG_REL_NS, parse_xml, serialize_xml

logger = logging.getLogger(__name__)

_REL_ID_PATTERN = re.compile(r"^rId(\d+)$")


def generate_content_types_xml(defaults: Dict[str, str], overrides: Dict[str, str]) -> bytes:
    """Generate ``[Content_Types].xml`` from extension defaults and part overrides."""
    root = etree.Element(f"{{{CT_NS}}}Types", nsmap={None: CT_NS})
    for extension, content_type in defaults.items():
        default_el = etree.SubElement(root, f"{{{CT_NS}}}Default")
        default_el.set("Extension", extension)
        default_el.set("ContentType", content_type)
    for part_name, content_type in overrides.items():
        override_el = etree.SubElement(root, f"{{{CT_NS}}}Override")
        override_el.set("PartName", f"/{part_name.lstrip('/')}")
        override_el.set("ContentType", content_type)
    return serialize_xml(root)


def generate_relationships_xml(relationships) -> bytes:
    """
    Generate a ``.rels`` part.

    Args:
        relationships: Iterable of (rel_id, rel_type, target) tuples
    """
    root = etree.Element(f"{{{PKG_REL_NS}}}Relationships", nsmap={None: PKG_REL_NS})
    for rel_id, rel_type, target in relationships:
        rel_el = etree.SubElement(root, f"{{{PKG_REL_NS}}}Relationship")
        rel_el.set("Id", rel_id)
        rel_el.set("Type", rel_type)
        rel_el.set("Target", target)
    return serialize_xml(root)


def next_rel_id(rels_data: Optional[bytes]) -> str:
    """Return ``rId<n>`` one above the highest numeric id already used."""
    highest = 0
    if rels_data is not None:
        for rel in parse_relationships(rels_data):
            match = _REL_ID_PATTERN.match(rel.rel_id)
            if match:
                highest = max(highest, int(match.group(1)))
    return f"rId{highest + 1}"


def add_relationship(rels_data: Optional[bytes], rel_type: str, target: str) -> Tuple[bytes, str]:
    """
    Add a relationship to a ``.rels`` part, creating the part if needed.

    Args:
        rels_data: Existing part content or None
        rel_type: Relationship type URI
        target: Target relative to the source part

    Returns:
        Tuple of (new part content, new relationship id)
    """
    rel_id = next_rel_id(rels_data)
    if rels_data is None:
        return generate_relationships_xml([(rel_id, rel_type, target)]), rel_id

    root = parse_xml(rels_data)
    rel_el = etree.SubElement(root, f"{{{PKG_REL_NS}}}Relationship")
    rel_el.set("Id", rel_id)
    rel_el.set("Type", rel_type)
    rel_el.set("Target", target)
    return serialize_xml(root), rel_id


def add_content_type_override(content_types_data: Optional[bytes], part_name: str, content_type: str) -> bytes:
    """Add (or replace) the override for ``part_name`` in ``[Content_Types].xml``."""
    if content_types_data is None:
        return generate_content_types_xml(default_content_types(), {part_name: content_type})

    root = parse_xml(content_types_data)
    part_uri = f"/{part_name.lstrip('/')}"
    for override in root.findall(f"{{{CT_NS}}}Override"):
        if override.get("PartName", "").lower() == part_uri.lower():
            override.set("ContentType", content_type)
            return serialize_xml(root)

    override_el = etree.SubElement(root, f"{{{CT_NS}}}Override")
    override_el.set("PartName", part_uri)
    override_el.set("ContentType", content_type)
    return serialize_xml(root)


def default_content_types() -> Dict[str, str]:
    return {"rels": CT_RELATIONSHIPS, "xml": CT_XML}


def main_document_overrides() -> Dict[str, str]:
    return {"word/document.xml": CT_MAIN_DOCUMENT}


def write_package(parts: Dict[str, bytes], output_path: Union[str, Path]) -> Path:
    """
    Write parts to a DOCX package atomically.

    The archive is written to a temporary sibling file that then replaces
    ``output_path``, so a failed write never leaves a partial package at
    the destination. ``[Content_Types].xml`` is written first.

    Args:
        parts: Mapping of part name to content
        output_path: Destination path

    Returns:
        Destination path
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    ordered = []
    if CONTENT_TYPES_PART in parts:
        ordered.append(CONTENT_TYPES_PART)
    ordered.extend(name for name in parts if name != CONTENT_TYPES_PART)

    fd, tmp_name = tempfile.mkstemp(prefix=f".{output_path.stem}-", suffix=".tmp", dir=output_path.parent)
    try:
        with os.fdopen(fd, "wb") as handle:
            with zipfile.ZipFile(handle, "w", zipfile.ZIP_DEFLATED) as zip_file:
                for name in ordered:
                    zip_file.writestr(name, parts[name])
        os.replace(tmp_name, output_path)
    except BaseException:
        try:
            os.unlink(tmp_name)
        except FileNotFoundError:
            pass
        raise

    logger.debug(f"Wrote {len(ordered)} parts to {output_path}")
    return output_path
