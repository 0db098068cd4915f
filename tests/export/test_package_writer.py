"""
Tests for package writing helpers.
"""

import zipfile
from unittest.mock import patch

import pytest

from docx_style_migrator.export.package_writer import (
    add_content_type_override,
    add_relationship,
    generate_relationships_xml,
    next_rel_id,
    write_package,
)
from docx_style_migrator.parser.package_reader import parse_relationships
from docx_style_migrator.utils.xml_utils import CT_NS, CT_STYLES, RT_STYLES, parse_xml


class TestRelationships:
    """Test cases for relationship helpers."""

    def test_next_rel_id(self):
        data = generate_relationships_xml([("rId1", "a", "x.xml"), ("rId7", "b", "y.xml"), ("custom", "c", "z")])
        assert next_rel_id(data) == "rId8"
        assert next_rel_id(None) == "rId1"

    def test_add_relationship_to_existing(self):
        data = generate_relationships_xml([("rId3", "a", "x.xml")])
        updated, rel_id = add_relationship(data, RT_STYLES, "styles.xml")
        assert rel_id == "rId4"
        relationships = parse_relationships(updated)
        assert [(r.rel_id, r.target) for r in relationships] == [("rId3", "x.xml"), ("rId4", "styles.xml")]

    def test_add_relationship_creates_part(self):
        updated, rel_id = add_relationship(None, RT_STYLES, "styles.xml")
        assert rel_id == "rId1"
        assert parse_relationships(updated)[0].rel_type == RT_STYLES


class TestContentTypes:
    """Test cases for content type overrides."""

    def test_adds_override(self):
        data = add_content_type_override(None, "word/styles.xml", CT_STYLES)
        root = parse_xml(data)
        overrides = {el.get("PartName"): el.get("ContentType") for el in root.findall(f"{{{CT_NS}}}Override")}
        assert overrides == {"/word/styles.xml": CT_STYLES}
        assert root.findall(f"{{{CT_NS}}}Default")

    def test_replaces_existing_override(self):
        data = add_content_type_override(None, "word/styles.xml", "text/plain")
        data = add_content_type_override(data, "/word/styles.xml", CT_STYLES)
        overrides = parse_xml(data).findall(f"{{{CT_NS}}}Override")
        assert len(overrides) == 1
        assert overrides[0].get("ContentType") == CT_STYLES


class TestWritePackage:
    """Test cases for atomic package writing."""

    def test_writes_content_types_first(self, temp_dir):
        path = write_package({"word/document.xml": b"<d/>", "[Content_Types].xml": b"<t/>"}, temp_dir / "a.docx")
        with zipfile.ZipFile(path) as zf:
            assert zf.namelist() == ["[Content_Types].xml", "word/document.xml"]

    def test_failure_leaves_target_untouched(self, temp_dir):
        """A failed write keeps the previous file and leaves no temp file behind."""
        target = temp_dir / "keep.docx"
        target.write_bytes(b"original")

        with patch("docx_style_migrator.export.package_writer.zipfile.ZipFile", side_effect=OSError("disk full")):
            with pytest.raises(OSError):
                write_package({"[Content_Types].xml": b"<t/>"}, target)

        assert target.read_bytes() == b"original"
        assert [p.name for p in temp_dir.iterdir()] == ["keep.docx"]
