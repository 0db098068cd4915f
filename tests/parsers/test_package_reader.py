"""
Tests for PackageReader class.

This module contains unit tests for the PackageReader functionality.
"""

import zipfile

import pytest

from docx_style_migrator.exceptions import PackageError
from docx_style_migrator.parser.package_reader import (
    PackageReader,
    parse_relationships,
    rels_part_name,
    resolve_target,
)
from docx_style_migrator.utils.xml_utils import RT_NUMBERING, RT_STYLES

from tests.builders import SAMPLE_NUMBERING, build_docx


class TestPackageReader:
    """Test cases for PackageReader class."""

    def test_reads_all_parts(self, sample_docx):
        """Every archive member is available as raw bytes."""
        with PackageReader(sample_docx) as reader:
            assert reader.has_part("word/document.xml")
            assert reader.has_part("word/styles.xml")
            assert reader.parts["word/numbering.xml"].startswith(b"<?xml")

    def test_init_with_nonexistent_file(self, temp_dir):
        """Test PackageReader initialization with nonexistent file."""
        with pytest.raises(FileNotFoundError):
            PackageReader(temp_dir / "nonexistent.docx")

    def test_init_with_invalid_zip(self, temp_dir):
        """Test PackageReader initialization with invalid ZIP file."""
        invalid_file = temp_dir / "invalid.docx"
        invalid_file.write_text("This is not a ZIP file")

        with pytest.raises(zipfile.BadZipFile):
            PackageReader(invalid_file)

    def test_missing_part(self, sample_docx):
        with PackageReader(sample_docx) as reader:
            assert not reader.has_part("word/missing.xml")

    def test_content_types(self, sample_docx):
        """Overrides are keyed by part name without the leading slash."""
        with PackageReader(sample_docx) as reader:
            assert reader.content_types["word/styles.xml"].endswith("styles+xml")

    def test_main_document_and_related_parts(self, sample_docx):
        """Styles and numbering are found through the main document's relationships."""
        with PackageReader(sample_docx) as reader:
            main = reader.main_document_part()
            assert main == "word/document.xml"
            assert reader.find_related_part(main, RT_STYLES) == "word/styles.xml"
            assert reader.find_related_part(main, RT_NUMBERING) == "word/numbering.xml"

    def test_missing_related_part(self, temp_dir):
        path = build_docx(temp_dir / "bare.docx", styles=None)
        with PackageReader(path) as reader:
            assert reader.find_related_part("word/document.xml", RT_STYLES) is None

    def test_no_main_document(self, temp_dir):
        """A zip without a main document part is rejected."""
        path = temp_dir / "empty.docx"
        with zipfile.ZipFile(path, "w") as zf:
            zf.writestr("readme.txt", "not a document")

        with PackageReader(path) as reader:
            with pytest.raises(PackageError):
                reader.main_document_part()


class TestRelationshipHelpers:
    """Test cases for relationship helper functions."""

    def test_rels_part_name(self):
        assert rels_part_name("word/document.xml") == "word/_rels/document.xml.rels"
        assert rels_part_name("document.xml") == "_rels/document.xml.rels"

    @pytest.mark.parametrize("source,target,expected", [
        ("word/document.xml", "styles.xml", "word/styles.xml"),
        ("word/document.xml", "../customXml/item1.xml", "customXml/item1.xml"),
        ("word/document.xml", "/word/numbering.xml", "word/numbering.xml"),
        ("", "word/document.xml", "word/document.xml"),
    ])
    def test_resolve_target(self, source, target, expected):
        assert resolve_target(source, target) == expected

    def test_parse_relationships(self):
        data = (
            b'<Relationships xmlns="http://schemas.openxmlformats.org/package/2006/relationships">'
            b'<Relationship Id="rId1" Type="t1" Target="styles.xml"/>'
            b'<Relationship Id="rId2" Type="t2" Target="https://example.com" TargetMode="External"/>'
            b'</Relationships>'
        )
        relationships = parse_relationships(data)
        assert [rel.rel_id for rel in relationships] == ["rId1", "rId2"]
        assert not relationships[0].is_external
        assert relationships[1].is_external
