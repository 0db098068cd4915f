"""
Tests for StylePackage load and save.
"""

import zipfile

import pytest
from lxml import etree

from docx_style_migrator.exceptions import MissingStyleDefinitionsError, PackageError
from docx_style_migrator.models.style import NumberingDefinitions, StyleDefinition
from docx_style_migrator.package import StylePackage
from docx_style_migrator.parser.package_reader import PackageReader
from docx_style_migrator.utils.xml_utils import CT_NUMBERING, CT_STYLES, RT_NUMBERING, RT_STYLES, W_NS, w

from tests.builders import SAMPLE_NUMBERING, build_docx


def _read_zip(path):
    with zipfile.ZipFile(path) as zf:
        return {name: zf.read(name) for name in zf.namelist()}


class TestStylePackageLoad:
    """Test cases for loading packages."""

    def test_load_sample(self, sample_docx):
        package = StylePackage.load(sample_docx)
        assert package.main_part == "word/document.xml"
        assert package.has_styles
        assert len(package.styles) == 6
        assert package.doc_defaults is not None
        assert package.latent_styles is not None
        assert package.numbering is not None

    def test_load_without_styles(self, temp_dir):
        package = StylePackage.load(build_docx(temp_dir / "bare.docx", styles=None))
        assert not package.has_styles
        assert package.numbering is None

    def test_require_styles(self, temp_dir):
        """A package without a styles part cannot serve as a style source."""
        package = StylePackage.load(build_docx(temp_dir / "bare.docx", styles=None))
        with pytest.raises(MissingStyleDefinitionsError):
            package.require_styles()

    def test_body_view(self, sample_docx):
        package = StylePackage.load(sample_docx)
        assert package.body[0].get_text() == "Body text"

    def test_unexpected_content_type_warns(self, sample_docx, temp_dir, caplog):
        """A styles part declared with another content type still loads, with a warning."""
        relabeled = temp_dir / "relabeled.docx"
        with zipfile.ZipFile(sample_docx) as src, zipfile.ZipFile(relabeled, "w") as dst:
            for name in src.namelist():
                data = src.read(name)
                if name == "[Content_Types].xml":
                    data = data.replace(b"styles+xml", b"xml")
                dst.writestr(name, data)

        package = StylePackage.load(relabeled)
        assert "Heading1" in package.styles
        assert "declares content type" in caplog.text

    def test_related_part_missing(self, sample_docx, temp_dir, caplog):
        stripped = temp_dir / "stripped.docx"
        with zipfile.ZipFile(sample_docx) as src, zipfile.ZipFile(stripped, "w") as dst:
            for name in src.namelist():
                if name != "word/styles.xml":
                    dst.writestr(name, src.read(name))

        package = StylePackage.load(stripped)
        assert not package.has_styles
        assert package.numbering is not None
        assert "missing part word/styles.xml" in caplog.text

    def test_load_without_main_document(self, temp_dir):
        path = temp_dir / "odd.docx"
        with zipfile.ZipFile(path, "w") as zf:
            zf.writestr("[Content_Types].xml", "<Types xmlns='http://schemas.openxmlformats.org/package/2006/content-types'/>")
        with pytest.raises(PackageError):
            StylePackage.load(path)

    def test_load_not_a_zip(self, temp_dir):
        path = temp_dir / "broken.docx"
        path.write_bytes(b"PK\x03\x04 truncated")
        with pytest.raises(zipfile.BadZipFile):
            StylePackage.load(path)


class TestStylePackageSave:
    """Test cases for saving packages."""

    def test_unmodelled_parts_preserved(self, temp_dir):
        """Saving without changes keeps every unmodelled part byte for byte."""
        extra = {"customXml/item1.xml": b"<root>\xc3\xa9</root>", "word/media/image1.png": b"\x89PNG\r\n"}
        source = build_docx(temp_dir / "in.docx", numbering=SAMPLE_NUMBERING, extra_parts=extra)
        StylePackage.load(source).save(temp_dir / "out.docx")

        before = _read_zip(source)
        after = _read_zip(temp_dir / "out.docx")
        assert set(before) == set(after)
        for name in before:
            if name not in ("word/styles.xml", "word/numbering.xml"):
                assert after[name] == before[name], name

    def test_styles_round_trip(self, sample_docx, temp_dir):
        """Saved styles reload equal to the originals, in order."""
        original = StylePackage.load(sample_docx)
        original.save(temp_dir / "copy.docx")
        reloaded = StylePackage.load(temp_dir / "copy.docx")
        assert list(reloaded.styles) == list(original.styles)
        assert reloaded.doc_defaults == original.doc_defaults
        assert reloaded.latent_styles == original.latent_styles

    def test_ignorable_namespaces_kept(self, sample_docx, temp_dir):
        """Namespaces referenced only from mc:Ignorable survive a save."""
        StylePackage.load(sample_docx).save(temp_dir / "copy.docx")
        styles = _read_zip(temp_dir / "copy.docx")["word/styles.xml"]
        root = etree.fromstring(styles)
        assert "w14" in root.nsmap

    def test_save_in_place(self, sample_docx):
        package = StylePackage.load(sample_docx)
        package.styles.remove_ids({"TableGrid"})
        assert package.save() == sample_docx
        assert "TableGrid" not in StylePackage.load(sample_docx).styles

    def test_content_types_first(self, sample_docx, temp_dir):
        StylePackage.load(sample_docx).save(temp_dir / "copy.docx")
        with zipfile.ZipFile(temp_dir / "copy.docx") as zf:
            assert zf.namelist()[0] == "[Content_Types].xml"

    def test_new_styles_part_registered(self, temp_dir):
        """A created styles part gets a content type override and a relationship."""
        package = StylePackage.load(build_docx(temp_dir / "bare.docx", styles=None))
        package.ensure_styles().add(StyleDefinition.create("Quote"))
        package.save(temp_dir / "styled.docx")

        with PackageReader(temp_dir / "styled.docx") as reader:
            part = reader.find_related_part("word/document.xml", RT_STYLES)
            assert part == "word/styles.xml"
            assert reader.content_types[part] == CT_STYLES
        assert StylePackage.load(temp_dir / "styled.docx").styles.ids() == ["Quote"]

    def test_new_numbering_part_registered(self, temp_dir):
        """Setting numbering on a package without it creates a related numbering part."""
        package = StylePackage.load(build_docx(temp_dir / "plain.docx"))
        numbering = NumberingDefinitions(etree.Element(w("numbering"), nsmap={"w": W_NS}))
        etree.SubElement(numbering.element, w("num")).set(w("numId"), "7")
        package.set_numbering(numbering)
        package.save()

        with PackageReader(temp_dir / "plain.docx") as reader:
            part = reader.find_related_part("word/document.xml", RT_NUMBERING)
            assert part == "word/numbering.xml"
            assert reader.content_types[part] == CT_NUMBERING
            rel_ids = [rel.rel_id for rel in reader.get_relationships("word/document.xml")]
            assert rel_ids == ["rId1", "rId2"]
        assert StylePackage.load(temp_dir / "plain.docx").numbering == numbering

    def test_existing_part_name_not_reused(self, temp_dir):
        """A new part never overwrites an unrelated part of the same name."""
        path = build_docx(temp_dir / "clash.docx", styles=None, extra_parts={"word/styles.xml": b"<unrelated/>"})
        package = StylePackage.load(path)
        package.ensure_styles()
        package.save()
        parts = _read_zip(path)
        assert parts["word/styles.xml"] == b"<unrelated/>"
        assert "word/styles1.xml" in parts
