"""
Tests for DocxWriter and DocumentXmlWriter.
"""

import zipfile

from lxml import etree

from docx_style_migrator.export.docx_writer import DocumentXmlWriter, DocxWriter
from docx_style_migrator.models.content import ContentTree, Paragraph, Run, Table
from docx_style_migrator.models.style import StyleCollection, StyleDefinition
from docx_style_migrator.package import StylePackage
from docx_style_migrator.utils.enums import Alignment
from docx_style_migrator.utils.xml_utils import w


def _sample_tree():
    tree = ContentTree()
    tree.append(Paragraph(alignment=Alignment.CENTER, style_id="Title",
                          runs=[Run("Hello", bold=True, font_size=12, font_family="Arial")]))
    table = Table.with_default_shape()
    table.rows[0].ensure_cell_count(2)
    table.rows[0].cells[0].paragraphs = [Paragraph(runs=[Run("A")])]
    tree.append(table)
    tree.append(Paragraph(runs=[Run("Bye", italic=True, underline=True)]))
    return tree


class TestDocumentXmlWriter:
    """Test cases for body rendering."""

    def test_paragraph_properties(self):
        root = DocumentXmlWriter().render(_sample_tree())
        p_el = root.find(f"{w('body')}/{w('p')}")
        assert p_el.find(f"{w('pPr')}/{w('pStyle')}").get(w("val")) == "Title"
        assert p_el.find(f"{w('pPr')}/{w('jc')}").get(w("val")) == "center"

    def test_run_properties(self):
        root = DocumentXmlWriter().render(_sample_tree())
        r_pr = root.find(f"{w('body')}/{w('p')}/{w('r')}/{w('rPr')}")
        assert [etree.QName(child).localname for child in r_pr] == ["rFonts", "b", "sz", "szCs"]
        assert r_pr.find(w("sz")).get(w("val")) == "24"

    def test_left_alignment_omitted(self):
        root = DocumentXmlWriter().render(ContentTree([Paragraph(runs=[Run("x")])]))
        assert root.find(f"{w('body')}/{w('p')}/{w('pPr')}") is None

    def test_table_cells_always_hold_a_paragraph(self):
        root = DocumentXmlWriter().render(_sample_tree())
        cells = root.findall(f"{w('body')}/{w('tbl')}/{w('tr')}/{w('tc')}")
        assert len(cells) == 2
        assert all(cell.find(w("p")) is not None for cell in cells)
        assert len(root.findall(f"{w('body')}/{w('tbl')}/{w('tblGrid')}/{w('gridCol')}")) == 2

    def test_breaks_tabs_and_illegal_characters(self):
        tree = ContentTree([Paragraph(runs=[Run("a\tb\x0bc\x01 "), Run("\x02")])])
        root = DocumentXmlWriter().render(tree)
        runs = root.findall(f"{w('body')}/{w('p')}/{w('r')}")
        assert len(runs) == 1
        assert [etree.QName(child).localname for child in runs[0]] == ["t", "tab", "t", "br", "t"]
        last = runs[0].findall(w("t"))[-1]
        assert last.text == "c "
        assert last.get("{http://www.w3.org/XML/1998/namespace}space") == "preserve"

    def test_section_properties_last(self):
        root = DocumentXmlWriter().render(_sample_tree())
        assert etree.QName(root.find(w("body"))[-1]).localname == "sectPr"


class TestDocxWriter:
    """Test cases for whole-package writing."""

    def test_written_package_loads(self, temp_dir):
        styles = StyleCollection([StyleDefinition.create("Title", "Title")])
        path = DocxWriter(_sample_tree(), styles).write(temp_dir / "out.docx")

        with zipfile.ZipFile(path) as zf:
            assert zf.namelist()[0] == "[Content_Types].xml"

        package = StylePackage.load(path)
        assert package.styles.ids() == ["Title"]
        body = package.body
        assert len(body) == 3
        assert body[0].get_text() == "Hello"
        assert body[0].runs[0].bold
        assert body[0].runs[0].font_size == 12
        assert body[2].runs[0].italic and body[2].runs[0].underline

    def test_styles_are_copied(self, temp_dir):
        """Writing does not detach the caller's style elements."""
        styles = StyleCollection([StyleDefinition.create("Title")])
        element = styles[0].element
        DocxWriter(ContentTree(), styles).write(temp_dir / "out.docx")
        assert styles[0].element is element
        assert element.getparent() is None
