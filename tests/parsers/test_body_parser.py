"""
Tests for the document body parser.
"""

from lxml import etree

from docx_style_migrator.models.content import Paragraph, Table
from docx_style_migrator.parser.body_parser import BodyParser
from docx_style_migrator.utils.enums import Alignment

W = "http://schemas.openxmlformats.org/wordprocessingml/2006/main"


def _parse(body):
    root = etree.fromstring(f'<w:document xmlns:w="{W}"><w:body>{body}</w:body></w:document>'.encode("utf-8"))
    return BodyParser(root).parse()


class TestBodyParser:
    """Test cases for BodyParser."""

    def test_paragraph_with_formatting(self):
        tree = _parse(
            '<w:p><w:pPr><w:pStyle w:val="Title"/><w:jc w:val="center"/></w:pPr>'
            '<w:r><w:rPr><w:rFonts w:ascii="Arial"/><w:b/><w:i w:val="0"/><w:sz w:val="24"/>'
            '<w:u w:val="single"/></w:rPr><w:t>Hello</w:t></w:r></w:p>'
        )
        paragraph = tree[0]
        assert isinstance(paragraph, Paragraph)
        assert paragraph.style_id == "Title"
        assert paragraph.alignment == Alignment.CENTER
        run = paragraph.runs[0]
        assert run.text == "Hello"
        assert run.bold and not run.italic and run.underline
        assert run.font_size == 12
        assert run.font_family == "Arial"

    def test_tabs_and_breaks(self):
        tree = _parse('<w:p><w:r><w:t>a</w:t><w:tab/><w:t>b</w:t><w:br/><w:t>c</w:t></w:r></w:p>')
        assert tree[0].get_text() == "a\tb\nc"

    def test_table(self):
        tree = _parse(
            '<w:tbl><w:tr><w:tc><w:p><w:r><w:t>A</w:t></w:r></w:p></w:tc>'
            '<w:tc><w:p><w:r><w:t>B</w:t></w:r></w:p></w:tc></w:tr></w:tbl>'
            '<w:p><w:r><w:t>after</w:t></w:r></w:p>'
        )
        assert len(tree) == 2
        table = tree[0]
        assert isinstance(table, Table)
        assert [cell.get_text() for cell in table.rows[0].cells] == ["A", "B"]

    def test_missing_body(self):
        root = etree.fromstring(f'<w:document xmlns:w="{W}"/>'.encode("utf-8"))
        assert len(BodyParser(root).parse()) == 0
