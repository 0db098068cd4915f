"""
Tests for the styles part parser.
"""

import pytest
from lxml import etree

from docx_style_migrator.models.style import StyleCollection, StyleDefinition
from docx_style_migrator.parser.styles_parser import StylesParser, create_styles_root
from docx_style_migrator.utils.xml_utils import w

from tests.builders import SAMPLE_STYLES, style, styles_xml


def _root(body):
    return etree.fromstring(styles_xml(body).encode("utf-8"))


class TestStylesParser:
    """Test cases for StylesParser."""

    def test_parse_sample(self):
        """Styles, document defaults and latent styles are split out."""
        styles, doc_defaults, latent = StylesParser(_root(SAMPLE_STYLES)).parse()
        assert styles.ids() == ["Normal", "Heading1", "Heading2", "ListBullet", "DefaultParagraphFont",
                                "TableGrid"]
        assert doc_defaults is not None
        assert latent is not None

    def test_parse_without_metadata(self):
        styles, doc_defaults, latent = StylesParser(_root(style("Normal"))).parse()
        assert len(styles) == 1
        assert doc_defaults is None
        assert latent is None

    def test_duplicate_id_keeps_first(self, caplog):
        """A repeated style id keeps the first definition and logs a warning."""
        body = style("Normal", "first") + style("Normal", "second")
        styles, _, _ = StylesParser(_root(body)).parse()
        assert len(styles) == 1
        assert styles[0].name == "first"
        assert "Duplicate style id" in caplog.text

    def test_rejects_other_roots(self):
        with pytest.raises(ValueError):
            StylesParser(etree.Element(w("numbering")))

    def test_update_orders_managed_children(self):
        """Defaults and latent styles come first, then styles; unmanaged children follow."""
        root = _root(SAMPLE_STYLES + '<w:extra/>')
        parser = StylesParser(root)
        styles, doc_defaults, latent = parser.parse()
        styles.remove_ids({"Heading2"})
        styles.add(StyleDefinition.create("Quote"))

        parser.update(styles, doc_defaults, latent)
        local_names = [etree.QName(child).localname for child in root]
        assert local_names[:2] == ["docDefaults", "latentStyles"]
        assert local_names[-1] == "extra"
        ids = [child.get(w("styleId")) for child in root.findall(w("style"))]
        assert ids == ["Normal", "Heading1", "ListBullet", "DefaultParagraphFont", "TableGrid", "Quote"]

    def test_update_keeps_root_namespaces(self):
        """Root attributes and namespace declarations survive an update."""
        root = _root(style("Normal"))
        StylesParser(root).update(StyleCollection(), None, None)
        assert len(root) == 0
        assert "w14" in root.nsmap
        assert root.get("{http://schemas.openxmlformats.org/markup-compatibility/2006}Ignorable") == "w14"

    def test_create_styles_root(self):
        root = create_styles_root()
        assert root.tag == w("styles")
        assert len(root) == 0
