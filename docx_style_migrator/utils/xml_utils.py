"""
XML utilities for DOCX packages.

Namespace constants, qualified-name helpers and the parse/serialize pair
used for every XML part. Parts are handled with lxml so that namespace
declarations (including those only referenced from ``mc:Ignorable``)
survive a load/save cycle.
"""

import re
from typing import Optional

from lxml import etree

W_NS = "http://schemas.openxmlformats.org/wordprocessingml/2006/main"
R_NS = "http://schemas.openxmlformats.org/officeDocument/2006/relationships"
PKG_REL_NS = "http://schemas.openxmlformats.org/package/2006/relationships"
CT_NS = "http://schemas.openxmlformats.org/package/2006/content-types"
XML_NS = "http://www.w3.org/XML/1998/namespace"

NAMESPACES = {
    "w": W_NS,
    "r": R_NS,
    "rels": PKG_REL_NS,
    "ct": CT_NS,
}

# Relationship types
RT_OFFICE_DOCUMENT = f"{R_NS}/officeDocument"
RT_STYLES = f"{R_NS}/styles"
RT_NUMBERING = f"{R_NS}/numbering"

# Content types
CT_RELATIONSHIPS = "application/vnd.openxmlformats-package.relationships+xml"
CT_XML = "application/xml"
CT_MAIN_DOCUMENT = "application/vnd.openxmlformats-officedocument.wordprocessingml.document.main+xml"
CT_STYLES = "application/vnd.openxmlformats-officedocument.wordprocessingml.styles+xml"
CT_NUMBERING = "application/vnd.openxmlformats-officedocument.wordprocessingml.numbering+xml"

# Characters XML 1.0 cannot carry (C0 controls except tab, LF and CR, plus
# lone surrogates and the two non-characters at the end of the BMP).
_XML_ILLEGAL = re.compile("[\x00-\x08\x0b\x0c\x0e-\x1f\ud800-\udfff\ufffe\uffff]")

_PARSER = etree.XMLParser(resolve_entities=False, no_network=True, huge_tree=True)


def w(local: str) -> str:
    """Return the Clark-notation name of a WordprocessingML element or attribute."""
    return f"{{{W_NS}}}{local}"


def w_val(element: Optional[etree._Element], attribute: str = "val") -> Optional[str]:
    """Read a ``w:``-qualified attribute, tolerating unqualified documents."""
    if element is None:
        return None
    value = element.get(w(attribute))
    if value is None:
        value = element.get(attribute)
    return value


def parse_xml(data: bytes) -> etree._Element:
    """
    Parse an XML part.

    Args:
        data: Raw part bytes

    Returns:
        Root element

    Raises:
        lxml.etree.XMLSyntaxError: If the part is not well-formed
    """
    return etree.fromstring(data, _PARSER)


def serialize_xml(element: etree._Element) -> bytes:
    """Serialize a part root the way Word writes parts (UTF-8, standalone)."""
    return etree.tostring(element, xml_declaration=True, encoding="UTF-8", standalone=True)


def xml_safe_text(text: str) -> str:
    """Drop characters that cannot appear in XML 1.0 text."""
    return _XML_ILLEGAL.sub("", text)
