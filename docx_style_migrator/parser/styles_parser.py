"""
Styles part parser.

Splits a ``w:styles`` root into its style collection, document defaults
and latent style settings, and writes a (possibly modified) model back
into the same root so that root attributes and namespace declarations
are kept.
"""

import logging
from typing import Optional, Tuple

from lxml import etree

from ..models.style import DocumentDefaults, LatentStyleSettings, StyleCollection, StyleDefinition
from ..utils.xml_utils import R_NS, W_NS, w

logger = logging.getLogger(__name__)

_MANAGED_TAGS = (w("docDefaults"), w("latentStyles"), w("style"))


def create_styles_root() -> etree._Element:
    """Create an empty ``w:styles`` root for a package without a styles part."""
    return etree.Element(w("styles"), nsmap={"w": W_NS, "r": R_NS})


class StylesParser:
    """Parser for the ``word/styles.xml`` part."""

    def __init__(self, root: etree._Element):
        if root.tag != w("styles"):
            raise ValueError(f"Not a styles part root: {root.tag}")
        self.root = root

    def parse(self) -> Tuple[StyleCollection, Optional[DocumentDefaults], Optional[LatentStyleSettings]]:
        """
        Parse the styles part.

        Returns:
            Tuple of (styles, document defaults, latent style settings)
        """
        doc_defaults = None
        latent_styles = None
        collection = StyleCollection()

        for child in self.root:
            if child.tag == w("docDefaults") and doc_defaults is None:
                doc_defaults = DocumentDefaults(child)
            elif child.tag == w("latentStyles") and latent_styles is None:
                latent_styles = LatentStyleSettings(child)
            elif child.tag == w("style"):
                style = StyleDefinition(child)
                if style.style_id is not None and style.style_id in collection:
                    logger.warning(f"Duplicate style id {style.style_id!r} ignored")
                    continue
                collection.add(style)

        logger.debug(f"Parsed {len(collection)} styles")
        return collection, doc_defaults, latent_styles

    def update(self, styles: StyleCollection, doc_defaults: Optional[DocumentDefaults],
               latent_styles: Optional[LatentStyleSettings]) -> etree._Element:
        """
        Write the model back into the root, replacing all managed children.

        Children the model does not manage (extension lists and the like)
        are kept after the styles.

        Returns:
            The updated root element
        """
        for child in list(self.root):
            if child.tag in _MANAGED_TAGS:
                self.root.remove(child)

        managed = []
        if doc_defaults is not None:
            managed.append(doc_defaults.element)
        if latent_styles is not None:
            managed.append(latent_styles.element)
        managed.extend(style.element for style in styles)

        for index, element in enumerate(managed):
            self.root.insert(index, element)

        logger.debug(f"Wrote {len(styles)} styles to styles part")
        return self.root
