"""
Style model classes.

A StyleDefinition wraps one ``w:style`` element. The element is the
formatting payload: it is never interpreted beyond identity and
inheritance, only copied. StyleCollection keeps the ordered set of
definitions of one styles part and guards styleId uniqueness.
"""

import copy
import logging
from typing import Dict, Iterable, Iterator, List, NamedTuple, Optional, Set

from lxml import etree

from ..exceptions import StyleError
from ..utils.xml_utils import W_NS, w, w_val

logger = logging.getLogger(__name__)


def _canonical(element: etree._Element) -> bytes:
    # Exclusive c14n ignores namespace declarations inherited from the host part.
    return etree.tostring(element, method="c14n", exclusive=True)


class StyleInfo(NamedTuple):
    """Listing row for a single style."""

    style_id: str
    name: str
    type: str


class StyleDefinition:
    """A single style definition backed by its ``w:style`` element."""

    def __init__(self, element: etree._Element):
        if element.tag != w("style"):
            raise StyleError("Not a style element", element.tag)
        self.element = element

    @classmethod
    def create(cls, style_id: str, name: Optional[str] = None, style_type: str = "paragraph",
               based_on: Optional[str] = None) -> "StyleDefinition":
        """
        Create a new, property-less style definition.

        Args:
            style_id: Style identifier
            name: Display name (defaults to the identifier)
            style_type: paragraph, character, table or numbering
            based_on: Optional parent style identifier

        Returns:
            New StyleDefinition
        """
        element = etree.Element(w("style"), nsmap={"w": W_NS})
        element.set(w("type"), style_type)
        element.set(w("styleId"), style_id)
        name_el = etree.SubElement(element, w("name"))
        name_el.set(w("val"), name if name is not None else style_id)
        if based_on:
            based_el = etree.SubElement(element, w("basedOn"))
            based_el.set(w("val"), based_on)
        return cls(element)

    @property
    def style_id(self) -> Optional[str]:
        return w_val(self.element, "styleId")

    @property
    def name(self) -> Optional[str]:
        return w_val(self.element.find(w("name")))

    @property
    def style_type(self) -> Optional[str]:
        return w_val(self.element, "type")

    @property
    def based_on(self) -> Optional[str]:
        return w_val(self.element.find(w("basedOn")))

    def copy(self) -> "StyleDefinition":
        """Return a deep copy that shares nothing with this definition."""
        return StyleDefinition(copy.deepcopy(self.element))

    def to_info(self) -> StyleInfo:
        return StyleInfo(self.style_id or "", self.name or "", self.style_type or "")

    def canonical(self) -> bytes:
        return _canonical(self.element)

    def __eq__(self, other):
        if not isinstance(other, StyleDefinition):
            return NotImplemented
        return self.canonical() == other.canonical()

    def __hash__(self):
        return hash(self.canonical())

    def __repr__(self):
        return f"StyleDefinition(style_id={self.style_id!r}, name={self.name!r}, type={self.style_type!r})"


class StyleCollection:
    """
    Ordered collection of style definitions.

    Insertion order is preserved. No two entries share a styleId; styles
    without an id are kept but do not take part in the uniqueness check.
    """

    def __init__(self, styles: Optional[Iterable[StyleDefinition]] = None):
        self._styles: List[StyleDefinition] = []
        for style in styles or ():
            self.add(style)

    def add(self, style: StyleDefinition) -> StyleDefinition:
        """
        Append a style definition.

        Raises:
            StyleError: If a style with the same id is already present
        """
        style_id = style.style_id
        if style_id is not None and self.get_by_id(style_id) is not None:
            raise StyleError("Duplicate style id", style_id)
        self._styles.append(style)
        return style

    def extend(self, styles: Iterable[StyleDefinition]) -> None:
        for style in styles:
            self.add(style)

    def get_by_id(self, style_id: str) -> Optional[StyleDefinition]:
        for style in self._styles:
            if style.style_id == style_id:
                return style
        return None

    def remove_ids(self, style_ids: Set[str]) -> int:
        """
        Remove every style whose id is in ``style_ids``; return the number removed.

        A style without an id matches the empty key ``""``.
        """
        kept = [s for s in self._styles if (s.style_id or "") not in style_ids]
        removed = len(self._styles) - len(kept)
        self._styles = kept
        return removed

    def remove_where(self, predicate) -> List[StyleDefinition]:
        """Remove every style matching ``predicate``; return the removed styles in order."""
        removed = [s for s in self._styles if predicate(s)]
        if removed:
            self._styles = [s for s in self._styles if not predicate(s)]
        return removed

    def clear(self) -> None:
        self._styles = []

    def ids(self) -> List[str]:
        return [s.style_id for s in self._styles if s.style_id is not None]

    def by_id(self) -> Dict[str, StyleDefinition]:
        return {s.style_id: s for s in self._styles if s.style_id is not None}

    def __iter__(self) -> Iterator[StyleDefinition]:
        return iter(list(self._styles))

    def __len__(self) -> int:
        return len(self._styles)

    def __getitem__(self, index: int) -> StyleDefinition:
        return self._styles[index]

    def __contains__(self, style_id: object) -> bool:
        return isinstance(style_id, str) and self.get_by_id(style_id) is not None

    def __repr__(self):
        return f"StyleCollection({len(self._styles)} styles)"


class _ElementBlock:
    """Opaque metadata block wrapping one XML element."""

    tag: str = ""

    def __init__(self, element: etree._Element):
        if self.tag and element.tag != w(self.tag):
            raise StyleError(f"Expected w:{self.tag} element", element.tag)
        self.element = element

    def copy(self):
        return type(self)(copy.deepcopy(self.element))

    def __eq__(self, other):
        if type(other) is not type(self):
            return NotImplemented
        return _canonical(self.element) == _canonical(other.element)

    def __hash__(self):
        return hash(_canonical(self.element))


class DocumentDefaults(_ElementBlock):
    """Document-wide run/paragraph defaults (``w:docDefaults``)."""

    tag = "docDefaults"


class LatentStyleSettings(_ElementBlock):
    """Latent style exceptions (``w:latentStyles``)."""

    tag = "latentStyles"


class NumberingDefinitions(_ElementBlock):
    """Root of a numbering part (``w:numbering``), copied wholesale between documents."""

    tag = "numbering"
