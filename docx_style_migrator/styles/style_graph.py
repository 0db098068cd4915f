"""
Style graph engine.

Resolves, collects, transfers and removes style definitions between two
loaded packages, following ``basedOn`` inheritance chains and carrying
numbering definitions and document-wide style metadata along. The engine
keeps no state between calls; every operation works on the packages it
is given and only the destination is ever mutated.
"""

import logging
from collections import OrderedDict
from typing import Dict, Iterable, List, Optional

from ..exceptions import InvalidSelectionError, StyleNotFoundError
from ..models.style import StyleCollection, StyleDefinition, StyleInfo
from ..package import StylePackage

logger = logging.getLogger(__name__)


def normalize_key(key: str) -> str:
    return key.strip().lower()


class StyleGraphEngine:
    """Operations over the style graphs of loaded packages."""

    def lookup_style(self, styles: StyleCollection, key: str) -> Optional[StyleDefinition]:
        """
        Resolve a style key, or return None.

        The key is trimmed, then matched against style ids exactly and,
        failing that, against display names case-insensitively.
        """
        wanted = key.strip()
        style = styles.get_by_id(wanted)
        if style is not None:
            return style

        lowered = wanted.lower()
        for candidate in styles:
            if candidate.name is not None and candidate.name.lower() == lowered:
                return candidate
        return None

    def find_style(self, styles: StyleCollection, key: str) -> StyleDefinition:
        """
        Resolve a style key by id, then by display name.

        Args:
            styles: Collection to search
            key: Style id or display name

        Returns:
            Matching style definition

        Raises:
            StyleNotFoundError: If nothing matches
        """
        style = self.lookup_style(styles, key)
        if style is None:
            raise StyleNotFoundError(key.strip())
        return style

    def collect_styles(self, styles: StyleCollection, keys: Iterable[str],
                       include_dependencies: bool = True) -> "OrderedDict[str, StyleDefinition]":
        """
        Collect deep copies of the requested styles.

        Args:
            styles: Source collection
            keys: Style ids or display names
            include_dependencies: Whether to include ``basedOn`` parents recursively

        Returns:
            Ordered mapping of style id to copied definition; the first
            occurrence of an id wins and styles without an id are keyed ``""``

        Raises:
            StyleNotFoundError: If a key resolves to nothing
        """
        collected: "OrderedDict[str, StyleDefinition]" = OrderedDict()
        for key in keys:
            self._collect(styles, self.find_style(styles, key), include_dependencies, collected)
        logger.debug(f"Collected {len(collected)} styles: {', '.join(collected)}")
        return collected

    def _collect(self, styles: StyleCollection, style: StyleDefinition, include_dependencies: bool,
                 collected: Dict[str, StyleDefinition]) -> None:
        # The visited set doubles as the cycle guard
        while style is not None:
            style_id = style.style_id or ""
            if style_id in collected:
                return
            collected[style_id] = style.copy()
            if not include_dependencies or style.based_on is None:
                return
            style = self.lookup_style(styles, style.based_on)

    def transfer_selected(self, source: StylePackage, destination: StylePackage, keys: Iterable[str],
                          copy_numbering: bool = True, include_dependencies: bool = True) -> List[str]:
        """
        Copy selected styles (and optionally their parents) into the destination.

        Destination styles with a collected id are replaced; the collected
        styles are appended in collection order. Repeating the transfer
        yields the same destination.

        Returns:
            Ids of the transferred styles

        Raises:
            MissingStyleDefinitionsError: If the source has no styles part
            StyleNotFoundError: If a key resolves to nothing
        """
        source_styles = source.require_styles()
        collected = self.collect_styles(source_styles, keys, include_dependencies)

        destination_styles = destination.ensure_styles()
        destination_styles.remove_ids(set(collected))
        destination_styles.extend(collected.values())

        self.sync_defaults(source, destination)
        if copy_numbering:
            self.copy_numbering(source, destination)

        logger.info(f"Transferred {len(collected)} styles")
        return list(collected)

    def replace_all(self, source: StylePackage, destination: StylePackage, copy_numbering: bool = True) -> int:
        """
        Replace the destination's styles with copies of all source styles.

        Returns:
            Number of styles copied

        Raises:
            MissingStyleDefinitionsError: If the source has no styles part
        """
        source_styles = source.require_styles()
        destination_styles = destination.ensure_styles()
        destination_styles.clear()
        for style in source_styles:
            destination_styles.add(style.copy())

        self.sync_defaults(source, destination)
        if copy_numbering:
            self.copy_numbering(source, destination)

        logger.info(f"Replaced destination styles with {len(destination_styles)} source styles")
        return len(destination_styles)

    def sync_defaults(self, source: StylePackage, destination: StylePackage) -> None:
        """Overwrite destination document defaults and latent styles with the source's, where defined."""
        if source.doc_defaults is not None:
            destination.doc_defaults = source.doc_defaults.copy()
        if source.latent_styles is not None:
            destination.latent_styles = source.latent_styles.copy()

    def copy_numbering(self, source: StylePackage, destination: StylePackage) -> bool:
        """
        Copy numbering definitions wholesale.

        Returns:
            True if numbering was copied, False when the source has none
        """
        if source.numbering is None:
            return False
        destination.set_numbering(source.numbering.copy())
        logger.debug("Copied numbering definitions")
        return True

    def remove_styles(self, package: StylePackage, keys: Iterable[str]) -> int:
        """
        Remove every style whose id or display name matches a key.

        Matching is on trimmed, lower-cased values.

        Returns:
            Number of styles removed

        Raises:
            InvalidSelectionError: If no non-empty key is given
            MissingStyleDefinitionsError: If the package has no styles part
        """
        wanted = {normalize_key(key) for key in keys if key and key.strip()}
        if not wanted:
            raise InvalidSelectionError("At least one style key is required for removal")

        styles = package.require_styles()

        def matches(style: StyleDefinition) -> bool:
            return any(value is not None and normalize_key(value) in wanted
                       for value in (style.style_id, style.name))

        removed = styles.remove_where(matches)
        logger.info(f"Removed {len(removed)} styles")
        return len(removed)

    def list_styles(self, package: StylePackage) -> List[StyleInfo]:
        """
        List styles sorted by id, case-insensitively; ties keep document order.

        Raises:
            MissingStyleDefinitionsError: If the package has no styles part
        """
        infos = [style.to_info() for style in package.require_styles()]
        return sorted(infos, key=lambda info: info.style_id.lower())

