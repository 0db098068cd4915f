"""
Style selection parsing.

Turns raw selection values (comma-separated keys, key files, the ``*``
wildcard, yes/no flags) into the inputs the migrator operations take.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Optional, Tuple, Union

from .exceptions import InvalidSelectionError, WildcardNotAllowedError

logger = logging.getLogger(__name__)

WILDCARD = "*"

TRUE_VALUES = ("true", "y", "yes")
FALSE_VALUES = ("false", "n", "no")


@dataclass(frozen=True)
class StyleSelection:
    """A set of style keys, or every style when ``wildcard`` is set."""

    keys: Tuple[str, ...] = field(default_factory=tuple)
    wildcard: bool = False

    @property
    def is_empty(self) -> bool:
        return not self.wildcard and not self.keys


def split_keys(values: Union[str, Iterable[str]]) -> List[str]:
    """Split comma-separated values into trimmed, non-empty, de-duplicated keys in first-seen order."""
    if isinstance(values, str):
        values = [values]
    keys: List[str] = []
    seen = set()
    for value in values:
        if value is None:
            continue
        for token in value.split(","):
            token = token.strip()
            if token and token not in seen:
                seen.add(token)
                keys.append(token)
    return keys


def parse_style_selection(values: Union[str, Iterable[str]], allow_wildcard: bool = True) -> StyleSelection:
    """
    Parse raw selection values.

    Args:
        values: Raw values, each holding one or more comma-separated keys
        allow_wildcard: Whether ``*`` may select every style

    Returns:
        Parsed selection; the wildcard wins over explicit keys

    Raises:
        WildcardNotAllowedError: If ``*`` is given where it is not allowed
    """
    keys = split_keys(values)
    if WILDCARD in keys:
        if not allow_wildcard:
            raise WildcardNotAllowedError("The '*' wildcard is not allowed for this operation")
        return StyleSelection(wildcard=True)
    return StyleSelection(keys=tuple(keys))


def read_style_keys(path: Union[str, Path]) -> List[str]:
    """
    Read style keys from a UTF-8 text file, one or more comma-separated keys per line.

    Args:
        path: Key file

    Returns:
        Keys in first-seen order
    """
    with open(path, "r", encoding="utf-8") as handle:
        keys = split_keys(handle.read().splitlines())
    logger.debug(f"Read {len(keys)} style keys from {path}")
    return keys


def require_keys(selection: StyleSelection) -> StyleSelection:
    """
    Reject a selection that names no style.

    Raises:
        InvalidSelectionError: If the selection is empty
    """
    if selection.is_empty:
        raise InvalidSelectionError("At least one style key is required")
    return selection


def parse_flag(value: Optional[str], default: bool) -> bool:
    """Parse a yes/no flag (true/y/yes, false/n/no, any case); anything else gives ``default``."""
    if value is None:
        return default
    lowered = value.strip().lower()
    if lowered in TRUE_VALUES:
        return True
    if lowered in FALSE_VALUES:
        return False
    return default
