"""
Single property modifiers (sprms).

A grpprl is a packed list of sprms, each a 16-bit opcode followed by an
operand whose size is encoded in the opcode's top three bits (spra).
Only the paragraph and character properties the normalizer keeps are
interpreted; every other sprm is skipped by size.
"""

import logging
import struct
from dataclasses import dataclass, replace
from typing import Iterator, Optional, Tuple

logger = logging.getLogger(__name__)

# Paragraph sprms
SPRM_P_ISTD = 0x4600
SPRM_P_JC80 = 0x2403
SPRM_P_JC = 0x2461
SPRM_P_FINTABLE = 0x2416
SPRM_P_FTTP = 0x2417
SPRM_P_ITAP = 0x6649
SPRM_P_DTAP = 0x664A
SPRM_P_FINNERTABLECELL = 0x244B
SPRM_P_FINNERTTP = 0x244C
SPRM_P_CHGTABS = 0xC615

# Character sprms
SPRM_C_FBOLD = 0x0835
SPRM_C_FITALIC = 0x0836
SPRM_C_KUL = 0x2A3E
SPRM_C_HPS = 0x4A43
SPRM_C_RGFTC0 = 0x4A4F
SPRM_C_ISTD = 0x4A30

# Table sprms with a two-byte length prefix
SPRM_T_DEFTABLE = 0xD608
SPRM_T_DEFTABLE10 = 0xD606

DEFAULT_HALF_POINTS = 20

TOGGLE_SAME = 0x80
TOGGLE_OPPOSITE = 0x81

_FIXED_SIZES = {0: 1, 1: 1, 2: 2, 3: 4, 4: 2, 5: 2, 7: 3}


def operand_size(sprm: int, grpprl: bytes, pos: int) -> int:
    """
    Get the operand size of ``sprm`` whose operand starts at ``pos``.

    Returns:
        Number of operand bytes (including any length prefix)
    """
    spra = sprm >> 13
    if spra in _FIXED_SIZES:
        return _FIXED_SIZES[spra]

    if sprm in (SPRM_T_DEFTABLE, SPRM_T_DEFTABLE10):
        if pos + 2 > len(grpprl):
            return len(grpprl) - pos
        cb = struct.unpack_from("<H", grpprl, pos)[0]
        return cb + 1

    if pos >= len(grpprl):
        return 0
    cb = grpprl[pos]
    if sprm == SPRM_P_CHGTABS and cb == 255:
        return _chgtabs_size(grpprl, pos)
    return cb + 1


def _chgtabs_size(grpprl: bytes, pos: int) -> int:
    # PChgTabsDelClose (count, deletions, close tolerances) then PChgTabsAdd (count, positions, descriptors)
    cursor = pos + 1
    if cursor >= len(grpprl):
        return len(grpprl) - pos
    deleted = grpprl[cursor]
    cursor += 1 + deleted * 4
    if cursor >= len(grpprl):
        return len(grpprl) - pos
    added = grpprl[cursor]
    cursor += 1 + added * 3
    return cursor - pos


def iter_sprms(grpprl: bytes) -> Iterator[Tuple[int, bytes]]:
    """
    Iterate over the sprms of a grpprl.

    Yields:
        Tuples of (opcode, operand bytes). A truncated trailing sprm ends
        the iteration.
    """
    pos = 0
    length = len(grpprl)
    while pos + 2 <= length:
        sprm = struct.unpack_from("<H", grpprl, pos)[0]
        pos += 2
        size = operand_size(sprm, grpprl, pos)
        if size < 0 or pos + size > length:
            logger.debug(f"Truncated sprm 0x{sprm:04X} at offset {pos - 2}")
            return
        yield sprm, grpprl[pos:pos + size]
        pos += size


def _u8(operand: bytes) -> int:
    return operand[0] if operand else 0


def _u16(operand: bytes) -> int:
    return struct.unpack_from("<H", operand)[0] if len(operand) >= 2 else 0


def _i32(operand: bytes) -> int:
    return struct.unpack_from("<i", operand)[0] if len(operand) >= 4 else 0


@dataclass(frozen=True)
class ParagraphProperties:
    """Paragraph properties relevant to normalization."""

    justification: int = 0
    justification_set: bool = False
    in_table: bool = False
    ttp: bool = False
    itap: int = 0
    inner_cell: bool = False
    inner_ttp: bool = False
    istd: Optional[int] = None

    def apply(self, grpprl: bytes) -> "ParagraphProperties":
        """Return a copy with the sprms of ``grpprl`` applied."""
        values = {}
        for sprm, operand in iter_sprms(grpprl):
            if sprm in (SPRM_P_JC80, SPRM_P_JC):
                values["justification"] = _u8(operand)
                values["justification_set"] = True
            elif sprm == SPRM_P_FINTABLE:
                values["in_table"] = _u8(operand) != 0
            elif sprm == SPRM_P_FTTP:
                values["ttp"] = _u8(operand) != 0
            elif sprm == SPRM_P_ITAP:
                values["itap"] = _i32(operand)
            elif sprm == SPRM_P_DTAP:
                values["itap"] = max(0, values.get("itap", self.itap) + _i32(operand))
            elif sprm == SPRM_P_FINNERTABLECELL:
                values["inner_cell"] = _u8(operand) != 0
            elif sprm == SPRM_P_FINNERTTP:
                values["inner_ttp"] = _u8(operand) != 0
            elif sprm == SPRM_P_ISTD:
                values["istd"] = _u16(operand)
        return replace(self, **values) if values else self


def _toggle(operand: bytes, current: bool) -> bool:
    value = _u8(operand)
    if value == TOGGLE_SAME:
        return current
    if value == TOGGLE_OPPOSITE:
        return not current
    return value != 0


@dataclass(frozen=True)
class CharacterProperties:
    """
    Character properties relevant to normalization.

    ``half_points`` and ``font_index`` stay None until some style or
    direct formatting sets them.
    """

    bold: bool = False
    italic: bool = False
    underline: int = 0
    half_points: Optional[int] = None
    font_index: Optional[int] = None
    istd: Optional[int] = None

    def apply(self, grpprl: bytes, toggle_base: Optional["CharacterProperties"] = None) -> "CharacterProperties":
        """
        Return a copy with the sprms of ``grpprl`` applied.

        Args:
            grpprl: Character sprms
            toggle_base: Properties that toggle operands 0x80/0x81 refer to
                (defaults to the properties being modified)
        """
        base = toggle_base if toggle_base is not None else self
        values = {}
        for sprm, operand in iter_sprms(grpprl):
            if sprm == SPRM_C_FBOLD:
                values["bold"] = _toggle(operand, base.bold)
            elif sprm == SPRM_C_FITALIC:
                values["italic"] = _toggle(operand, base.italic)
            elif sprm == SPRM_C_KUL:
                values["underline"] = _u8(operand)
            elif sprm == SPRM_C_HPS:
                values["half_points"] = _u16(operand)
            elif sprm == SPRM_C_RGFTC0:
                values["font_index"] = _u16(operand)
            elif sprm == SPRM_C_ISTD:
                values["istd"] = _u16(operand)
        return replace(self, **values) if values else self


def character_style_index(grpprl: bytes) -> Optional[int]:
    """Return the character style (sprmCIstd) a grpprl applies, if any."""
    istd = None
    for sprm, operand in iter_sprms(grpprl):
        if sprm == SPRM_C_ISTD:
            istd = _u16(operand)
    return istd
