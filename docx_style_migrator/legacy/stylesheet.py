"""
Stylesheet (STSH) and font table (SttbfFfn) readers.
"""

import logging
import struct
from typing import Dict, List, Optional, Tuple

from .models import ISTD_NIL, STK_CHARACTER, STK_NUMBERING, STK_PARAGRAPH, STK_TABLE, LegacyStyle

logger = logging.getLogger(__name__)

STSHIF_SIZE = 18
STDF_BASE_SIZE = 10
FFN_NAME_OFFSET = 40


def _read_upxs(std: bytes, pos: int, count: int) -> List[bytes]:
    upxs = []
    for _ in range(count):
        if pos + 2 > len(std):
            break
        cb_upx = struct.unpack_from("<H", std, pos)[0]
        pos += 2
        upxs.append(std[pos:pos + cb_upx])
        pos += cb_upx + (cb_upx & 1)
    return upxs


def _read_name(std: bytes, pos: int) -> Tuple[str, int]:
    if pos + 2 > len(std):
        return "", pos
    cch = struct.unpack_from("<H", std, pos)[0]
    pos += 2
    raw = std[pos:pos + cch * 2]
    name = raw.decode("utf-16-le", errors="replace")
    # Name is followed by a null terminator
    return name, pos + cch * 2 + 2


def parse_stylesheet(data: bytes) -> Tuple[Dict[int, LegacyStyle], Optional[int]]:
    """
    Parse an STSH.

    Args:
        data: Stylesheet bytes from the table stream

    Returns:
        Tuple of (styles by istd, default ASCII font index)
    """
    styles: Dict[int, LegacyStyle] = {}
    if len(data) < 2 + STSHIF_SIZE:
        return styles, None

    cb_stshi = struct.unpack_from("<H", data, 0)[0]
    cstd, cb_std_base = struct.unpack_from("<HH", data, 2)
    ftc_ascii = struct.unpack_from("<H", data, 2 + 12)[0] if cb_stshi >= 14 else None

    pos = 2 + cb_stshi
    for istd in range(cstd):
        if pos + 2 > len(data):
            logger.warning(f"Stylesheet truncated after {istd} entries")
            break
        cb_std = struct.unpack_from("<H", data, pos)[0]
        pos += 2
        std = data[pos:pos + cb_std]
        pos += cb_std
        if cb_std < STDF_BASE_SIZE:
            continue

        word0, word1, word2 = struct.unpack_from("<HHH", std, 0)
        sti = word0 & 0x0FFF
        stk = word1 & 0x000F
        istd_base = word1 >> 4
        cupx = word2 & 0x000F
        istd_next = word2 >> 4

        name, upx_pos = _read_name(std, cb_std_base)
        upx_pos += upx_pos & 1
        upxs = _read_upxs(std, upx_pos, cupx)

        papx = chpx = b""
        if stk == STK_PARAGRAPH:
            papx = upxs[0][2:] if len(upxs) > 0 else b""
            chpx = upxs[1] if len(upxs) > 1 else b""
        elif stk == STK_CHARACTER:
            chpx = upxs[0] if upxs else b""
        elif stk == STK_TABLE:
            papx = upxs[1][2:] if len(upxs) > 1 else b""
            chpx = upxs[2] if len(upxs) > 2 else b""
        elif stk == STK_NUMBERING:
            papx = upxs[0][2:] if upxs else b""

        # A comma separates the primary name from its aliases
        primary = name.split(",")[0].strip() or name.strip()
        styles[istd] = LegacyStyle(
            istd=istd,
            name=primary,
            stk=stk,
            istd_base=istd_base if istd_base != istd else ISTD_NIL,
            istd_next=istd_next,
            sti=sti,
            papx=papx,
            chpx=chpx,
        )

    logger.debug(f"Parsed {len(styles)} of {cstd} stylesheet entries")
    return styles, ftc_ascii


def parse_font_table(data: bytes) -> List[str]:
    """
    Parse an SttbfFfn into font names indexed by ftc.

    Args:
        data: Font table bytes from the table stream

    Returns:
        Font names in table order
    """
    fonts: List[str] = []
    if len(data) < 4:
        return fonts

    count = struct.unpack_from("<H", data, 0)[0]
    pos = 4
    for _ in range(count):
        if pos >= len(data):
            break
        cb = data[pos]
        entry = data[pos:pos + cb + 1]
        pos += cb + 1
        raw = entry[FFN_NAME_OFFSET:]
        for end in range(0, len(raw) - 1, 2):
            if raw[end] == 0 and raw[end + 1] == 0:
                raw = raw[:end]
                break
        fonts.append(raw[:len(raw) & ~1].decode("utf-16-le", errors="replace"))
    return fonts
