"""
File Information Block (FIB) of a Word 97-2003 ``WordDocument`` stream.
"""

import logging
import struct
from dataclasses import dataclass, field
from typing import List, Tuple

from ..exceptions import LegacyFormatError

logger = logging.getLogger(__name__)

WORD_IDENT = 0xA5EC
MIN_NFIB = 0x00C1  # Word 97

FLAG_ENCRYPTED = 0x0100
FLAG_WHICH_TABLE_STREAM = 0x0200

FIB_BASE_SIZE = 0x20

# Indices into the fc/lcb pair blob
FC_STSHF = 1
FC_PLCF_BTE_CHPX = 12
FC_PLCF_BTE_PAPX = 13
FC_STTBF_FFN = 15
FC_CLX = 33

# Indices into fibRgLw
LW_CCP_TEXT = 3


@dataclass
class Fib:
    """Parsed FIB: the flags and lengths the reader needs, plus every fc/lcb pair."""

    ident: int
    nfib: int
    flags: int
    ccp_text: int
    fc_lcb: List[Tuple[int, int]] = field(default_factory=list)

    @property
    def encrypted(self) -> bool:
        return bool(self.flags & FLAG_ENCRYPTED)

    @property
    def table_stream_name(self) -> str:
        return "1Table" if self.flags & FLAG_WHICH_TABLE_STREAM else "0Table"

    def pair(self, index: int) -> Tuple[int, int]:
        """Return (fc, lcb) for a pair index, (0, 0) when the FIB is too short."""
        if index < len(self.fc_lcb):
            return self.fc_lcb[index]
        return 0, 0

    @classmethod
    def parse(cls, data: bytes) -> "Fib":
        """
        Parse the FIB at the start of a ``WordDocument`` stream.

        Raises:
            LegacyFormatError: If the stream is not a Word 97 or later
                document, or is encrypted
        """
        if len(data) < FIB_BASE_SIZE + 2:
            raise LegacyFormatError("WordDocument stream too short for a FIB")

        ident, nfib = struct.unpack_from("<HH", data, 0)
        flags = struct.unpack_from("<H", data, 0x0A)[0]
        if ident != WORD_IDENT:
            raise LegacyFormatError("Not a Word binary document", f"wIdent=0x{ident:04X}")
        if nfib < MIN_NFIB:
            raise LegacyFormatError("Word documents older than Word 97 are not supported", f"nFib=0x{nfib:04X}")
        if flags & FLAG_ENCRYPTED:
            raise LegacyFormatError("Encrypted Word documents are not supported")

        pos = FIB_BASE_SIZE
        csw = struct.unpack_from("<H", data, pos)[0]
        pos += 2 + csw * 2
        if len(data) < pos + 2:
            raise LegacyFormatError("Truncated FIB")

        cslw = struct.unpack_from("<H", data, pos)[0]
        pos += 2
        if len(data) < pos + cslw * 4 + 2:
            raise LegacyFormatError("Truncated FIB")
        rg_lw = struct.unpack_from(f"<{cslw}i", data, pos)
        pos += cslw * 4

        cb_rg_fc_lcb = struct.unpack_from("<H", data, pos)[0]
        pos += 2
        available = min(cb_rg_fc_lcb, (len(data) - pos) // 8)
        flat = struct.unpack_from(f"<{available * 2}I", data, pos)
        fc_lcb = list(zip(flat[0::2], flat[1::2]))

        ccp_text = rg_lw[LW_CCP_TEXT] if len(rg_lw) > LW_CCP_TEXT else 0
        fib = cls(ident=ident, nfib=nfib, flags=flags, ccp_text=max(ccp_text, 0), fc_lcb=fc_lcb)
        logger.debug(f"FIB nFib=0x{nfib:04X} ccpText={fib.ccp_text} table={fib.table_stream_name}")
        return fib
