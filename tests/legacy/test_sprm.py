"""
Tests for sprm decoding.
"""

import struct

from docx_style_migrator.legacy.sprm import (
    SPRM_C_FBOLD,
    SPRM_C_HPS,
    SPRM_C_ISTD,
    SPRM_P_CHGTABS,
    SPRM_P_JC,
    SPRM_T_DEFTABLE,
    CharacterProperties,
    ParagraphProperties,
    character_style_index,
    iter_sprms,
    operand_size,
)

from tests.builders import IN_CELL, ROW_END, SPRM_C_FITALIC, SPRM_P_ITAP, sprm


class TestIterSprms:
    """Test cases for sprm iteration."""

    def test_fixed_sizes(self):
        grpprl = sprm(SPRM_C_FBOLD, 1) + sprm(SPRM_C_HPS, 28) + sprm(SPRM_P_ITAP, 2)
        assert [(op, len(operand)) for op, operand in iter_sprms(grpprl)] == [
            (SPRM_C_FBOLD, 1), (SPRM_C_HPS, 2), (SPRM_P_ITAP, 4),
        ]

    def test_variable_size(self):
        """Variable operands carry a one-byte length prefix."""
        grpprl = struct.pack("<HB", 0xC601, 3) + b"abc" + sprm(SPRM_P_JC, 2)
        assert [op for op, _ in iter_sprms(grpprl)] == [0xC601, SPRM_P_JC]

    def test_table_definition_size(self):
        """sprmTDefTable has a two-byte length prefix."""
        grpprl = struct.pack("<HH", SPRM_T_DEFTABLE, 4) + b"\x00" * 3 + sprm(SPRM_P_JC, 1)
        assert operand_size(SPRM_T_DEFTABLE, grpprl, 2) == 5
        assert [op for op, _ in iter_sprms(grpprl)] == [SPRM_T_DEFTABLE, SPRM_P_JC]

    def test_tab_change_long_form(self):
        """A 255 length for sprmPChgTabs is computed from its contents."""
        operand = bytes([255, 1]) + b"\x00" * 4 + bytes([2]) + b"\x00" * 6
        grpprl = struct.pack("<H", SPRM_P_CHGTABS) + operand + sprm(SPRM_P_JC, 1)
        assert [op for op, _ in iter_sprms(grpprl)] == [SPRM_P_CHGTABS, SPRM_P_JC]

    def test_truncated(self):
        grpprl = sprm(SPRM_C_FBOLD, 1) + struct.pack("<H", SPRM_C_HPS) + b"\x01"
        assert [op for op, _ in iter_sprms(grpprl)] == [SPRM_C_FBOLD]


class TestParagraphProperties:
    """Test cases for paragraph property application."""

    def test_table_flags(self):
        cell = ParagraphProperties().apply(IN_CELL)
        assert cell.in_table and not cell.ttp
        row_end = ParagraphProperties().apply(ROW_END)
        assert row_end.in_table and row_end.ttp

    def test_justification(self):
        props = ParagraphProperties().apply(sprm(SPRM_P_JC, 3))
        assert props.justification == 3
        assert props.justification_set

    def test_no_sprms_returns_same(self):
        props = ParagraphProperties(justification=1)
        assert props.apply(b"") is props


class TestCharacterProperties:
    """Test cases for character property application."""

    def test_direct_values(self):
        props = CharacterProperties().apply(sprm(SPRM_C_FBOLD, 1) + sprm(SPRM_C_HPS, 24))
        assert props.bold
        assert props.half_points == 24

    def test_toggle_operands(self):
        """0x80 keeps and 0x81 inverts the base value."""
        base = CharacterProperties(bold=True, italic=False)
        props = base.apply(sprm(SPRM_C_FBOLD, 0x81) + sprm(SPRM_C_FITALIC, 0x80), toggle_base=base)
        assert props.bold is False
        assert props.italic is False

    def test_character_style_index(self):
        assert character_style_index(sprm(SPRM_C_ISTD, 12) + sprm(SPRM_C_FBOLD, 1)) == 12
        assert character_style_index(sprm(SPRM_C_FBOLD, 1)) is None
