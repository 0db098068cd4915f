"""
Tests for format detection.
"""

import pytest

from docx_style_migrator.detector import CFB_SIGNATURE, ZIP_SIGNATURE, detect_file_format, detect_format
from docx_style_migrator.exceptions import UnrecognizedFormatError, UnsupportedFormatError
from docx_style_migrator.utils.enums import DocumentFormat


class TestDetectFormat:
    """Test cases for detect_format."""

    def test_zip_signature_is_modern(self):
        """A zip local file header identifies a modern package."""
        assert detect_format(ZIP_SIGNATURE + b"\x14\x00\x06\x00") == DocumentFormat.MODERN

    def test_compound_signature_is_legacy(self):
        """The compound file magic identifies a legacy document."""
        assert detect_format(CFB_SIGNATURE) == DocumentFormat.LEGACY

    def test_signature_wins_over_extension(self):
        """Magic bytes take precedence over a misleading extension."""
        assert detect_format(CFB_SIGNATURE, "report.docx") == DocumentFormat.LEGACY
        assert detect_format(ZIP_SIGNATURE, "report.doc") == DocumentFormat.MODERN

    @pytest.mark.parametrize("filename,expected", [
        ("report.doc", DocumentFormat.LEGACY),
        ("REPORT.DOC", DocumentFormat.LEGACY),
        ("report.docx", DocumentFormat.MODERN),
        ("archive.tar.docx", DocumentFormat.MODERN),
    ])
    def test_extension_fallback(self, filename, expected):
        """Without a signature the extension decides, case-insensitively."""
        assert detect_format(b"\x00" * 8, filename) == expected

    def test_short_header_uses_extension(self):
        """A header shorter than eight bytes still falls back to the extension."""
        assert detect_format(b"PK", "short.docx") == DocumentFormat.MODERN

    def test_unrecognized(self):
        """Unknown bytes and extension raise UnrecognizedFormatError."""
        with pytest.raises(UnrecognizedFormatError):
            detect_format(b"%PDF-1.7", "file.pdf")

    def test_unrecognized_without_filename(self):
        """Unknown bytes and no filename raise UnrecognizedFormatError."""
        with pytest.raises(UnrecognizedFormatError):
            detect_format(b"garbage!")

    def test_not_allowed_format(self):
        """A detected format outside the allowed set raises UnsupportedFormatError."""
        with pytest.raises(UnsupportedFormatError):
            detect_format(CFB_SIGNATURE, "old.doc", allowed=[DocumentFormat.MODERN])


class TestDetectFileFormat:
    """Test cases for detect_file_format."""

    def test_detects_docx_file(self, sample_docx):
        """A real package on disk is detected as modern."""
        assert detect_file_format(sample_docx) == DocumentFormat.MODERN

    def test_detects_doc_file(self, sample_doc):
        """A compound file on disk is detected as legacy."""
        assert detect_file_format(sample_doc) == DocumentFormat.LEGACY

    def test_empty_file_uses_own_extension(self, temp_dir):
        """An empty file falls back to its own extension."""
        path = temp_dir / "empty.doc"
        path.write_bytes(b"")
        assert detect_file_format(path) == DocumentFormat.LEGACY

    def test_advisory_filename_overrides_path_name(self, temp_dir):
        """An explicit filename is used instead of the path's name."""
        path = temp_dir / "upload.bin"
        path.write_bytes(b"\x00" * 16)
        assert detect_file_format(path, filename="original.docx") == DocumentFormat.MODERN

    def test_missing_file(self, temp_dir):
        """A missing file raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            detect_file_format(temp_dir / "missing.docx")
