"""
Pytest configuration for DOCX Style Migrator
"""

import logging
import sys
import tempfile
from pathlib import Path

import pytest

from tests.builders import SAMPLE_NUMBERING, SAMPLE_STYLES, build_docx, build_sample_doc


@pytest.fixture(autouse=True)
def configure_logging():
    """Configure logging for tests to avoid file handler issues."""
    root_logger = logging.getLogger()
    root_logger.handlers.clear()

    # Only show warnings and errors during tests
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(logging.WARNING)
    console_handler.setFormatter(logging.Formatter('%(name)s - %(levelname)s - %(message)s'))

    root_logger.addHandler(console_handler)
    root_logger.setLevel(logging.WARNING)

    yield

    root_logger.handlers.clear()


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield Path(temp_dir)


@pytest.fixture
def work_dir(temp_dir):
    """Work directory for migration temp files."""
    path = temp_dir / "work"
    path.mkdir()
    return path


@pytest.fixture
def sample_docx(temp_dir):
    """DOCX with the sample styles and numbering."""
    return build_docx(temp_dir / "template.docx", styles=SAMPLE_STYLES, numbering=SAMPLE_NUMBERING)


@pytest.fixture
def plain_docx(temp_dir):
    """DOCX with a single Normal style and no numbering."""
    styles = '<w:style w:type="paragraph" w:default="1" w:styleId="Normal"><w:name w:val="Normal"/></w:style>'
    return build_docx(temp_dir / "report.docx", styles=styles)


@pytest.fixture
def sample_doc(temp_dir):
    """Legacy .doc with a paragraph, a 2x2 table and a styled paragraph."""
    return build_sample_doc(temp_dir / "legacy.doc")
