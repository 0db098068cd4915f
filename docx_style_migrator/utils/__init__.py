"""
Utils module for DOCX Style Migrator.

Logging configuration, XML helpers and shared enumerations.
"""

from .logger import get_logger, setup_logging, set_log_level
from .enums import Alignment, DocumentFormat, StyleType
from .xml_utils import NAMESPACES, W_NS, parse_xml, serialize_xml, w, w_val, xml_safe_text

__all__ = [
    "get_logger",
    "setup_logging",
    "set_log_level",
    "Alignment",
    "DocumentFormat",
    "StyleType",
    "NAMESPACES",
    "W_NS",
    "parse_xml",
    "serialize_xml",
    "w",
    "w_val",
    "xml_safe_text",
]
