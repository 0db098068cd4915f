"""
Style handling for DOCX Style Migrator.
"""

from .style_graph import StyleGraphEngine, normalize_key

__all__ = ["StyleGraphEngine", "normalize_key"]
