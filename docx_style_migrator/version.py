"""Version information for DOCX Style Migrator."""

__version__ = "1.0.0"
