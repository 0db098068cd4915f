"""Custom exceptions for DOCX Style Migrator."""

from typing import Optional


class StyleMigratorError(Exception):
    """Base exception for DOCX Style Migrator errors."""

    def __init__(self, message: str, details: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def __str__(self) -> str:
        if self.details:
            return f"{self.message}: {self.details}"
        return self.message


class FormatError(StyleMigratorError):
    """Exception raised when a file cannot be handled in its on-disk format."""

    pass


class UnsupportedFormatError(FormatError):
    """Exception raised for file types that are recognized but not allowed."""

    pass


class UnrecognizedFormatError(FormatError):
    """Exception raised when neither magic bytes nor extension identify a file."""

    pass


class LegacyFormatError(FormatError):
    """Exception raised when a legacy binary document cannot be decoded."""

    pass


class PackageError(StyleMigratorError):
    """Exception raised when a DOCX package is structurally unusable."""

    pass


class StyleError(StyleMigratorError):
    """Exception raised during style resolution or mutation."""

    pass


class MissingStyleDefinitionsError(StyleError):
    """Exception raised when a document has no style definitions part."""

    pass


class StyleNotFoundError(StyleError, KeyError):
    """Exception raised when a style key resolves to nothing."""

    def __init__(self, key: str, details: Optional[str] = None):
        super().__init__(f"Style not found: {key}", details)
        self.key = key

    def __str__(self) -> str:
        return StyleError.__str__(self)


class SelectionError(StyleMigratorError, ValueError):
    """Exception raised for invalid style selections."""

    pass


class InvalidSelectionError(SelectionError):
    """Exception raised when an operation needs at least one style key."""

    pass


class WildcardNotAllowedError(SelectionError):
    """Exception raised when the wildcard is used where it is not supported."""

    pass
