"""Error classes for jsontree-validate.

This module provides:
- ValidatorError: Base exception class for everything raised by the package
- ConfigError: Invalid settings
- SchemaLoadError, RegexCompileError: Fatal schema setup failures
- ParseError: A single data file could not be read or parsed
"""

from __future__ import annotations

INVALID_JSON = "Invalid JSON"


class ValidatorError(Exception):
    """Base exception for all jsontree-validate errors."""

    pass


class ConfigError(ValidatorError):
    """Raised when settings are invalid."""

    pass


class SchemaLoadError(ValidatorError):
    """Raised when the schema documents cannot be loaded or compiled.

    Aborts the run before any data file is processed.
    """

    pass


class RegexCompileError(SchemaLoadError):
    """Raised when a schema pattern is not a valid regular expression."""

    def __init__(self, pattern: str, reason: str) -> None:
        super().__init__(f"invalid regular expression {pattern!r}: {reason}")
        self.pattern = pattern


class ParseError(ValidatorError):
    """Raised when a data file cannot be read or parsed.

    The message is always ``"Invalid JSON"``, whatever the file format or
    underlying failure.
    """

    def __init__(self, path: str) -> None:
        super().__init__(f"{INVALID_JSON}: {path}")
        self.path = path
        self.message = INVALID_JSON
