"""Exceptions raised by Marknote.

Expected filesystem failures are returned as data by the note and image
operations. These exceptions cover configuration and wiring mistakes only.
"""


class MarknoteError(Exception):
    """Base class for Marknote errors."""


class ConfigError(MarknoteError):
    """Raised when configuration values are invalid."""


class RootNotFoundError(MarknoteError):
    """Raised when a notes root is required but missing or not a directory."""
