"""
Exception types raised by metannot transforms.

All of them are fatal to the single requested operation: the input table is
left untouched and no partial result is produced.
"""

from typing import Iterable, List, Optional


class MetannotError(Exception):
    """Base class for metannot errors."""


class ValidationError(MetannotError, ValueError):
    """One or more required columns are missing."""

    def __init__(self, missing_columns: Iterable[str], context: Optional[str] = None):
        self.missing_columns: List[str] = list(missing_columns)
        self.context = context
        message = f"Missing required columns: {', '.join(self.missing_columns)}"
        if context:
            message = f"{context}: {message}"
        super().__init__(message)


class ConfigurationError(MetannotError, ValueError):
    """The table cannot be processed with the current configuration."""


class EmptyDataError(MetannotError, ValueError):
    """A parsed input yielded zero rows."""
