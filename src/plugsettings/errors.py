"""Exception classes for plugin settings persistence.

The lifecycle controller never catches these; they surface to whoever
awaited ``load_settings()`` or ``save_settings()``. A persisted payload that
is not a mapping is not an error and has no exception here.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional


class SettingsError(Exception):
    """Base class for failures while reading or writing plugin settings."""

    def __init__(
        self,
        message: str,
        path: Optional[Path] = None,
        original_error: Optional[Exception] = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error message
            path: File involved in the failure, when there is one
            original_error: The exception that caused this one
        """
        super().__init__(f"{message} ({path})" if path else message)
        self.message: str = message
        self.path: Optional[Path] = path
        self.original_error: Optional[Exception] = original_error


class RetrievalError(SettingsError):
    """Raised when persisted plugin data cannot be read or decoded."""

    pass


class PersistError(SettingsError):
    """Raised when plugin data cannot be written."""

    pass


class DefaultsError(SettingsError):
    """Raised when a defaults source is missing or is not a mapping."""

    pass
