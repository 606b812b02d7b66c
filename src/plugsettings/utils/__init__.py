"""Common utility functions and helpers for the plugsettings package."""

from plugsettings.utils.file import ensure_directory_exists, read_text_if_exists, replace_text
from plugsettings.utils.purge import deep_purge

__all__ = [
    "deep_purge",
    "ensure_directory_exists",
    "read_text_if_exists",
    "replace_text",
]
