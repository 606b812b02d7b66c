"""File helpers for plugin data files."""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path
from typing import Final

logger: Final = logging.getLogger(__name__)


def ensure_directory_exists(directory: Path) -> None:
    """Create a plugin data directory if it doesn't exist.

    Args:
        directory: Path to create
    """
    if not directory.exists():
        directory.mkdir(parents=True, exist_ok=True)
        logger.debug("Created plugin data directory: %s", directory)


def read_text_if_exists(path: Path) -> str | None:
    """Read a UTF-8 data file, or return None when there is none yet."""
    if not path.exists():
        return None
    return path.read_text(encoding="utf-8")


def replace_text(path: Path, text: str) -> None:
    """Replace a data file's contents in one step.

    The text goes to a sibling temp file first, which is then renamed over
    ``path``, so readers never observe a half-written file.

    Args:
        path: Destination file
        text: Full new contents
    """
    ensure_directory_exists(path.parent)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", dir=path.parent)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            handle.write(text)
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise
