from __future__ import annotations

import logging
import os
from pathlib import Path

logger = logging.getLogger(__name__)


class DirectoryAccessError(OSError):
    """Raised when a directory cannot be listed (missing, not a directory, no permission)."""

    def __init__(self, path: Path | str, reason: str) -> None:
        super().__init__(f"Unable to scan directory {path}: {reason}")
        self.path = Path(path)
        self.reason = reason


def list_entries(directory: Path | str) -> list[str]:
    """
    Return the names of the immediate entries of `directory`, sorted lexically.

    Files and sub-directories are returned alike; nothing is recursed into.
    """
    root = Path(directory)
    try:
        names = os.listdir(root)
    except (OSError, ValueError) as e:
        # ValueError: embedded NUL in the path
        logger.warning("Unable to scan directory %s: %s", root, e)
        raise DirectoryAccessError(root, getattr(e, "strerror", None) or str(e)) from e

    names.sort()
    logger.debug("Listed %d entries under %s", len(names), root)
    return names
