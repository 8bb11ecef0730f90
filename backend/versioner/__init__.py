"""Versioned filename resolution: find the latest report_N.xlsx and propose the next one."""

from .files.listing import DirectoryAccessError
from .files.versioning import ResolutionResult, aresolve_latest_version, resolve_latest_version

__all__ = [
    "DirectoryAccessError",
    "ResolutionResult",
    "aresolve_latest_version",
    "resolve_latest_version",
]
