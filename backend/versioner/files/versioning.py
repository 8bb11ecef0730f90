from __future__ import annotations

import asyncio
import logging
import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from versioner.core.settings import get_settings
from .listing import list_entries

logger = logging.getLogger(__name__)

UNPARSED_POLICIES = ("ZERO", "EXCLUDE")


@dataclass(frozen=True)
class ResolutionResult:
    filename: str
    version: int
    recommended_next_name: str
    next_version: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        """Plain record with camelCase keys; nextVersion only when a candidate existed."""
        data: Dict[str, Any] = {
            "filename": self.filename,
            "version": self.version,
            "recommendedNextName": self.recommended_next_name,
        }
        if self.next_version is not None:
            data["nextVersion"] = self.next_version
        return data


def split_file_name(file_name: str) -> Tuple[str, str]:
    """
    Split a file name into (base_name, extension).

      report.xlsx      -> ("report", ".xlsx")
      archive.tar.gz   -> ("archive.tar", ".gz")
      README           -> ("README", "")
      .env             -> (".env", "")
    """
    return os.path.splitext(os.path.basename(file_name))


def build_version_pattern(base_name: str, extension: str, separator: str = "") -> re.Pattern[str]:
    """
    Build the pattern that captures the version digits of a candidate name.

    With a separator the digits must sit between it and the extension:
      base + sep + (digits) + ext
    Without one, any characters may precede the digits, and the first run of
    digits that still lets the extension close the name is captured:
      base + .*? + (digits) + ext
    """
    base = re.escape(base_name)
    ext = re.escape(extension)
    if separator:
        pattern = f"{base}{re.escape(separator)}(\\d+){ext}"
    else:
        pattern = f"{base}.*?(\\d+){ext}"
    return re.compile(pattern, re.ASCII)


def extract_version(candidate: str, pattern: re.Pattern[str], base_name: str, extension: str) -> Optional[int]:
    """
    Version embedded in `candidate`, 0 for the bare `base_name + extension`
    file, or None when the name does not carry a parsable version.
    """
    match = pattern.fullmatch(candidate)
    if match and match.group(1):
        return int(match.group(1), 10)
    if candidate == f"{base_name}{extension}":
        return 0
    return None


def _next_name(base_name: str, extension: str, separator: str, version: int) -> str:
    return f"{base_name}{separator}{version}{extension}"


def _select_latest(candidates: List[str], versions: Dict[str, int]) -> str:
    # Strictly greater wins, so the first-seen candidate keeps a tie.
    latest = candidates[0]
    for name in candidates[1:]:
        if versions[name] > versions[latest]:
            latest = name
    return latest


def resolve_latest_version(
    directory: Path | str,
    file_name: str,
    separator: str = "",
    *,
    unparsed_policy: Optional[str] = None,
) -> ResolutionResult:
    """
    Scan `directory` for versioned siblings of `file_name` and propose the next name.

    Candidates are the directory entries that start with the base name and end
    with the extension. The highest embedded version wins; ties keep the
    lexically smallest name. Nothing is written.

    unparsed_policy decides what happens to candidates without a parsable
    version (other than the bare base+ext file, which is always version 0):
      - ZERO:    they take part as version 0
      - EXCLUDE: they are ignored
    Defaults to the UNPARSED_POLICY setting.

    Raises DirectoryAccessError when the directory cannot be listed.
    """
    if unparsed_policy is None:
        unparsed_policy = get_settings().unparsed_policy
    policy = unparsed_policy.upper()
    if policy not in UNPARSED_POLICIES:
        raise ValueError(f"Unknown unparsed_policy {unparsed_policy!r}; expected one of {UNPARSED_POLICIES}.")

    base_name, extension = split_file_name(file_name)
    entries = list_entries(directory)
    candidates = [e for e in entries if e.startswith(base_name) and e.endswith(extension)]

    logger.debug(
        "Resolving %s in %s (separator=%r, policy=%s): %d of %d entries are candidates",
        file_name,
        directory,
        separator,
        policy,
        len(candidates),
        len(entries),
    )

    pattern = build_version_pattern(base_name, extension, separator)
    versions: Dict[str, int] = {}
    for name in candidates:
        version = extract_version(name, pattern, base_name, extension)
        if version is None:
            if policy == "EXCLUDE":
                logger.debug("Ignoring %s: no version matches %s", name, pattern.pattern)
                continue
            logger.warning(
                "Treating %s as version 0: no version matches %s; the recommended name may collide with it",
                name,
                pattern.pattern,
            )
            version = 0
        versions[name] = version

    kept = [name for name in candidates if name in versions]
    if not kept:
        return ResolutionResult(
            filename="",
            version=0,
            recommended_next_name=_next_name(base_name, extension, separator, 0),
        )

    latest = _select_latest(kept, versions)
    latest_version = versions[latest]
    next_version = latest_version + 1

    logger.info(
        "Latest version of %s in %s is %s (v%d); next is v%d",
        file_name,
        directory,
        latest,
        latest_version,
        next_version,
    )

    return ResolutionResult(
        filename=latest,
        version=latest_version,
        recommended_next_name=_next_name(base_name, extension, separator, next_version),
        next_version=next_version,
    )


async def aresolve_latest_version(
    directory: Path | str,
    file_name: str,
    separator: str = "",
    *,
    unparsed_policy: Optional[str] = None,
) -> ResolutionResult:
    """Awaitable resolve_latest_version; the directory scan runs in a worker thread."""
    return await asyncio.to_thread(
        resolve_latest_version,
        directory,
        file_name,
        separator,
        unparsed_policy=unparsed_policy,
    )
