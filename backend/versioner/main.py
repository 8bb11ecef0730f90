from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import Optional

from fastapi import FastAPI, HTTPException, Query
from pydantic import BaseModel

from versioner.core.logging_config import configure_logging
from versioner.core.settings import get_settings
from versioner.files.listing import DirectoryAccessError
from versioner.files.versioning import ResolutionResult, aresolve_latest_version

configure_logging()
logger = logging.getLogger(__name__)

app = FastAPI(title="File Versioner Service", version="0.1.0")


class ResolutionResponse(BaseModel):
    filename: str
    version: int
    recommended_next_name: str
    next_version: Optional[int] = None


class VersionSave(BaseModel):
    file_name: str
    directory: str = ""
    separator: Optional[str] = None
    content: str


class SavedVersion(BaseModel):
    file_name: str
    file_path: str
    version: int
    created_at: Optional[str] = None
    modified_at: Optional[str] = None


FORBIDDEN_NAME_CHARS = ("/", "\\", "\x00")


def _validate_file_name(file_name: str) -> str:
    name = (file_name or "").strip()
    if not name:
        raise HTTPException(status_code=400, detail="File name cannot be empty.")
    if any(c in name for c in FORBIDDEN_NAME_CHARS):
        raise HTTPException(status_code=400, detail="File name must not contain path separators or NUL.")
    return name


def _validate_separator(separator: str) -> str:
    # The separator ends up inside the written file name.
    if any(c in separator for c in FORBIDDEN_NAME_CHARS):
        raise HTTPException(status_code=400, detail="Separator must not contain path separators or NUL.")
    return separator


def _resolve_directory(directory: str) -> Path:
    """Map a directory relative to VERSIONS_DIR to an absolute path inside it."""
    if "\x00" in directory:
        raise HTTPException(status_code=400, detail="Invalid directory.")

    settings = get_settings()
    root = Path(settings.versions_dir).resolve()
    requested = (root / directory).resolve()

    # Security: ensure the requested directory lives under versions_dir
    if not requested.is_relative_to(root):
        logger.warning(
            "Rejected request outside versions_dir. requested=%s, root=%s",
            requested,
            root,
        )
        raise HTTPException(status_code=400, detail="Invalid directory.")
    return requested


async def _resolve(directory: Path, file_name: str, separator: Optional[str]) -> ResolutionResult:
    if separator is None:
        separator = get_settings().default_separator
    separator = _validate_separator(separator)
    try:
        return await aresolve_latest_version(directory, file_name, separator)
    except DirectoryAccessError as e:
        raise HTTPException(status_code=404, detail=f"Directory not found or unreadable: {e.reason}")


@app.on_event("startup")
async def on_startup() -> None:
    settings = get_settings()
    logger.info("Starting File Versioner Service with versions_dir=%s", settings.versions_dir)
    logger.info("Starting File Versioner Service with unparsed_policy=%s", settings.unparsed_policy)


@app.get("/versions/latest", response_model=ResolutionResponse)
async def latest_version(
    file_name: str = Query(..., description="Base file name, e.g. report.xlsx"),
    directory: str = Query("", description="Directory relative to VERSIONS_DIR"),
    separator: Optional[str] = Query(None, description="Text between base name and version"),
) -> ResolutionResponse:
    name = _validate_file_name(file_name)
    target_dir = _resolve_directory(directory)
    result = await _resolve(target_dir, name, separator)

    return ResolutionResponse(
        filename=result.filename,
        version=result.version,
        recommended_next_name=result.recommended_next_name,
        next_version=result.next_version,
    )


@app.post("/versions/save", response_model=SavedVersion)
async def save_version(update: VersionSave) -> SavedVersion:
    """
    Save content as the next version of a file.

    - Resolve the latest version among the directory's entries
    - Create the recommended next name (never overwriting an existing file)
    - Write the content there and return the new version
    """
    name = _validate_file_name(update.file_name)
    target_dir = _resolve_directory(update.directory)
    result = await _resolve(target_dir, name, update.separator)

    next_path = target_dir / result.recommended_next_name

    # Security: the new version must land inside the resolved directory
    if next_path.resolve().parent != target_dir:
        logger.warning(
            "Rejected version path outside directory. path=%s, directory=%s",
            next_path,
            target_dir,
        )
        raise HTTPException(status_code=400, detail="Invalid version file name.")

    version = result.next_version if result.next_version is not None else result.version

    try:
        with next_path.open("x", encoding="utf-8") as f:
            f.write(update.content)
    except FileExistsError:
        logger.warning("Recommended name already taken, refusing to overwrite: %s", next_path)
        raise HTTPException(status_code=409, detail=f"{result.recommended_next_name} already exists.")
    except OSError as e:
        logger.exception("Failed to write version file %s", next_path)
        raise HTTPException(status_code=500, detail=f"Failed to save version: {e}")

    stat = next_path.stat()
    created_at = datetime.fromtimestamp(stat.st_ctime).isoformat()
    modified_at = datetime.fromtimestamp(stat.st_mtime).isoformat()

    logger.info("Saved new version: %s", next_path)

    return SavedVersion(
        file_name=next_path.name,
        file_path=str(next_path),
        version=version,
        created_at=created_at,
        modified_at=modified_at,
    )
