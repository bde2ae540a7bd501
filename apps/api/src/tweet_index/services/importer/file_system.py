from __future__ import annotations

import os
from pathlib import Path

from tweet_index.services.importer.errors import ConfigurationError

ARCHIVE_FILE_PATTERN = "*.js"


def ensure_source_dir(source_dir: Path) -> None:
    if not source_dir.exists():
        raise ConfigurationError(f"Source directory not found: {source_dir}")
    if not source_dir.is_dir():
        raise ConfigurationError(f"Source path is not a directory: {source_dir}")
    if not os.access(source_dir, os.R_OK | os.X_OK):
        raise ConfigurationError(f"Source directory is not readable: {source_dir}")


def list_archive_files(
    source_dir: Path,
    pattern: str = ARCHIVE_FILE_PATTERN,
    *,
    recursive: bool = False,
) -> list[Path]:
    ensure_source_dir(source_dir)
    if not pattern.strip():
        raise ConfigurationError("File pattern must not be empty")

    candidates = source_dir.rglob(pattern) if recursive else source_dir.glob(pattern)
    return sorted(path for path in candidates if path.is_file())
