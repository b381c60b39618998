"""Filesystem helpers: directory listings, descriptors and JSON persistence."""

from __future__ import annotations
import json
import os
import shutil
import tempfile
from pathlib import Path
from typing import Any

from .errors import (
    E_DESCRIPTOR,
    E_DIR_MISSING,
    E_PATH_ESCAPE,
    FatalInputError,
    VariantGenError,
    skip_group,
)

__all__ = [
    "list_group_directories",
    "list_files",
    "read_descriptor",
    "read_json",
    "write_json",
    "copy_asset",
    "safe_file_path",
]


def safe_file_path(base_dir: Path, file_path: str) -> Path:
    base_dir = base_dir.resolve()
    resolved = (base_dir / file_path).resolve()
    try:
        resolved.relative_to(base_dir)
    except ValueError as e:
        raise VariantGenError(
            E_PATH_ESCAPE,
            f"Path escapes {base_dir}: {file_path}",
            {"path": file_path},
        ) from e
    return resolved


def _require_dir(directory: Path) -> None:
    if not directory.is_dir():
        raise FatalInputError(
            E_DIR_MISSING,
            f"Directory does not exist: {directory}",
            {"path": str(directory)},
        )


def list_group_directories(root: Path) -> list[str]:
    _require_dir(root)
    return sorted(p.name for p in root.iterdir() if p.is_dir())


def list_files(directory: Path) -> list[str]:
    _require_dir(directory)
    return sorted(p.name for p in directory.iterdir() if p.is_file())


def read_json(path: Path) -> Any:
    """Parse a JSON file; raises json.JSONDecodeError on malformed content."""
    with path.open("r", encoding="utf-8") as f:
        return json.load(f)


def read_descriptor(path: Path) -> dict[str, Any] | None:
    """Read a group descriptor, or None when the file is absent.

    Unparseable or non-object descriptors raise SkippableGroupError.
    """
    if not path.is_file():
        return None
    try:
        data = read_json(path)
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        raise skip_group(
            E_DESCRIPTOR, f"Unreadable descriptor {path}: {e}"
        ) from e
    if not isinstance(data, dict):
        raise skip_group(E_DESCRIPTOR, f"Descriptor must be an object: {path}")
    return data


def write_json(path: Path, data: Any, *, indent: int = 4) -> Path:
    """Write JSON atomically: temp file in the same directory, then replace."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(
        prefix=f".{path.name}.", suffix=".tmp", dir=path.parent
    )
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=indent)
            f.write("\n")
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise
    return path


def copy_asset(source: Path, dest: Path) -> bool:
    """Copy source over dest. Returns False when the source is missing."""
    if not source.is_file():
        return False
    dest.parent.mkdir(parents=True, exist_ok=True)
    shutil.copyfile(source, dest)
    return True
