"""Helper utility functions for docgraph.

IMPORTANT UTILITIES:
- normalize_path(): Use this for ANY path stored in the reference index.
  The index stores Unix-style project-relative paths (e.g. 'src/cli.ts'),
  but documents may spell them with backslashes, './' prefixes or the
  absolute project root.
"""

import json
import os
from collections.abc import Iterator
from pathlib import Path
from typing import Any

from .constants import SKIP_DIRS
from .logging import logger


def normalize_path(file_path: str, project_root: Path | str | None = None) -> str:
    """Normalize a file path into project-relative POSIX form.

    Transformations:
    1. Convert backslashes to forward slashes (Windows -> Unix)
    2. Strip project root prefix if provided (absolute -> relative)
    3. Strip leading './' and leading slashes

    Examples:
        >>> normalize_path("src\\\\parsers\\\\base.ts")
        'src/parsers/base.ts'

        >>> normalize_path("/home/me/proj/src/cli.ts", project_root="/home/me/proj")
        'src/cli.ts'

        >>> normalize_path("./src/cli.ts")
        'src/cli.ts'
    """
    normalized = str(file_path).strip().replace("\\", "/")

    if project_root is not None:
        root_str = str(project_root).replace("\\", "/").rstrip("/")
        if normalized.startswith(root_str + "/"):
            normalized = normalized[len(root_str) + 1 :]
        elif normalized == root_str:
            normalized = ""

    while normalized.startswith("./"):
        normalized = normalized[2:]

    return normalized.lstrip("/")


def relative_posix(path: Path, root: Path) -> str:
    """Return ``path`` relative to ``root`` as a POSIX string."""
    return path.relative_to(root).as_posix()


def iter_files(
    root: Path,
    suffixes: set[str] | None = None,
    skip_dirs: set[str] | None = None,
) -> Iterator[Path]:
    """Walk ``root`` yielding files, pruning skipped directories.

    Results are yielded in sorted order so every scan is deterministic.
    """
    skip = SKIP_DIRS if skip_dirs is None else skip_dirs
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames[:] = sorted(d for d in dirnames if d not in skip)
        for filename in sorted(filenames):
            if suffixes is None or Path(filename).suffix.lower() in suffixes:
                yield Path(dirpath) / filename


def find_markdown_files(root: Path, skip_dirs: set[str] | None = None) -> list[Path]:
    """Recursively find markdown files under ``root`` (missing root -> [])."""
    if not root.is_dir():
        return []
    return list(iter_files(root, {".md"}, skip_dirs))


def list_markdown_files(directory: Path) -> list[Path]:
    """List markdown files directly inside ``directory`` (non-recursive, sorted)."""
    if not directory.is_dir():
        return []
    return sorted(p for p in directory.iterdir() if p.is_file() and p.suffix == ".md")


def read_text(path: Path) -> str:
    """Read a UTF-8 text file, replacing undecodable bytes."""
    with open(path, encoding="utf-8", errors="replace") as f:
        return f.read()


def load_json_file(file_path: str | Path) -> dict[str, Any]:
    """
    Load and parse a JSON file.

    Raises:
        FileNotFoundError: If file doesn't exist
        json.JSONDecodeError: If file contains invalid JSON
    """
    try:
        with open(file_path, encoding="utf-8") as f:
            return json.load(f)
    except FileNotFoundError:
        logger.error(f"JSON file not found: {file_path}")
        raise
    except json.JSONDecodeError as e:
        logger.error(f"Invalid JSON in file {file_path}: {e}")
        raise


def save_json_file(data: dict[str, Any], file_path: str | Path) -> None:
    """Save data as JSON, creating parent directories and overwriting the file."""
    path = Path(file_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2, ensure_ascii=False)
        f.write("\n")
