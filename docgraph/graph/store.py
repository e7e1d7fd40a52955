"""Snapshot persistence for the reference index (JSON, full overwrite)."""

import json
from pathlib import Path
from typing import Any

from docgraph.config_runtime import index_path, load_runtime_config
from docgraph.errors import DocGraphError, IndexNotFoundError
from docgraph.utils.helpers import load_json_file, save_json_file
from docgraph.utils.logging import logger

from .types import ReferenceIndex


def save_index(index: ReferenceIndex, path: str | Path) -> Path:
    """Write ``index`` to ``path``, replacing any previous snapshot."""
    target = Path(path)
    save_json_file(index.to_dict(), target)
    logger.debug(f"Saved reference index to {target}")
    return target


def load_index(path: str | Path) -> ReferenceIndex:
    """Load a snapshot written by save_index().

    Raises:
        IndexNotFoundError: no snapshot at ``path``
        DocGraphError: the snapshot is not valid JSON
    """
    source = Path(path)
    if not source.exists():
        raise IndexNotFoundError(
            f"Reference index not found: {source}",
            {"path": str(source), "suggestion": "Run 'docgraph graph build' first"},
        )
    try:
        data = load_json_file(source)
    except json.JSONDecodeError as e:
        raise DocGraphError(f"Reference index is corrupt: {source}: {e}", {"path": str(source)}) from e
    if not isinstance(data, dict):
        raise DocGraphError(f"Reference index is corrupt: {source}: expected an object", {"path": str(source)})
    return ReferenceIndex.from_dict(data)


def load_project_index(project_root: str | Path = ".", cfg: dict[str, Any] | None = None) -> ReferenceIndex:
    """Load the snapshot at the configured location for ``project_root``."""
    root = Path(project_root).resolve()
    cfg = cfg or load_runtime_config(root)
    return load_index(index_path(cfg, root))
