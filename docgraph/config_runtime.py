"""Runtime configuration for docgraph - centralized configuration management."""

import copy
import json
import os
from pathlib import Path, PurePosixPath
from typing import Any

from docgraph.errors import ConfigError
from docgraph.utils.constants import CONFIG_FILE_NAME, ENV_PREFIX, INDEX_FILE
from docgraph.utils.logging import logger

DEFAULTS = {
    "paths": {
        "docs_dir": "tasks",
        "features": "features",
        "interfaces": "interfaces",
        "shared": "shared",
        "index": INDEX_FILE.as_posix(),
    },
    "terminology": {
        "global_scope_paths": ["docs/GLOSSARY.md", "docs/terms/"],
    },
    "validation": {
        "max_shared_pairs": 12,
        "warn_shared_pairs": 8,
        "duplicate_threshold": 0.8,
        "feature_required_fields": ["feature", "status"],
        "interface_required_fields": ["from", "to", "type"],
        "ready_progress": 80,
        "blocked_progress": 50,
    },
    "limits": {
        "max_file_size": 2 * 1024 * 1024,
        "max_references_shown": 10,
    },
}

# Keys holding document collection paths; these must stay inside the project
_COLLECTION_KEYS = ("docs_dir", "features", "interfaces", "shared", "index")


def load_runtime_config(root: str | Path = ".") -> dict[str, Any]:
    """
    Load runtime configuration from docgraph.config.json and environment variables.

    Config priority (highest to lowest):
    1. Environment variables (DOCGRAPH_<SECTION>_<KEY>)
    2. docgraph.config.json at the project root
    3. Built-in defaults

    Only keys already present in DEFAULTS are honoured, and only when the
    supplied value has the same type as the default.

    Raises:
        ConfigError: if a document collection path is absolute or escapes
            the project root.
    """
    cfg = copy.deepcopy(DEFAULTS)

    path = Path(root) / CONFIG_FILE_NAME
    try:
        if path.exists():
            with open(path, encoding="utf-8") as f:
                user = json.load(f)

            if isinstance(user, dict):
                for section in cfg:
                    if section in user and isinstance(user[section], dict):
                        for key, value in user[section].items():
                            if key in cfg[section] and _same_type(value, cfg[section][key]):
                                cfg[section][key] = value
                            else:
                                logger.warning(
                                    f"Ignoring unknown or mistyped config key {section}.{key} in {path}"
                                )
    except (json.JSONDecodeError, OSError) as e:
        logger.warning(f"Could not load config file from {path}: {e}")
        logger.info("Continuing with default configuration")

    for section in cfg:
        for key in cfg[section]:
            env_var = f"{ENV_PREFIX}_{section.upper()}_{key.upper()}"
            if env_var in os.environ:
                value = os.environ[env_var]
                try:
                    default_value = cfg[section][key]
                    if isinstance(default_value, bool):
                        cfg[section][key] = value.lower() in ("1", "true", "yes")
                    elif isinstance(default_value, int):
                        cfg[section][key] = int(value)
                    elif isinstance(default_value, float):
                        cfg[section][key] = float(value)
                    elif isinstance(default_value, list):
                        cfg[section][key] = [v.strip() for v in value.split(",") if v.strip()]
                    else:
                        cfg[section][key] = value
                except ValueError as e:
                    logger.warning(f"Invalid value for environment variable {env_var}: '{value}' - {e}")
                    logger.info(f"Using default value: {cfg[section][key]}")

    for key in _COLLECTION_KEYS:
        _check_collection_path(key, cfg["paths"][key])

    return cfg


def _same_type(value: Any, default: Any) -> bool:
    if isinstance(default, float):
        return isinstance(value, (int, float)) and not isinstance(value, bool)
    return isinstance(value, type(default))


def _check_collection_path(key: str, value: str) -> None:
    if not value or not value.strip():
        raise ConfigError(f"Config paths.{key} must not be empty", {"key": key})
    posix = PurePosixPath(value.replace("\\", "/"))
    if posix.is_absolute() or (len(value) > 1 and value[1] == ":"):
        raise ConfigError(
            f"Config paths.{key} must be project-relative, got absolute path: {value}",
            {"key": key, "suggestion": "Use a path relative to the project root"},
        )
    if ".." in posix.parts:
        raise ConfigError(
            f"Config paths.{key} escapes the project root: {value}",
            {"key": key, "suggestion": "Remove '..' segments from the path"},
        )


def docs_path(cfg: dict[str, Any], root: Path, collection: str = "base") -> Path:
    """Resolve a document collection directory.

    Args:
        cfg: Runtime configuration from load_runtime_config()
        root: Project root
        collection: 'base', 'features', 'interfaces' or 'shared'
    """
    paths = cfg["paths"]
    base = root / paths["docs_dir"]
    if collection == "base":
        return base
    if collection not in ("features", "interfaces", "shared"):
        raise ConfigError(f"Unknown document collection: {collection}")
    return base / paths[collection]


def index_path(cfg: dict[str, Any], root: Path) -> Path:
    """Resolve the persisted reference index location."""
    return root / cfg["paths"]["index"]
