"""Centralized constants for docgraph.

Single source of truth for output locations and environment variable names.
"""

from pathlib import Path

# ============================================================================
# OUTPUT DIRECTORIES
# ============================================================================

# Output directory for all docgraph artifacts (relative to project root)
OUTPUT_DIR_NAME = ".docgraph"
OUTPUT_DIR = Path(OUTPUT_DIR_NAME)

# Persisted reference index snapshot
INDEX_FILE_NAME = "references.json"
INDEX_FILE = OUTPUT_DIR / INDEX_FILE_NAME

# Log files
ERROR_LOG_FILE = OUTPUT_DIR / "error.log"

# Project config file (project root)
CONFIG_FILE_NAME = "docgraph.config.json"

# Snapshot schema version
INDEX_VERSION = "1.0"

# ============================================================================
# ENVIRONMENT VARIABLES
# ============================================================================

ENV_PREFIX = "DOCGRAPH"
ENV_LOG_LEVEL = "DOCGRAPH_LOG_LEVEL"
ENV_LOG_JSON = "DOCGRAPH_LOG_JSON"

# ============================================================================
# FILE SYSTEM CONFIGURATION
# ============================================================================

# Directories never scanned for documents or source files.
# Build artifacts, dependencies and caches.
SKIP_DIRS: set[str] = {
    # Version control
    ".git",
    ".hg",
    ".svn",

    # Dependencies
    "node_modules",
    ".venv",
    "venv",

    # Build artifacts
    "dist",
    "build",
    "out",
    "target",
    "coverage",

    # Caches
    "__pycache__",
    ".pytest_cache",
    ".mypy_cache",
    ".ruff_cache",
    ".vite",
    ".next",
    ".nuxt",
    ".tox",

    # docgraph output
    OUTPUT_DIR_NAME,
}

# Subset of SKIP_DIRS that callers may opt back into
VENDOR_DIRS: set[str] = {"node_modules", ".venv", "venv"}
BUILD_DIRS: set[str] = {"dist", "build", "out", "target"}
