"""Terminology validation for a whole project."""

from pathlib import Path
from typing import Any

from docgraph.config_runtime import load_runtime_config
from docgraph.parsers.term_parser import TermParser
from docgraph.terms.registry import TermRegistry, TermValidationResult
from docgraph.terms.scanner import scan_terms


def load_term_registry(project_root: str | Path = ".", cfg: dict[str, Any] | None = None) -> TermRegistry:
    """Registry holding every term defined and referenced under ``project_root``.

    Raises:
        TermConflictError: a term is defined more than once
    """
    root = Path(project_root).resolve()
    cfg = cfg or load_runtime_config(root)
    registry = TermRegistry(duplicate_threshold=cfg["validation"]["duplicate_threshold"])
    scan_terms(root, registry, TermParser(cfg["terminology"]["global_scope_paths"]))
    return registry


def validate_terms(project_root: str | Path = ".", cfg: dict[str, Any] | None = None) -> TermValidationResult:
    """Validate definitional integrity of the project's glossary terms.

    Raises:
        TermConflictError: a term is defined more than once
    """
    return load_term_registry(project_root, cfg).validate()
