"""Undocumented exports - public symbols no feature document accounts for.

A source file is covered when a feature lists it in ``code_references`` or
when a covered file imports it, directly or through a chain of relative
imports. Every export of an uncovered source file is reported. Test and
config files are ignored, and so are files with nothing exported (the orphan
detector reports those).

Documented files come from the persisted reference index, so run
``docgraph graph build`` first. Imports are re-parsed on every run because
the index only keeps edges between documented files.
"""

from collections import deque
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any

from docgraph.config_runtime import docs_path, load_runtime_config
from docgraph.graph.builder import classify_code_file, resolve_import
from docgraph.graph.store import load_project_index
from docgraph.parsers.base import ExportInfo
from docgraph.parsers.factory import ParserFactory
from docgraph.utils.helpers import read_text
from docgraph.utils.logging import logger

from .orphans import OrphanOptions, collect_source_files


@dataclass
class UndocumentedExport:
    file: str
    name: str
    kind: str
    line: int = 0


@dataclass
class ExportCoverageResult:
    success: bool
    total_files: int = 0
    documented_files: int = 0
    total_exports: int = 0
    undocumented: list[UndocumentedExport] = field(default_factory=list)
    parse_failures: dict[str, list[str]] = field(default_factory=dict)

    @property
    def documented_exports(self) -> int:
        return self.total_exports - len(self.undocumented)

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "total_files": self.total_files,
            "documented_files": self.documented_files,
            "total_exports": self.total_exports,
            "documented_exports": self.documented_exports,
            "undocumented_count": len(self.undocumented),
            "undocumented": [asdict(u) for u in self.undocumented],
            "parse_failures": self.parse_failures,
        }


def covered_files(documented: set[str], imports: dict[str, list[str]]) -> set[str]:
    """Every file reachable from ``documented`` along ``imports`` edges (BFS)."""
    covered = set(documented)
    queue = deque(sorted(documented))
    while queue:
        current = queue.popleft()
        for target in imports.get(current, []):
            if target not in covered:
                covered.add(target)
                queue.append(target)
    return covered


def detect_undocumented_exports(
    project_root: str | Path = ".",
    options: OrphanOptions | None = None,
    cfg: dict[str, Any] | None = None,
    parser_factory: ParserFactory | None = None,
) -> ExportCoverageResult:
    """Find exported symbols in source files no feature document covers.

    Raises:
        IndexNotFoundError: the reference index has not been built
    """
    root = Path(project_root).resolve()
    cfg = cfg or load_runtime_config(root)
    parsers = parser_factory or ParserFactory()
    index = load_project_index(root, cfg)

    snapshot_dir = (root / cfg["paths"]["index"]).parent
    files = [
        f
        for f in collect_source_files(root, [docs_path(cfg, root), snapshot_dir], options or OrphanOptions())
        if parsers.get_parser(f) is not None and classify_code_file(f) == "source"
    ]
    known = set(files)

    result = ExportCoverageResult(success=True, total_files=len(files))
    imports: dict[str, list[str]] = {}
    exports: dict[str, list[ExportInfo]] = {}
    for rel in files:
        try:
            parsed = parsers.parse(read_text(root / rel), rel)
        except OSError as e:
            result.parse_failures[rel] = [f"{type(e).__name__}: {e}"]
            continue
        if not parsed.ok:
            result.parse_failures[rel] = [e.message for e in parsed.errors]
            continue
        imports[rel] = [t for t in (resolve_import(i.source, rel, known) for i in parsed.imports) if t and t != rel]
        exports[rel] = parsed.exports

    documented = {path for path, code in index.code.items() if code.documented_in and path in known}
    covered = covered_files(documented, imports)
    result.documented_files = len(documented)

    for rel, symbols in exports.items():
        result.total_exports += len(symbols)
        if rel in covered:
            continue
        result.undocumented += [
            UndocumentedExport(file=rel, name=e.name, kind=e.kind, line=e.line) for e in symbols
        ]

    result.success = not result.undocumented
    logger.debug(
        f"Export coverage: {len(files)} source files, {len(covered & known)} covered, "
        f"{len(result.undocumented)} undocumented exports"
    )
    return result
