"""Orphan detection - source files neither documented nor imported.

A file is referenced when a feature or interface document names it
(``code_references``, ``entry_point``, ``test_files``, relative markdown
links, ``src/...``-style paths in the body). A file that is not referenced
is still reachable if another scanned source file imports it.

Import reachability is a regex heuristic, not a resolver: a candidate counts
as imported when any import specifier in another file ends in the
candidate's module name (``index``/``__init__`` files go by their directory
name). Unconventional import syntax can therefore produce false orphans.
"""

import posixpath
import re
from dataclasses import asdict, dataclass, field
from pathlib import Path, PurePosixPath
from typing import Any

from docgraph import frontmatter
from docgraph.config_runtime import docs_path, load_runtime_config
from docgraph.utils.constants import BUILD_DIRS, SKIP_DIRS, VENDOR_DIRS
from docgraph.utils.helpers import find_markdown_files, iter_files, normalize_path, read_text, relative_posix
from docgraph.utils.logging import logger

SOURCE_EXTENSIONS = {".py", ".ts", ".tsx", ".js", ".jsx", ".mjs", ".cjs"}
SCANNED_EXTENSIONS = SOURCE_EXTENSIONS | {".json", ".yaml", ".yml", ".toml"}

CONFIG_FILES = {
    "package.json",
    "package-lock.json",
    "tsconfig.json",
    "tsconfig.node.json",
    "jsconfig.json",
    "biome.json",
    "pyproject.toml",
    "setup.py",
    "conftest.py",
    "docgraph.config.json",
}
_CONFIG_PATTERNS = [
    re.compile(r"\.config\.(ts|js|mjs|cjs|json)$"),  # vite.config.ts, jest.config.js
    re.compile(r"\.d\.ts$"),
    re.compile(r"^\.env(\..+)?$"),
]

_LINK = re.compile(r"\[[^\]]*\]\(([^)\s]+)\)")
_INLINE_PATH = re.compile(r"(?<![\w/.-])((?:src|lib|app|dist|scripts)/[\w./-]+\.(?:py|tsx?|jsx?|mjs|cjs|json|ya?ml|toml))")

_JS_IMPORTS = [
    re.compile(r"""\bimport\s+(?:[\w*{}\s,$]+\s+from\s+)?['"]([^'"]+)['"]"""),
    re.compile(r"""\bexport\s+[\w*{}\s,$]+\s+from\s+['"]([^'"]+)['"]"""),
    re.compile(r"""\brequire\s*\(\s*['"]([^'"]+)['"]\s*\)"""),
    re.compile(r"""\bimport\s*\(\s*['"]([^'"]+)['"]\s*\)"""),
]
_PY_FROM = re.compile(r"^\s*from\s+([\w.]+)\s+import\s+(.+)$", re.MULTILINE)
_PY_IMPORT = re.compile(r"^\s*import\s+([\w.]+(?:\s*,\s*[\w.]+)*)", re.MULTILINE)


@dataclass
class OrphanOptions:
    include_vendor: bool = False  # node_modules, .venv
    include_build: bool = False  # dist, build, out, target


@dataclass
class OrphanFile:
    path: str
    kind: str  # source, config, other
    size: int = 0
    is_imported_by_code: bool = False


@dataclass
class OrphanResult:
    success: bool
    total_files: int = 0
    referenced_files: int = 0
    orphan_files: list[OrphanFile] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "total_files": self.total_files,
            "referenced_files": self.referenced_files,
            "orphan_count": len(self.orphan_files),
            "orphan_files": [asdict(o) for o in self.orphan_files],
        }


def classify_file(path: str) -> str:
    """'config', 'source' or 'other' for a project-relative path."""
    name = PurePosixPath(path).name
    if name in CONFIG_FILES or name.startswith("."):
        return "config"
    if any(p.search(name) for p in _CONFIG_PATTERNS):
        return "config"
    if PurePosixPath(name).suffix.lower() in SOURCE_EXTENSIONS:
        return "source"
    return "other"


def module_name(path: str) -> str:
    """Name other files use to import ``path`` (directory name for index files)."""
    p = PurePosixPath(path)
    stem = p.name.split(".")[0]
    if stem in ("index", "__init__") and p.parent.name:
        return p.parent.name
    return stem


def import_specifiers(content: str, path: str) -> set[str]:
    """Module names imported by a source file (last path / dotted segment)."""
    names: set[str] = set()
    if path.endswith((".py", ".pyi")):
        for module, imported in _PY_FROM.findall(content):
            names.add(module.strip(".").rsplit(".", 1)[-1])
            # from pkg import mod, other
            for item in imported.strip("()\\ ").split(","):
                item = item.strip().split(" as ")[0].strip()
                if item and item != "*":
                    names.add(item)
        for group in _PY_IMPORT.findall(content):
            for module in group.split(","):
                names.add(module.strip().rsplit(".", 1)[-1])
    else:
        for pattern in _JS_IMPORTS:
            for spec in pattern.findall(content):
                last = spec.rstrip("/").rsplit("/", 1)[-1]
                names.add(last.split(".")[0] if last not in (".", "..") else last)
    names.discard("")
    return names


def extract_referenced_files(project_root: Path, doc_dirs: list[Path]) -> set[str]:
    """Project-relative paths named by feature / interface documents."""
    referenced: set[str] = set()
    for directory in doc_dirs:
        for path in find_markdown_files(directory):
            text = read_text(path)
            try:
                doc = frontmatter.extract(text)
            except frontmatter.FrontmatterError as e:
                logger.warning(f"Unreadable frontmatter in {relative_posix(path, project_root)}: {e.message}")
                doc = frontmatter.Frontmatter(body=text)

            for key in ("code_references", "entry_point", "test_files"):
                for value in doc.get_list(key):
                    referenced.add(normalize_path(value, project_root))

            doc_dir = posixpath.dirname(relative_posix(path, project_root))
            for target in _LINK.findall(doc.body):
                if target.startswith(("http:", "https:", "mailto:", "#")):
                    continue
                target = target.split("#", 1)[0]
                resolved = posixpath.normpath(posixpath.join(doc_dir, target))
                if not resolved.startswith(".."):
                    referenced.add(resolved)
            for match in _INLINE_PATH.findall(doc.body):
                referenced.add(normalize_path(match))

    referenced.discard("")
    return referenced


def collect_source_files(project_root: Path, exclude: list[Path], options: OrphanOptions) -> list[str]:
    skip = set(SKIP_DIRS)
    if options.include_vendor:
        skip -= VENDOR_DIRS
    if options.include_build:
        skip -= BUILD_DIRS
    excluded = [relative_posix(p, project_root) for p in exclude if p.is_relative_to(project_root)]

    files = []
    for path in iter_files(project_root, SCANNED_EXTENSIONS, skip):
        rel = relative_posix(path, project_root)
        if any(rel == e or rel.startswith(e + "/") for e in excluded):
            continue
        files.append(rel)
    return sorted(files)


def detect_orphans(
    project_root: str | Path = ".",
    options: OrphanOptions | None = None,
    cfg: dict[str, Any] | None = None,
) -> OrphanResult:
    """Find files neither referenced by documentation nor imported by code."""
    root = Path(project_root).resolve()
    options = options or OrphanOptions()
    cfg = cfg or load_runtime_config(root)
    docs = docs_path(cfg, root)

    if not docs.is_dir():
        logger.info(f"No documentation directory at {docs}, skipping orphan detection")
        return OrphanResult(success=True)

    referenced = extract_referenced_files(
        root, [docs_path(cfg, root, "features"), docs_path(cfg, root, "interfaces")]
    )
    snapshot_dir = (root / cfg["paths"]["index"]).parent
    files = collect_source_files(root, [docs, snapshot_dir], options)
    logger.debug(f"Orphan scan: {len(files)} files, {len(referenced)} referenced paths")

    imports_by_file: dict[str, set[str]] = {}
    for rel in files:
        if classify_file(rel) == "source":
            imports_by_file[rel] = import_specifiers(read_text(root / rel), rel)

    orphans = []
    referenced_count = 0
    for rel in files:
        if rel in referenced:
            referenced_count += 1
            continue
        kind = classify_file(rel)
        if kind == "config":
            continue

        name = module_name(rel)
        if any(name in names for other, names in imports_by_file.items() if other != rel):
            continue
        orphans.append(OrphanFile(path=rel, kind=kind, size=(root / rel).stat().st_size))

    return OrphanResult(
        success=not orphans,
        total_files=len(files),
        referenced_files=referenced_count,
        orphan_files=sorted(orphans, key=lambda o: o.path),
    )
