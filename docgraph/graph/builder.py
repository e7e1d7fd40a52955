"""Reference index builder - constructs the feature/code/interface/term graph.

Every build is a full rebuild from the documentation tree:

1. feature documents  -> Feature entities (+ CodeFile stubs for code_references)
2. code files         -> imports/exports through the source parsers
3. interface/shared   -> Interface entities, provides/uses on features
4. all markdown       -> term definitions and [[Term]] references
5. reverse pass       -> documented_in, used_by, imported_by
"""

import posixpath
import time
from collections import defaultdict
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path, PurePosixPath
from typing import Any

from docgraph import frontmatter
from docgraph.config_runtime import docs_path, index_path, load_runtime_config
from docgraph.errors import TermConflictError
from docgraph.pairs import canonical_shared_id, is_pair, normalize_pair, split_shared_id
from docgraph.parsers.factory import ParserFactory
from docgraph.parsers.term_parser import TermParser
from docgraph.terms.registry import TermRegistry
from docgraph.terms.scanner import scan_terms
from docgraph.utils.helpers import find_markdown_files, normalize_path, read_text, relative_posix
from docgraph.utils.logging import logger

from .store import save_index
from .types import BuildStats, CodeFile, Feature, Interface, ReferenceIndex, TermUsage

CONFIG_FILE_NAMES = {
    "package.json",
    "tsconfig.json",
    "pyproject.toml",
    "setup.cfg",
    "docgraph.config.json",
    ".eslintrc",
    ".prettierrc",
}
CONFIG_EXTENSIONS = {".json", ".yaml", ".yml", ".toml", ".ini"}
TEST_SEGMENTS = {"tests", "test", "__tests__"}

# Extensions tried when resolving extension-less relative imports
_RESOLVE_EXTENSIONS = (".ts", ".tsx", ".mts", ".js", ".jsx", ".mjs", ".cjs", ".py")


def classify_code_file(path: str) -> str:
    """Infer a code file's kind ('test', 'config' or 'source') from its path."""
    p = PurePosixPath(path)
    name = p.name.lower()
    if ".test." in name or ".spec." in name or TEST_SEGMENTS & set(p.parts[:-1]):
        return "test"
    if name.startswith("test_") and name.endswith(".py"):
        return "test"
    if name in CONFIG_FILE_NAMES or "config" in name or p.suffix.lower() in CONFIG_EXTENSIONS:
        return "config"
    return "source"


def resolve_import(source: str, importer: str, known: set[str] | dict[str, Any]) -> str | None:
    """Resolve a relative import to an indexed code path.

    Only relative specifiers ('./x', '../x' for JS/TS, '.x' / '..x' for
    Python) can be resolved; bare package imports return None.
    """
    base = posixpath.dirname(importer)

    if importer.endswith((".py", ".pyi")):
        if not source.startswith("."):
            return None
        level = len(source) - len(source.lstrip("."))
        module = source[level:]
        for _ in range(level - 1):
            base = posixpath.dirname(base)
        target = posixpath.join(base, *module.split(".")) if module else base
        for candidate in (f"{target}.py", f"{target}/__init__.py"):
            if candidate in known:
                return candidate
        return None

    if not source.startswith(("./", "../")):
        return None
    target = posixpath.normpath(posixpath.join(base, source))
    stem, ext = posixpath.splitext(target)
    candidates = [target]
    if ext in (".js", ".jsx", ".mjs", ".cjs"):
        # ESM TypeScript imports spell the emitted .js extension
        candidates += [stem + ".ts", stem + ".tsx", stem + ".mts"]
    candidates += [target + e for e in _RESOLVE_EXTENSIONS]
    candidates += [f"{target}/index{e}" for e in _RESOLVE_EXTENSIONS]
    for candidate in candidates:
        if candidate in known:
            return candidate
    return None


@dataclass
class BuildResult:
    index: ReferenceIndex
    stats: BuildStats
    output: Path | None = None


class ReferenceIndexBuilder:
    """Build the reference graph for one project."""

    def __init__(
        self,
        project_root: str | Path = ".",
        cfg: dict[str, Any] | None = None,
        include_symbols: bool = True,
        parser_factory: ParserFactory | None = None,
    ):
        self.root = Path(project_root).resolve()
        self.cfg = cfg or load_runtime_config(self.root)
        self.include_symbols = include_symbols
        self.parsers = parser_factory or ParserFactory()
        self.term_parser = TermParser(self.cfg["terminology"]["global_scope_paths"])
        self.index = ReferenceIndex()
        self.stats = BuildStats()
        self.registry = TermRegistry(duplicate_threshold=self.cfg["validation"]["duplicate_threshold"])

    def build(self) -> BuildResult:
        start = time.perf_counter()
        self.index.generated = datetime.now(timezone.utc).isoformat()

        logger.debug(f"Building reference index for {self.root}")
        self._extract_features()
        if self.include_symbols:
            self._extract_code_dependencies()
        self._extract_interfaces(docs_path(self.cfg, self.root, "interfaces"), shared=False)
        self._extract_interfaces(docs_path(self.cfg, self.root, "shared"), shared=True)
        self._extract_terms()
        self._build_reverse_mappings()

        stats = self.stats
        stats.features = len(self.index.features)
        stats.code_files = len(self.index.code)
        stats.interfaces = len(self.index.interfaces)
        stats.terms = len(self.index.terms)
        stats.total_references = sum(f.forward_edge_count() for f in self.index.features.values()) + sum(
            len(c.imports) for c in self.index.code.values()
        )
        stats.build_time_ms = int((time.perf_counter() - start) * 1000)

        logger.info(
            f"Indexed {stats.features} features, {stats.code_files} code files, "
            f"{stats.interfaces} interfaces, {stats.terms} terms in {stats.build_time_ms}ms"
        )
        return BuildResult(index=self.index, stats=stats)

    def _rel(self, path: Path) -> str:
        return relative_posix(path, self.root)

    def _load(self, path: Path) -> frontmatter.Frontmatter | None:
        file = self._rel(path)
        try:
            return frontmatter.extract(read_text(path))
        except frontmatter.FrontmatterError as e:
            logger.warning(f"Skipping {file}: {e.message}")
            self.stats.skipped_documents.append(file)
            return None
        except OSError as e:
            logger.warning(f"Skipping {file}: {e}")
            self.stats.skipped_documents.append(file)
            return None

    def _paths(self, values: list[str]) -> list[str]:
        result = []
        for value in values:
            path = normalize_path(value, self.root)
            if path and path not in result:
                result.append(path)
        return result

    def _extract_features(self) -> None:
        for path in find_markdown_files(docs_path(self.cfg, self.root, "features")):
            doc = self._load(path)
            if doc is None:
                continue

            file = self._rel(path)
            feature_id = doc.get_str("feature") or path.stem
            if feature_id in self.index.features:
                existing = self.index.features[feature_id].file
                logger.warning(f"Duplicate feature id {feature_id} in {file} (already defined in {existing})")
                self.stats.duplicate_features.append(file)
                continue

            feature = Feature(
                id=feature_id,
                file=file,
                code_uses=self._paths(doc.get_list("code_references")),
                related_features=_unique(doc.get_list("related_features")),
                depends_on=_unique(doc.get_list("depends_on")),
                interfaces_provided=_unique(doc.get_list("interfaces")),
                tested_by=self._paths(doc.get_list("test_files")),
            )
            self.index.features[feature_id] = feature

            for code_path in feature.code_uses:
                if code_path not in self.index.code:
                    self.index.code[code_path] = CodeFile(path=code_path, kind=classify_code_file(code_path))

        logger.debug(f"Extracted {len(self.index.features)} features")

    def _extract_code_dependencies(self) -> None:
        max_size = self.cfg["limits"]["max_file_size"]
        for code_path, code_file in self.index.code.items():
            full = self.root / code_path
            if not full.is_file() or self.parsers.get_parser(code_path) is None:
                continue
            try:
                if full.stat().st_size > max_size:
                    logger.debug(f"Skipping symbol extraction for {code_path}: larger than {max_size} bytes")
                    continue
                content = read_text(full)
            except OSError as e:
                self.stats.parse_failures[code_path] = [f"{type(e).__name__}: {e}"]
                logger.warning(f"Cannot read {code_path}: {e}")
                continue

            result = self.parsers.parse(content, code_path)
            if not result.ok:
                self.stats.parse_failures[code_path] = [e.message for e in result.errors]
                logger.debug(f"Parse errors in {code_path}: {len(result.errors)}")
                continue

            code_file.exports = _unique([e.name for e in result.exports])
            for imp in result.imports:
                target = resolve_import(imp.source, code_path, self.index.code)
                if target and target != code_path and target not in code_file.imports:
                    code_file.imports.append(target)

        if self.stats.parse_failures:
            logger.warning(f"{len(self.stats.parse_failures)} code files could not be parsed")

    def _extract_interfaces(self, directory: Path, shared: bool) -> None:
        for path in find_markdown_files(directory):
            doc = self._load(path)
            if doc is None:
                continue

            file = self._rel(path)
            stem = path.stem
            if shared:
                pairs = split_shared_id(stem)
                valid = all(is_pair(p) for p in pairs)
                interface_id = canonical_shared_id(pairs) if valid else stem
                interface = Interface(
                    id=interface_id,
                    file=file,
                    kind="shared",
                    interfaces=sorted({normalize_pair(p) for p in pairs}) if valid else [],
                )
            else:
                interface_id = normalize_pair(stem) if is_pair(stem) else stem
                interface = Interface(
                    id=interface_id,
                    file=file,
                    from_feature=doc.get_str("from"),
                    to_feature=doc.get_str("to"),
                    kind=doc.get_str("type") or "interface",
                    shared_types=_unique(doc.get_list("shared_types")),
                )

            if interface_id in self.index.interfaces:
                logger.warning(
                    f"{file} maps to interface id {interface_id}, already taken by "
                    f"{self.index.interfaces[interface_id].file}; keeping the first"
                )
                continue
            self.index.interfaces[interface_id] = interface

            if interface.from_feature in self.index.features:
                self.index.features[interface.from_feature].provide(interface_id)
            if interface.to_feature in self.index.features:
                self.index.features[interface.to_feature].use(interface_id)

    def _record_conflict(self, e: TermConflictError) -> None:
        logger.error(e.message)
        self.stats.term_conflicts.append(e.message)

    def _extract_terms(self) -> None:
        scan_terms(self.root, self.registry, self.term_parser, on_conflict=self._record_conflict)

        by_term: dict[str, list[dict[str, Any]]] = defaultdict(list)
        for ref in self.registry.references:
            canonical = self.registry.resolve(ref.term)
            if canonical is not None:
                by_term[canonical].append({"file": ref.file, "line": ref.line, "context": ref.context})

        for defn in self.registry.list_all():
            self.index.terms[defn.term] = TermUsage(
                term=defn.term,
                file=defn.file,
                line=defn.line,
                scope=defn.scope,
                references=by_term.get(defn.term, []),
            )

        for feature in self.index.features.values():
            feature.terms_defined = [d.term for d in self.registry.definitions_in_file(feature.file)]
            feature.terms_used = _unique(
                [self.registry.resolve(r.term) or r.term for r in self.registry.references_in_file(feature.file)]
            )

    def _build_reverse_mappings(self) -> None:
        features = self.index.features
        code = self.index.code

        for feature in features.values():
            for code_path in feature.code_uses:
                documented_in = code[code_path].documented_in
                if feature.id not in documented_in:
                    documented_in.append(feature.id)
            for target in [*feature.related_features, *feature.depends_on]:
                if target in features and target != feature.id:
                    features[target].add_used_by(feature.id)

        for code_path, code_file in code.items():
            for target in code_file.imports:
                if code_path not in code[target].imported_by:
                    code[target].imported_by.append(code_path)

        # Code outside a feature that imports the feature's own code
        for feature in features.values():
            own = set(feature.code_uses)
            feature.code_used_by = sorted(
                {importer for path in feature.code_uses for importer in code[path].imported_by} - own
            )


def _unique(values: list[str]) -> list[str]:
    return list(dict.fromkeys(v for v in values if v))


def build_reference_index(
    project_root: str | Path = ".",
    output: str | Path | None = None,
    include_symbols: bool = True,
    cfg: dict[str, Any] | None = None,
) -> BuildResult:
    """Build the reference index and write the snapshot (full overwrite).

    Args:
        project_root: Project root directory
        output: Snapshot path (default: paths.index from config)
        include_symbols: Parse code files for imports/exports
        cfg: Runtime configuration (loaded from project_root if omitted)
    """
    root = Path(project_root).resolve()
    cfg = cfg or load_runtime_config(root)
    result = ReferenceIndexBuilder(root, cfg, include_symbols=include_symbols).build()

    target = Path(output) if output else index_path(cfg, root)
    if not target.is_absolute():
        target = root / target
    save_index(result.index, target)
    result.output = target
    return result
