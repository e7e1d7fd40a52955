"""Naming/pair validation for interface and shared-type documents.

Interface documents are named after the feature pair they connect
(``01--02.md``, smaller code first). Shared-type documents join every pair
they serve with ``_`` (``01--02_01--03.md``, pairs sorted). Both sides list
each other in frontmatter (``shared_types`` / ``interfaces``) and those lists
must agree.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from docgraph import frontmatter
from docgraph.config_runtime import docs_path, load_runtime_config
from docgraph.findings import Finding, error, split_by_severity, warning
from docgraph.pairs import SHARED_SEPARATOR, is_pair, normalize_pair, split_shared_id
from docgraph.utils.helpers import list_markdown_files, read_text, relative_posix
from docgraph.utils.logging import logger

__all__ = [
    "NamingValidationResult",
    "normalize_pair",
    "validate_bidirectional_references",
    "validate_interface_name",
    "validate_naming",
    "validate_shared_type_frontmatter",
    "validate_shared_type_name",
]


@dataclass
class NamingValidationResult:
    success: bool
    total_files: int = 0
    passed_files: int = 0
    failed_files: int = 0
    errors: list[Finding] = field(default_factory=list)
    warnings: list[Finding] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "total_files": self.total_files,
            "passed_files": self.passed_files,
            "failed_files": self.failed_files,
            "errors": [f.to_dict() for f in self.errors],
            "warnings": [f.to_dict() for f in self.warnings],
        }


def validate_interface_name(file: str, existing: set[str] | None = None) -> list[Finding]:
    """Check an interface filename (``XX--YY.md``).

    ``existing`` holds the stems of every interface document in the
    directory; an unsorted name whose sorted twin exists is a duplicate.
    """
    stem = Path(file).stem
    if not is_pair(stem):
        return [
            error(
                "format",
                f"Interface filename must look like XX--YY.md, got {Path(file).name}",
                file=file,
                suggestion="Use two 2-digit feature codes joined by '--'",
            )
        ]

    findings = []
    normalized = normalize_pair(stem)
    if stem != normalized:
        findings.append(
            error(
                "sorting",
                f"Pair is not sorted: rename to {normalized}.md",
                file=file,
                subject=normalized,
                suggestion=f"Rename to {normalized}.md",
            )
        )
        if existing and normalized in existing:
            findings.append(
                error(
                    "duplicate",
                    f"{stem}.md duplicates {normalized}.md ({stem} and {normalized} are the same pair)",
                    file=file,
                    subject=normalized,
                    suggestion=f"Merge into {normalized}.md",
                )
            )
    return findings


def validate_shared_type_name(file: str, warn_at_pairs: int = 8, max_pairs: int = 12) -> list[Finding]:
    """Check a shared-type filename (``XX--YY_XX--ZZ.md``)."""
    stem = Path(file).stem
    if SHARED_SEPARATOR not in stem:
        return [
            error(
                "format",
                f"Shared-type filename must join pairs with '_', got {Path(file).name}",
                file=file,
                suggestion="Name it after every interface pair it serves, e.g. 01--02_01--03.md",
            )
        ]

    findings = []
    pairs = split_shared_id(stem)
    for pair in pairs:
        if not is_pair(pair):
            findings.append(error("format", f"'{pair}' is not a valid XX--YY pair", file=file, subject=pair))

    normalized = [normalize_pair(p) for p in pairs]
    canonical = f"{SHARED_SEPARATOR.join(sorted(normalized))}.md"
    unnormalized = normalized != pairs
    if unnormalized:
        findings.append(
            error(
                "sorting",
                f"Pairs are not sorted internally: rename to {canonical}",
                file=file,
                suggestion=f"Rename to {canonical}",
            )
        )

    if len(set(normalized)) != len(normalized):
        findings.append(
            error(
                "duplicate",
                "Duplicate pairs in filename (01--02 and 02--01 are the same pair)",
                file=file,
                suggestion="List each pair once",
            )
        )

    if not unnormalized and normalized != sorted(normalized):
        findings.append(
            error(
                "sorting",
                f"Pairs are not in sorted order: rename to {canonical}",
                file=file,
                suggestion=f"Rename to {canonical}",
            )
        )

    if len(pairs) > max_pairs:
        findings.append(
            error(
                "pair_limit",
                f"Shared type spans {len(pairs)} pairs (maximum {max_pairs})",
                file=file,
                suggestion="Split the shared type or move it to a common module",
            )
        )
    elif len(pairs) > warn_at_pairs:
        findings.append(
            warning(
                "pair_limit",
                f"Shared type spans {len(pairs)} pairs (recommended at most {warn_at_pairs})",
                file=file,
            )
        )
    return findings


def validate_shared_type_frontmatter(file: str, text: str) -> list[Finding]:
    try:
        doc = frontmatter.extract(text)
    except frontmatter.FrontmatterError as e:
        return [error("frontmatter", e.message, file=file)]
    if not doc.present:
        return [error("frontmatter", "Missing frontmatter", file=file)]

    findings = []
    interfaces = doc.get("interfaces")
    if not isinstance(interfaces, list):
        findings.append(
            error("frontmatter", "'interfaces' is missing or not a list", file=file)
        )
    else:
        listed = [str(i) for i in interfaces]
        pair_count = len(split_shared_id(Path(file).stem))
        if len(listed) != pair_count:
            findings.append(
                error(
                    "frontmatter",
                    f"'interfaces' lists {len(listed)} entries but the filename has {pair_count} pairs",
                    file=file,
                )
            )
        if listed != sorted(listed):
            findings.append(
                error(
                    "sorting",
                    "'interfaces' is not sorted",
                    file=file,
                    suggestion=f"Use: {sorted(listed)}",
                )
            )

    doc_type = doc.get_str("type")
    if doc_type != "shared":
        findings.append(
            error("frontmatter", f"type must be \"shared\" (got: {doc_type or 'missing'})", file=file)
        )
    if not doc.get_str("status"):
        findings.append(error("frontmatter", "'status' is missing", file=file))
    return findings


def _list_field(path: Path, key: str) -> list[str] | None:
    try:
        doc = frontmatter.extract(read_text(path))
    except frontmatter.FrontmatterError:
        return None
    value = doc.get(key)
    return [str(v) for v in value] if isinstance(value, list) else None


def validate_bidirectional_references(interfaces_dir: Path, shared_dir: Path, root: Path) -> list[Finding]:
    """Shared types and interfaces must list each other.

    interface -> shared: a missing shared document or a missing back
    reference is an error. shared -> interface: a missing interface document
    (or one without shared_types) is a warning, a missing back reference an
    error.
    """
    if not interfaces_dir.is_dir() or not shared_dir.is_dir():
        return []

    shared_map: dict[str, tuple[str, list[str]]] = {}
    for path in list_markdown_files(shared_dir):
        listed = _list_field(path, "interfaces")
        if listed is not None:
            shared_map[path.stem] = (relative_posix(path, root), listed)

    interface_map: dict[str, tuple[str, list[str]]] = {}
    for path in list_markdown_files(interfaces_dir):
        listed = _list_field(path, "shared_types")
        if listed is not None:
            interface_map[path.stem] = (relative_posix(path, root), listed)

    findings = []
    for name, (file, shared_types) in interface_map.items():
        for shared_name in shared_types:
            entry = shared_map.get(shared_name)
            if entry is None:
                findings.append(
                    error(
                        "reference",
                        f'shared_types references "{shared_name}" but no such shared-type document exists',
                        file=file,
                        subject=shared_name,
                    )
                )
            elif name not in entry[1]:
                findings.append(
                    error(
                        "reference",
                        f'shared_types references "{shared_name}" but {shared_name}.md does not list "{name}"',
                        file=file,
                        subject=shared_name,
                        suggestion=f'Add "{name}" to the interfaces of {shared_name}.md',
                    )
                )

    for name, (file, interfaces) in shared_map.items():
        for interface_name in interfaces:
            entry = interface_map.get(interface_name)
            if entry is None:
                findings.append(
                    warning(
                        "reference",
                        f'interfaces lists "{interface_name}" but that interface document is missing '
                        "or has no shared_types",
                        file=file,
                        subject=interface_name,
                    )
                )
            elif name not in entry[1]:
                findings.append(
                    error(
                        "reference",
                        f'interfaces lists "{interface_name}" but {interface_name}.md does not list "{name}"',
                        file=file,
                        subject=interface_name,
                        suggestion=f'Add "{name}" to the shared_types of {interface_name}.md',
                    )
                )
    return findings


def validate_naming(project_root: str | Path = ".", cfg: dict[str, Any] | None = None) -> NamingValidationResult:
    """Validate interface / shared-type document names and cross-references."""
    root = Path(project_root).resolve()
    cfg = cfg or load_runtime_config(root)
    base = docs_path(cfg, root)

    if not base.is_dir():
        logger.info(f"No documentation directory at {base}, skipping naming validation")
        return NamingValidationResult(success=True)

    interfaces_dir = docs_path(cfg, root, "interfaces")
    shared_dir = docs_path(cfg, root, "shared")
    result = NamingValidationResult(success=True)
    findings: list[Finding] = []

    interface_files = list_markdown_files(interfaces_dir)
    stems = {p.stem for p in interface_files}
    for path in interface_files:
        file_findings = validate_interface_name(relative_posix(path, root), stems)
        _tally(result, file_findings)
        findings.extend(file_findings)

    limits = cfg["validation"]
    for path in list_markdown_files(shared_dir):
        file = relative_posix(path, root)
        file_findings = validate_shared_type_name(
            file, warn_at_pairs=limits["warn_shared_pairs"], max_pairs=limits["max_shared_pairs"]
        )
        file_findings += validate_shared_type_frontmatter(file, read_text(path))
        _tally(result, file_findings)
        findings.extend(file_findings)

    findings.extend(validate_bidirectional_references(interfaces_dir, shared_dir, root))

    result.errors, result.warnings = split_by_severity(findings)
    result.failed_files = result.total_files - result.passed_files
    result.success = not result.errors
    logger.debug(
        f"Naming validation: {result.total_files} files, {len(result.errors)} errors, "
        f"{len(result.warnings)} warnings"
    )
    return result


def _tally(result: NamingValidationResult, file_findings: list[Finding]) -> None:
    result.total_files += 1
    if not any(f.is_error for f in file_findings):
        result.passed_files += 1
