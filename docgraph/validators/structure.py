"""Structure validation - dependency cycles, interface endpoints, required fields.

Works on the feature and interface documents directly, so it needs no
reference index:

- ``depends_on`` chains between features must not loop back on themselves
- every interface document names a ``from`` and ``to`` feature that exists,
  and the providing feature mentions the interface
- feature and interface frontmatter carries the configured required fields
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from docgraph import frontmatter
from docgraph.config_runtime import docs_path, load_runtime_config
from docgraph.cycles import find_cycles
from docgraph.findings import Finding, error, split_by_severity, warning
from docgraph.pairs import is_pair, normalize_pair
from docgraph.utils.helpers import find_markdown_files, read_text, relative_posix
from docgraph.utils.logging import logger


@dataclass
class _Document:
    file: str
    doc: frontmatter.Frontmatter
    text: str


@dataclass
class StructureResult:
    success: bool
    total_features: int = 0
    total_interfaces: int = 0
    cycles: list[list[str]] = field(default_factory=list)
    errors: list[Finding] = field(default_factory=list)
    warnings: list[Finding] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "total_features": self.total_features,
            "total_interfaces": self.total_interfaces,
            "cycles": self.cycles,
            "errors": [f.to_dict() for f in self.errors],
            "warnings": [f.to_dict() for f in self.warnings],
        }


def _load_documents(directory: Path, root: Path, findings: list[Finding]) -> list[tuple[Path, _Document]]:
    documents = []
    for path in find_markdown_files(directory):
        file = relative_posix(path, root)
        try:
            text = read_text(path)
            doc = frontmatter.extract(text)
        except frontmatter.FrontmatterError as e:
            findings.append(error("frontmatter", e.message, file=file))
            continue
        except OSError as e:
            findings.append(error("unreadable", f"Cannot read {file}: {e}", file=file))
            continue
        documents.append((path, _Document(file=file, doc=doc, text=text)))
    return documents


def check_required_fields(document: _Document, required: list[str]) -> list[Finding]:
    """One error per required frontmatter field that is missing or blank."""
    findings = []
    for name in required:
        value = document.doc.get(name)
        if value is None or (isinstance(value, str) and not value.strip()):
            findings.append(
                error(
                    "missing_field",
                    f"Missing '{name}' field",
                    file=document.file,
                    subject=name,
                    suggestion=f"Add '{name}:' to the frontmatter",
                )
            )
    return findings


def check_dependency_cycles(features: dict[str, _Document]) -> tuple[list[list[str]], list[Finding]]:
    """Cycles in the ``depends_on`` graph, plus warnings for unknown targets."""
    findings = []
    edges: dict[str, list[str]] = {}
    for feature_id, document in features.items():
        edges[feature_id] = []
        for target in document.doc.get_list("depends_on"):
            if target in features:
                edges[feature_id].append(target)
            else:
                findings.append(
                    warning(
                        "unknown_dependency",
                        f"{feature_id} depends on unknown feature {target}",
                        file=document.file,
                        subject=target,
                    )
                )

    cycles = find_cycles(sorted(edges), lambda node: edges[node])
    for cycle in cycles:
        findings.append(
            error(
                "circular_dependency",
                f"Circular dependency: {' -> '.join(cycle)}",
                file=features[cycle[0]].file,
                subject=cycle[0],
                suggestion="Break the loop by removing one depends_on entry",
                details={"cycle": cycle},
            )
        )
    return cycles, findings


def check_interface_endpoints(
    interface_id: str, document: _Document, features: dict[str, _Document]
) -> list[Finding]:
    """``from``/``to`` must name documented features; the provider should mention the id."""
    findings = []
    for key in ("from", "to"):
        feature_id = document.doc.get_str(key)
        if feature_id and feature_id not in features:
            findings.append(
                error(
                    f"{key}_not_found",
                    f"{interface_id}: '{key}' feature {feature_id} has no feature document",
                    file=document.file,
                    subject=feature_id,
                )
            )

    provider = features.get(document.doc.get_str("from"))
    if provider is not None:
        listed = [normalize_pair(i) for i in provider.doc.get_list("interfaces")]
        if interface_id not in listed and interface_id not in provider.text:
            findings.append(
                warning(
                    "not_referenced",
                    f"{interface_id} is not mentioned by its provider {document.doc.get_str('from')}",
                    file=document.file,
                    subject=interface_id,
                    suggestion=f"List {interface_id} under 'interfaces' in {provider.file}",
                )
            )
    return findings


def validate_structure(project_root: str | Path = ".", cfg: dict[str, Any] | None = None) -> StructureResult:
    """Run every structure check over the project's feature and interface documents."""
    root = Path(project_root).resolve()
    cfg = cfg or load_runtime_config(root)
    rules = cfg["validation"]
    findings: list[Finding] = []

    features: dict[str, _Document] = {}
    for path, document in _load_documents(docs_path(cfg, root, "features"), root, findings):
        feature_id = document.doc.get_str("feature") or path.stem
        findings += check_required_fields(document, rules["feature_required_fields"])
        if feature_id in features:
            findings.append(
                error(
                    "duplicate_feature",
                    f"Feature {feature_id} is already defined in {features[feature_id].file}",
                    file=document.file,
                    subject=feature_id,
                )
            )
            continue
        features[feature_id] = document

    cycles, cycle_findings = check_dependency_cycles(features)
    findings += cycle_findings

    interfaces = _load_documents(docs_path(cfg, root, "interfaces"), root, findings)
    for path, document in interfaces:
        interface_id = normalize_pair(path.stem) if is_pair(path.stem) else path.stem
        findings += check_required_fields(document, rules["interface_required_fields"])
        findings += check_interface_endpoints(interface_id, document, features)

    errors, warnings = split_by_severity(findings)
    logger.debug(
        f"Structure check: {len(features)} features, {len(interfaces)} interfaces, "
        f"{len(errors)} errors, {len(warnings)} warnings"
    )
    return StructureResult(
        success=not errors,
        total_features=len(features),
        total_interfaces=len(interfaces),
        cycles=cycles,
        errors=errors,
        warnings=warnings,
    )
