"""Reference graph entities and their persisted (JSON) form."""

from dataclasses import dataclass, field
from typing import Any

from docgraph.utils.constants import INDEX_VERSION


def _append_unique(items: list[str], value: str) -> None:
    if value not in items:
        items.append(value)


@dataclass
class Feature:
    """A feature document and everything it links to."""

    id: str
    file: str
    code_uses: list[str] = field(default_factory=list)
    code_used_by: list[str] = field(default_factory=list)
    related_features: list[str] = field(default_factory=list)
    depends_on: list[str] = field(default_factory=list)
    used_by_features: list[str] = field(default_factory=list)
    interfaces_provided: list[str] = field(default_factory=list)
    interfaces_used: list[str] = field(default_factory=list)
    terms_defined: list[str] = field(default_factory=list)
    terms_used: list[str] = field(default_factory=list)
    tested_by: list[str] = field(default_factory=list)

    def provide(self, interface_id: str) -> None:
        _append_unique(self.interfaces_provided, interface_id)

    def use(self, interface_id: str) -> None:
        _append_unique(self.interfaces_used, interface_id)

    def add_used_by(self, feature_id: str) -> None:
        _append_unique(self.used_by_features, feature_id)

    def forward_edge_count(self) -> int:
        return (
            len(self.code_uses)
            + len(self.related_features)
            + len(self.depends_on)
            + len(self.interfaces_provided)
            + len(self.interfaces_used)
            + len(self.terms_used)
            + len(self.tested_by)
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "file": self.file,
            "code": {"uses": self.code_uses, "used_by": self.code_used_by},
            "features": {
                "related": self.related_features,
                "depends_on": self.depends_on,
                "used_by": self.used_by_features,
            },
            "interfaces": {"provides": self.interfaces_provided, "uses": self.interfaces_used},
            "terms": {"defines": self.terms_defined, "uses": self.terms_used},
            "tests": {"tested_by": self.tested_by},
        }

    @classmethod
    def from_dict(cls, feature_id: str, data: dict[str, Any]) -> "Feature":
        code = data.get("code", {})
        features = data.get("features", {})
        interfaces = data.get("interfaces", {})
        terms = data.get("terms", {})
        tests = data.get("tests", {})
        return cls(
            id=feature_id,
            file=data.get("file", ""),
            code_uses=list(code.get("uses", [])),
            code_used_by=list(code.get("used_by", [])),
            related_features=list(features.get("related", [])),
            depends_on=list(features.get("depends_on", [])),
            used_by_features=list(features.get("used_by", [])),
            interfaces_provided=list(interfaces.get("provides", [])),
            interfaces_used=list(interfaces.get("uses", [])),
            terms_defined=list(terms.get("defines", [])),
            terms_used=list(terms.get("uses", [])),
            tested_by=list(tests.get("tested_by", [])),
        )


@dataclass
class CodeFile:
    """A source, test or config file referenced by at least one feature."""

    path: str
    kind: str = "source"  # source, test, config
    documented_in: list[str] = field(default_factory=list)
    imports: list[str] = field(default_factory=list)
    imported_by: list[str] = field(default_factory=list)
    exports: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.kind,
            "documented_in": self.documented_in,
            "imports": self.imports,
            "imported_by": self.imported_by,
            "exports": self.exports,
        }

    @classmethod
    def from_dict(cls, path: str, data: dict[str, Any]) -> "CodeFile":
        return cls(
            path=path,
            kind=data.get("type", "source"),
            documented_in=list(data.get("documented_in", [])),
            imports=list(data.get("imports", [])),
            imported_by=list(data.get("imported_by", [])),
            exports=list(data.get("exports", [])),
        )


@dataclass
class Interface:
    """An interface (pair) document, or a shared-type document (kind='shared')."""

    id: str
    file: str
    from_feature: str = ""
    to_feature: str = ""
    kind: str = ""
    shared_types: list[str] = field(default_factory=list)
    interfaces: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "file": self.file,
            "from": self.from_feature,
            "to": self.to_feature,
            "type": self.kind,
            "shared_types": self.shared_types,
            "interfaces": self.interfaces,
        }

    @classmethod
    def from_dict(cls, interface_id: str, data: dict[str, Any]) -> "Interface":
        return cls(
            id=interface_id,
            file=data.get("file", ""),
            from_feature=data.get("from", ""),
            to_feature=data.get("to", ""),
            kind=data.get("type", ""),
            shared_types=list(data.get("shared_types", [])),
            interfaces=list(data.get("interfaces", [])),
        )


@dataclass
class TermUsage:
    """A term's definition site plus every reference to it."""

    term: str
    file: str
    line: int
    scope: str
    references: list[dict[str, Any]] = field(default_factory=list)

    @property
    def usage_count(self) -> int:
        return len(self.references)

    def to_dict(self) -> dict[str, Any]:
        return {
            "definition": {"file": self.file, "line": self.line, "scope": self.scope},
            "references": self.references,
            "usage_count": self.usage_count,
        }

    @classmethod
    def from_dict(cls, term: str, data: dict[str, Any]) -> "TermUsage":
        definition = data.get("definition", {})
        return cls(
            term=term,
            file=definition.get("file", ""),
            line=int(definition.get("line", 0)),
            scope=definition.get("scope", "document"),
            references=list(data.get("references", [])),
        )


@dataclass
class BuildStats:
    features: int = 0
    code_files: int = 0
    interfaces: int = 0
    terms: int = 0
    total_references: int = 0
    skipped_documents: list[str] = field(default_factory=list)
    duplicate_features: list[str] = field(default_factory=list)
    parse_failures: dict[str, list[str]] = field(default_factory=dict)
    term_conflicts: list[str] = field(default_factory=list)
    build_time_ms: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "features": self.features,
            "code_files": self.code_files,
            "interfaces": self.interfaces,
            "terms": self.terms,
            "total_references": self.total_references,
            "skipped_documents": self.skipped_documents,
            "duplicate_features": self.duplicate_features,
            "parse_failures": self.parse_failures,
            "term_conflicts": self.term_conflicts,
            "build_time_ms": self.build_time_ms,
        }


@dataclass
class ReferenceIndex:
    """The four-entity bidirectional reference graph."""

    generated: str = ""
    version: str = INDEX_VERSION
    features: dict[str, Feature] = field(default_factory=dict)
    code: dict[str, CodeFile] = field(default_factory=dict)
    interfaces: dict[str, Interface] = field(default_factory=dict)
    terms: dict[str, TermUsage] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "version": self.version,
            "generated": self.generated,
            "features": {k: v.to_dict() for k, v in self.features.items()},
            "code": {k: v.to_dict() for k, v in self.code.items()},
            "interfaces": {k: v.to_dict() for k, v in self.interfaces.items()},
            "terms": {k: v.to_dict() for k, v in self.terms.items()},
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ReferenceIndex":
        return cls(
            generated=data.get("generated", ""),
            version=data.get("version", INDEX_VERSION),
            features={k: Feature.from_dict(k, v) for k, v in data.get("features", {}).items()},
            code={k: CodeFile.from_dict(k, v) for k, v in data.get("code", {}).items()},
            interfaces={k: Interface.from_dict(k, v) for k, v in data.get("interfaces", {}).items()},
            terms={k: TermUsage.from_dict(k, v) for k, v in data.get("terms", {}).items()},
        )
