"""Term registry - definitions, references and definitional integrity checks.

One registry instance holds the terms of a single batch (one build or one
validation run). Nothing is process-global.
"""

from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any

from docgraph.cycles import find_cycles
from docgraph.errors import TermConflictError
from docgraph.findings import Finding, error, warning

from .similarity import DUPLICATE_THRESHOLD, SimilarityScorer, definition_similarity
from .types import TermDefinition, TermReference


@dataclass
class TermValidationResult:
    success: bool
    errors: list[Finding] = field(default_factory=list)
    warnings: list[Finding] = field(default_factory=list)
    stats: dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "errors": [f.to_dict() for f in self.errors],
            "warnings": [f.to_dict() for f in self.warnings],
            "stats": self.stats,
        }


class TermRegistry:
    """Registry of term definitions and references.

    Canonical names are unique: a second definition of the same name (even
    from the same file) raises TermConflictError.
    """

    def __init__(
        self,
        scorer: SimilarityScorer = definition_similarity,
        duplicate_threshold: float = DUPLICATE_THRESHOLD,
    ):
        self.definitions: dict[str, TermDefinition] = {}
        self.references: list[TermReference] = []
        self.by_file: dict[str, list[TermDefinition]] = defaultdict(list)
        self.by_scope: dict[str, list[TermDefinition]] = defaultdict(list)
        self.aliases: dict[str, str] = {}
        self.scorer = scorer
        self.duplicate_threshold = duplicate_threshold

    def add_definition(self, defn: TermDefinition) -> None:
        existing = self.definitions.get(defn.term)
        if existing is not None:
            raise TermConflictError(defn.term, existing.file, defn.file)

        self.definitions[defn.term] = defn
        self.by_file[defn.file].append(defn)
        self.by_scope[defn.scope].append(defn)
        for alias in defn.aliases:
            # First alias owner wins; canonical names always take precedence in resolve()
            self.aliases.setdefault(alias, defn.term)

    def add_reference(self, ref: TermReference) -> None:
        self.references.append(ref)

    def resolve(self, name_or_alias: str) -> str | None:
        """Canonical term name for ``name_or_alias``, or None."""
        if name_or_alias in self.definitions:
            return name_or_alias
        return self.aliases.get(name_or_alias)

    def find(self, name_or_alias: str) -> TermDefinition | None:
        canonical = self.resolve(name_or_alias)
        return self.definitions.get(canonical) if canonical else None

    def definitions_in_file(self, file: str) -> list[TermDefinition]:
        return list(self.by_file.get(file, []))

    def references_in_file(self, file: str) -> list[TermReference]:
        return [r for r in self.references if r.file == file]

    def references_to(self, term: str) -> list[TermReference]:
        """References resolving to canonical ``term`` (aliases included)."""
        return [r for r in self.references if self.resolve(r.term) == term]

    def usage_count(self, term: str) -> int:
        canonical = self.resolve(term)
        if canonical is None:
            return 0
        return len(self.references_to(canonical))

    def list_all(self) -> list[TermDefinition]:
        return sorted(self.definitions.values(), key=lambda d: d.term.lower())

    def search(self, query: str) -> list[TermDefinition]:
        """Case-insensitive substring search over names, aliases and definitions."""
        needle = query.lower().strip()
        if not needle:
            return self.list_all()
        return [
            d
            for d in self.list_all()
            if needle in d.term.lower()
            or any(needle in a.lower() for a in d.aliases)
            or needle in d.definition.lower()
        ]

    def validate(self) -> TermValidationResult:
        errors: list[Finding] = []
        warnings: list[Finding] = []

        undefined = self._check_references(errors)
        unused = self._check_unused(warnings)
        isolated = self._check_isolated(warnings)
        circular = self._check_circular(warnings)
        duplicates = self._check_duplicates(warnings)

        global_count = len(self.by_scope.get("global", []))
        stats = {
            "total_definitions": len(self.definitions),
            "global_definitions": global_count,
            "document_definitions": len(self.definitions) - global_count,
            "total_references": len(self.references),
            "unique_referenced": len({self.resolve(r.term) or r.term for r in self.references}),
            "undefined": undefined,
            "unused": unused,
            "isolated": isolated,
            "circular": circular,
            "duplicates": duplicates,
        }
        return TermValidationResult(success=not errors, errors=errors, warnings=warnings, stats=stats)

    def _check_references(self, errors: list[Finding]) -> int:
        undefined = 0
        for ref in self.references:
            defn = self.find(ref.term)
            if defn is None:
                undefined += 1
                errors.append(
                    error(
                        "undefined_term",
                        f'Term "{ref.term}" is referenced but not defined',
                        file=ref.file,
                        line=ref.line,
                        subject=ref.term,
                        suggestion=f"Define it with a '## [[{ref.term}]]' heading in a glossary file",
                    )
                )
            elif defn.scope == "document" and defn.file != ref.file:
                errors.append(
                    error(
                        "scope_violation",
                        f'Document-scoped term "{defn.term}" used outside {defn.file}',
                        file=ref.file,
                        line=ref.line,
                        subject=defn.term,
                        suggestion=f"Move the definition of {defn.term} from {defn.file} to a glossary file",
                    )
                )
        return undefined

    def _check_unused(self, warnings: list[Finding]) -> int:
        used = {self.resolve(r.term) for r in self.references}
        count = 0
        for defn in self.list_all():
            if defn.term not in used:
                count += 1
                warnings.append(
                    warning(
                        "unused_term",
                        f'Term "{defn.term}" is defined but never referenced',
                        file=defn.file,
                        line=defn.line,
                        subject=defn.term,
                    )
                )
        return count

    def _check_isolated(self, warnings: list[Finding]) -> int:
        count = 0
        for defn in self.list_all():
            if defn.parent or defn.related:
                continue
            count += 1
            uses = self.usage_count(defn.term)
            warnings.append(
                warning(
                    "isolated_term",
                    f'Term "{defn.term}" has no parent or related terms ({uses} references)',
                    file=defn.file,
                    line=defn.line,
                    subject=defn.term,
                    suggestion="Add **Related** or **Parent** metadata to connect it to the glossary",
                    details={"usage_count": uses},
                )
            )
        return count

    def _edges(self, term: str) -> list[str]:
        defn = self.definitions[term]
        targets = [*defn.related]
        if defn.parent:
            targets.append(defn.parent)
        resolved = []
        for target in targets:
            canonical = self.resolve(target)
            if canonical is not None and canonical not in resolved:
                resolved.append(canonical)
        return resolved

    def _check_circular(self, warnings: list[Finding]) -> int:
        """DFS over related + parent edges; one warning per distinct cycle."""
        cycles = find_cycles(sorted(self.definitions), self._edges)
        for cycle in cycles:
            defn = self.definitions[cycle[0]]
            warnings.append(
                warning(
                    "circular_reference",
                    f"Circular term reference: {' -> '.join(cycle)}",
                    file=defn.file,
                    line=defn.line,
                    subject=cycle[0],
                    details={"cycle": cycle},
                )
            )
        return len(cycles)

    def _check_duplicates(self, warnings: list[Finding]) -> int:
        defs = self.list_all()
        count = 0
        for i, a in enumerate(defs):
            for b in defs[i + 1:]:
                if b.term in a.related and a.term in b.related:
                    continue
                score = self.scorer(a, b)
                if score > self.duplicate_threshold:
                    count += 1
                    warnings.append(
                        warning(
                            "duplicate_term",
                            f'Terms "{a.term}" and "{b.term}" look like duplicates (similarity {score:.2f})',
                            file=b.file,
                            line=b.line,
                            subject=b.term,
                            suggestion="Merge them, or list each other under **Related** if both are needed",
                            details={"other": a.term, "other_file": a.file, "similarity": round(score, 3)},
                        )
                    )
        return count
