"""Tests for the term registry and terminology validation."""

import pytest

from docgraph.errors import TermConflictError
from docgraph.terms import TermDefinition, TermReference, TermRegistry
from docgraph.terms.similarity import definition_similarity, name_similarity, token_overlap, tokenize
from docgraph.validators.terms import load_term_registry, validate_terms


def definition(term, file="docs/GLOSSARY.md", line=1, scope="global", **kwargs):
    return TermDefinition(term=term, file=file, line=line, scope=scope, **kwargs)


def by_type(findings, type_):
    return [f for f in findings if f.type == type_]


@pytest.fixture
def registry():
    return TermRegistry()


class TestRegistry:
    def test_duplicate_definition_raises(self, registry):
        registry.add_definition(definition("Index", file="docs/a.md"))
        with pytest.raises(TermConflictError) as exc:
            registry.add_definition(definition("Index", file="docs/b.md"))
        assert exc.value.existing_file == "docs/a.md"
        assert "multiple files" in exc.value.message

    def test_duplicate_in_same_file_raises(self, registry):
        registry.add_definition(definition("Index"))
        with pytest.raises(TermConflictError, match="more than once"):
            registry.add_definition(definition("Index", line=9))

    def test_alias_resolution(self, registry):
        registry.add_definition(definition("Reference Index", aliases=["refindex"]))
        registry.add_reference(TermReference(term="refindex", file="a.md", line=1))
        registry.add_reference(TermReference(term="Reference Index", file="b.md", line=2))

        assert registry.resolve("refindex") == "Reference Index"
        assert registry.find("refindex").term == "Reference Index"
        assert registry.usage_count("refindex") == 2
        assert registry.find("missing") is None

    def test_search_and_listing(self, registry):
        registry.add_definition(definition("beta", definition="second letter"))
        registry.add_definition(definition("Alpha", aliases=["first"]))

        assert [d.term for d in registry.list_all()] == ["Alpha", "beta"]
        assert [d.term for d in registry.search("FIRST")] == ["Alpha"]
        assert [d.term for d in registry.search("letter")] == ["beta"]


class TestValidation:
    def test_undefined_reference(self, registry):
        registry.add_reference(TermReference(term="Ghost", file="a.md", line=3))

        result = registry.validate()

        assert not result.success
        [finding] = result.errors
        assert finding.type == "undefined_term"
        assert finding.location == "a.md:3"
        assert result.stats["undefined"] == 1

    def test_scope_violation_names_referencing_file(self, registry):
        registry.add_definition(definition("Local", file="doc-a.md", scope="document", related=["Other"]))
        registry.add_definition(definition("Other", related=["Local"]))
        registry.add_reference(TermReference(term="Local", file="doc-a.md", line=5))
        registry.add_reference(TermReference(term="Local", file="doc-b.md", line=7))

        result = registry.validate()

        violations = by_type(result.errors, "scope_violation")
        assert len(violations) == 1
        assert violations[0].file == "doc-b.md"
        assert "doc-a.md" in violations[0].message

    def test_global_terms_are_usable_everywhere(self, registry):
        registry.add_definition(definition("Shared", related=["Shared"]))
        registry.add_reference(TermReference(term="Shared", file="anywhere.md", line=1))
        assert not by_type(registry.validate().errors, "scope_violation")

    def test_unused_and_isolated(self, registry):
        registry.add_definition(definition("Lonely"))
        registry.add_reference(TermReference(term="Lonely", file="a.md", line=1))
        registry.add_definition(definition("Forgotten", parent="Lonely"))

        result = registry.validate()

        assert [f.subject for f in by_type(result.warnings, "unused_term")] == ["Forgotten"]
        isolated = by_type(result.warnings, "isolated_term")
        assert [f.subject for f in isolated] == ["Lonely"]
        assert "(1 references)" in isolated[0].message
        assert result.success

    def test_exactly_one_cycle_reported(self, registry):
        registry.add_definition(definition("A", related=["B"]))
        registry.add_definition(definition("B", parent="C"))
        registry.add_definition(definition("C", related=["A"]))
        registry.add_definition(definition("D", related=["A"]))

        result = registry.validate()

        cycles = by_type(result.warnings, "circular_reference")
        assert len(cycles) == 1
        assert cycles[0].details["cycle"] == ["A", "B", "C", "A"]
        assert result.stats["circular"] == 1

    def test_duplicate_definitions_under_different_names(self, registry):
        text = "Persisted snapshot of the four entity bidirectional documentation graph."
        registry.add_definition(definition("Reference Index", definition=text))
        registry.add_definition(definition("Graph Snapshot", definition=text))
        registry.add_definition(definition("Feature Document", definition="A markdown document for one feature."))

        duplicates = by_type(registry.validate().warnings, "duplicate_term")

        assert len(duplicates) == 1
        assert {duplicates[0].subject, duplicates[0].details["other"]} == {"Reference Index", "Graph Snapshot"}

    def test_near_identical_definitions(self, registry):
        registry.add_definition(
            definition("Interface Validation", definition="Process to validate code interfaces for documentation")
        )
        registry.add_definition(
            definition("Code Validation", definition="Process to validate code interfaces for documentation coverage")
        )

        [duplicate] = by_type(registry.validate().warnings, "duplicate_term")
        assert duplicate.details["similarity"] == pytest.approx(7 / 8, abs=1e-3)

    def test_similar_names_with_different_definitions(self, registry):
        registry.add_definition(definition("Reference Index", definition="Persisted documentation graph."))
        registry.add_definition(definition("Index Reference", definition="A pointer to a glossary entry."))
        assert not by_type(registry.validate().warnings, "duplicate_term")

    def test_names_compared_when_no_definitions(self, registry):
        registry.add_definition(definition("Reference Index"))
        registry.add_definition(definition("Index Reference"))
        registry.add_definition(definition("Reference Graph"))

        duplicates = by_type(registry.validate().warnings, "duplicate_term")

        assert len(duplicates) == 1
        assert {duplicates[0].subject, duplicates[0].details["other"]} == {"Reference Index", "Index Reference"}

    def test_related_pairs_are_not_duplicates(self, registry):
        registry.add_definition(definition("Reference Index", related=["Index Reference"]))
        registry.add_definition(definition("Index Reference", related=["Reference Index"]))
        assert not by_type(registry.validate().warnings, "duplicate_term")

    def test_custom_scorer(self):
        registry = TermRegistry(scorer=lambda a, b: 1.0, duplicate_threshold=0.5)
        registry.add_definition(definition("X"))
        registry.add_definition(definition("Y"))
        assert registry.validate().stats["duplicates"] == 1


class TestSimilarity:
    def test_tokenize_splits_camel_case(self):
        assert tokenize("ReferenceIndex builder") == {"reference", "index", "builder"}

    def test_token_overlap(self):
        assert token_overlap("Reference Index", "Reference Graph") == pytest.approx(1 / 3)
        assert token_overlap("", "x") == 0.0

    def test_aliases_count(self):
        a = definition("RI", aliases=["Reference Index"])
        b = definition("Index Reference")
        assert name_similarity(a, b) == 1.0

    def test_definition_similarity_ignores_names_when_defined(self):
        a = definition("Reference Index", definition="Persisted graph")
        b = definition("Index Reference", definition="Glossary pointer")
        c = definition("Snapshot", definition="persisted GRAPH")
        assert definition_similarity(a, b) == 0.0
        assert definition_similarity(a, c) == 1.0
        assert definition_similarity(a, definition("Reference Index")) == 0.0


class TestProjectTerms:
    def test_sample_project(self, sample_project, clean_env):
        result = validate_terms(sample_project)

        assert result.success
        stats = result.stats
        assert stats["total_definitions"] == 3
        assert stats["global_definitions"] == 2
        assert stats["document_definitions"] == 1
        assert stats["total_references"] == 5
        assert stats["unique_referenced"] == 2
        assert [f.subject for f in by_type(result.warnings, "unused_term")] == ["Finding"]

    def test_reference_line_numbers_include_frontmatter(self, sample_project, clean_env):
        registry = load_term_registry(sample_project)
        refs = registry.references_in_file("tasks/features/01_GraphBuild.md")
        assert [(r.term, r.line) for r in refs] == [("Reference Index", 17), ("Feature Document", 17)]

    def test_document_term_leaking_is_an_error(self, sample_project, write_file, clean_env):
        write_file(sample_project, "tasks/notes.md", "See [[Finding]].\n")

        result = validate_terms(sample_project)

        assert not result.success
        [violation] = result.errors
        assert violation.type == "scope_violation"
        assert violation.file == "tasks/notes.md"

    def test_conflict_propagates(self, sample_project, write_file, clean_env):
        write_file(sample_project, "docs/terms/extra.md", "## [[Finding]]\n\nAgain.\n")
        with pytest.raises(TermConflictError):
            validate_terms(sample_project)
