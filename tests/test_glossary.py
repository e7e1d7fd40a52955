"""Tests for glossary generation."""

from docgraph.terms.glossary import group_by_type, render_glossary
from docgraph.terms.registry import TermRegistry
from docgraph.terms.types import TermDefinition
from docgraph.validators.terms import load_term_registry


def _registry(*definitions):
    registry = TermRegistry()
    for defn in definitions:
        registry.add_definition(defn)
    return registry


def test_group_order():
    definitions = [
        TermDefinition(term="Zeta", file="g.md", line=1, type="widget"),
        TermDefinition(term="Alpha", file="g.md", line=2),
        TermDefinition(term="Beta", file="g.md", line=3, type="process"),
        TermDefinition(term="Gamma", file="g.md", line=4, type="concept"),
        TermDefinition(term="Delta", file="g.md", line=5, type="anchor"),
    ]

    groups = group_by_type(definitions)

    assert [t for t, _ in groups] == ["concept", "process", "anchor", "widget", ""]


def test_render_term_sections():
    registry = _registry(
        TermDefinition(
            term="Reference Index",
            file="docs/GLOSSARY.md",
            line=3,
            scope="global",
            type="entity",
            aliases=["refindex"],
            related=["Feature Document"],
            definition="Persisted snapshot of the documentation graph.",
        ),
        TermDefinition(term="Finding", file="tasks/features/02.md", line=9, scope="document"),
    )

    text = render_glossary(registry, generated="2026-01-01T00:00:00+00:00")

    assert text.startswith("---\ngenerated_by: docgraph\ntype: glossary\ngenerated: '2026-01-01T00:00:00+00:00'\n---\n")
    assert "## Entity\n\n### [[Reference Index]]\n\n**Type**: entity\n**Aliases**: refindex\n" in text
    assert "**Related**: [[Feature Document]]\n\nPersisted snapshot of the documentation graph.\n" in text
    assert "**Source**: docs/GLOSSARY.md:3" in text
    assert "Finding" not in text
    assert "Finding" in render_glossary(registry, include_document=True)


def test_saved_glossary_is_skipped_by_scanner(sample_project, clean_env):
    registry = load_term_registry(sample_project)
    generated = render_glossary(registry, include_document=True)
    (sample_project / "docs" / "terms").mkdir(parents=True)
    (sample_project / "docs" / "terms" / "all.md").write_text(generated, encoding="utf-8")

    rescanned = load_term_registry(sample_project)

    assert sorted(rescanned.definitions) == sorted(registry.definitions)
    assert len(rescanned.references) == len(registry.references)
