"""Tests for markdown term extraction."""

from docgraph.parsers.term_parser import TermParser, code_block_lines, is_global_scope, term_name

GLOSSARY = """\
# Glossary

## [[Reference Index]]

**Type**: Entity
**Aliases**: refindex, RI
**Related**: [[Feature Document]], [[Term|terms]]
**Parent**: [[Graph]]
**Not to Confuse**: [[Search Index]]

Persisted snapshot of the
documentation graph.

Second paragraph is not part of the definition.

### [[Term]]

A named concept.
"""


class TestHelpers:
    def test_term_name_drops_label(self):
        assert term_name(" Term | the terms ") == "Term"

    def test_code_block_lines(self):
        lines = ["a", "```python", "[[X]]", "```", "b", "~~~", "never closed"]
        assert code_block_lines(lines) == {1, 2, 3, 5, 6}

    def test_global_scope(self):
        paths = ["docs/GLOSSARY.md", "./docs/terms/"]
        assert is_global_scope("docs/GLOSSARY.md", paths)
        assert is_global_scope("docs/terms/graph.md", paths)
        assert is_global_scope("tasks/project-glossary.md", paths)
        assert not is_global_scope("tasks/features/01_GraphBuild.md", paths)
        assert not is_global_scope("docs/terms.md", paths)


class TestDefinitions:
    def test_metadata_and_definition(self):
        parser = TermParser()
        definitions = parser.extract_definitions(GLOSSARY, "docs/GLOSSARY.md")

        assert [d.term for d in definitions] == ["Reference Index", "Term"]
        ri = definitions[0]
        assert ri.line == 3
        assert ri.scope == "global"
        assert ri.type == "entity"
        assert ri.aliases == ["refindex", "RI"]
        assert ri.related == ["Feature Document", "Term"]
        assert ri.parent == "Graph"
        assert ri.not_to_confuse == "Search Index"
        assert ri.definition == "Persisted snapshot of the documentation graph."

    def test_deeper_heading_without_metadata(self):
        term = TermParser().extract_definitions(GLOSSARY, "docs/GLOSSARY.md")[1]
        assert term.line == 16
        assert term.type is None
        assert term.aliases == []
        assert term.definition == "A named concept."

    def test_document_scope_and_line_offset(self):
        definitions = TermParser().extract_definitions("## [[Local]]\n\nOnly here.\n", "tasks/a.md", line_offset=5)
        assert definitions[0].scope == "document"
        assert definitions[0].line == 6

    def test_level_one_heading_is_not_a_definition(self):
        assert TermParser().extract_definitions("# [[Title]]\n", "a.md") == []

    def test_definitions_inside_code_blocks_are_ignored(self):
        text = "```\n## [[Fake]]\n```\n## [[Real]]\n"
        assert [d.term for d in TermParser().extract_definitions(text, "a.md")] == ["Real"]


class TestReferences:
    def test_references_skip_headings_code_and_inline_code(self):
        text = "\n".join(
            [
                "## [[Defined]]",
                "Uses [[Alpha]] and [[Beta|the beta]].",
                "Inline `[[NotARef]]` code.",
                "```",
                "[[InCode]]",
                "```",
                "Again [[Alpha]]",
            ]
        )
        refs = TermParser().extract_references(text, "a.md")

        assert [(r.term, r.line) for r in refs] == [("Alpha", 2), ("Beta", 2), ("Alpha", 7)]
        assert refs[0].context == "Uses [[Alpha]] and [[Beta|the beta]]."

    def test_metadata_lines_are_references(self):
        refs = TermParser().extract_references(GLOSSARY, "docs/GLOSSARY.md")
        assert {r.term for r in refs} == {"Feature Document", "Term", "Graph", "Search Index"}
