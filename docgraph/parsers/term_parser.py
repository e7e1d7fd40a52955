"""Extract term definitions and ``[[Term]]`` references from markdown.

Definition syntax (heading level 2 or deeper)::

    ## [[Reference Index]]

    **Type**: entity
    **Aliases**: refindex, RI
    **Related**: [[Feature Document]], [[Term]]
    **Parent**: [[Graph]]

    Persisted snapshot of the four-entity bidirectional graph.

Everything inside fenced code blocks is ignored.
"""

import re
from collections.abc import Iterable
from pathlib import PurePosixPath

from docgraph.terms.types import TermDefinition, TermReference

DEFINITION_HEADING = re.compile(r"^(#{2,})\s+\[\[([^\]]+)\]\]")
ANY_HEADING = re.compile(r"^#{1,6}\s")
TERM_LINK = re.compile(r"\[\[([^\]]+)\]\]")
INLINE_CODE = re.compile(r"`[^`\n]*`")
FENCE = re.compile(r"^(`{3,}|~{3,})")

_META_PATTERNS = {
    "type": re.compile(r"\*\*Type\*\*:\s*(\w+)", re.IGNORECASE),
    "aliases": re.compile(r"\*\*Aliases\*\*:\s*([^\n]+)", re.IGNORECASE),
    "related": re.compile(r"\*\*Related\*\*:\s*([^\n]+)", re.IGNORECASE),
    "parent": re.compile(r"\*\*Parent\*\*:\s*\[\[([^\]]+)\]\]", re.IGNORECASE),
    "not_to_confuse": re.compile(r"\*\*Not to Confuse\*\*:\s*\[\[([^\]]+)\]\]", re.IGNORECASE),
}

DEFAULT_GLOBAL_SCOPE_PATHS = ("docs/GLOSSARY.md", "docs/terms/")


def term_name(raw: str) -> str:
    """Canonical name inside ``[[...]]``: drops a ``|label`` suffix and padding."""
    return raw.split("|", 1)[0].strip()


def code_block_lines(lines: list[str]) -> set[int]:
    """0-based indexes of lines inside (or delimiting) fenced code blocks.

    An unclosed fence extends to the end of the document.
    """
    inside: set[int] = set()
    fence: str | None = None
    for i, line in enumerate(lines):
        match = FENCE.match(line.strip())
        if fence is None:
            if match:
                fence = match.group(1)
                inside.add(i)
        else:
            inside.add(i)
            if match and match.group(1)[0] == fence[0] and len(match.group(1)) >= len(fence):
                fence = None
    return inside


def is_global_scope(file: str, global_scope_paths: Iterable[str] = DEFAULT_GLOBAL_SCOPE_PATHS) -> bool:
    """Whether definitions in ``file`` are global.

    ``file`` is project-relative. Entries ending in '/' match whole
    directories; any file whose name contains 'glossary' is global too.
    """
    for entry in global_scope_paths:
        entry = entry.replace("\\", "/").removeprefix("./")
        if entry.endswith("/"):
            if file.startswith(entry):
                return True
        elif file == entry:
            return True
    return "glossary" in PurePosixPath(file).name.lower()


class TermParser:
    """Stateless markdown term extractor."""

    def __init__(self, global_scope_paths: Iterable[str] = DEFAULT_GLOBAL_SCOPE_PATHS):
        self.global_scope_paths = tuple(global_scope_paths)

    def extract_definitions(self, markdown: str, file: str, line_offset: int = 0) -> list[TermDefinition]:
        lines = markdown.split("\n")
        in_code = code_block_lines(lines)
        scope = "global" if is_global_scope(file, self.global_scope_paths) else "document"

        definitions = []
        for i, line in enumerate(lines):
            if i in in_code:
                continue
            match = DEFINITION_HEADING.match(line)
            if not match:
                continue

            section = self._section(lines, i + 1, in_code)
            defn = TermDefinition(
                term=term_name(match.group(2)),
                file=file,
                line=i + 1 + line_offset,
                scope=scope,
                heading=line.strip(),
            )
            self._apply_metadata(defn, section)
            definitions.append(defn)

        return definitions

    def extract_references(self, markdown: str, file: str, line_offset: int = 0) -> list[TermReference]:
        """All ``[[Term]]`` usages outside definition headings and code blocks.

        ``line_offset`` is added to line numbers when ``markdown`` is a body
        split from its frontmatter.
        """
        lines = markdown.split("\n")
        in_code = code_block_lines(lines)

        references = []
        for i, line in enumerate(lines):
            if i in in_code or DEFINITION_HEADING.match(line):
                continue
            for match in TERM_LINK.finditer(INLINE_CODE.sub("", line)):
                name = term_name(match.group(1))
                if name:
                    references.append(
                        TermReference(term=name, file=file, line=i + 1 + line_offset, context=line.strip())
                    )
        return references

    @staticmethod
    def _section(lines: list[str], start: int, in_code: set[int]) -> list[str]:
        end = start
        while end < len(lines):
            if end not in in_code and ANY_HEADING.match(lines[end]):
                break
            end += 1
        return lines[start:end]

    @staticmethod
    def _apply_metadata(defn: TermDefinition, section: list[str]) -> None:
        content = "\n".join(section)

        if m := _META_PATTERNS["type"].search(content):
            defn.type = m.group(1).lower()
        if m := _META_PATTERNS["aliases"].search(content):
            defn.aliases = [a.strip() for a in m.group(1).split(",") if a.strip()]
        if m := _META_PATTERNS["related"].search(content):
            defn.related = [term_name(t) for t in TERM_LINK.findall(m.group(1))]
        if m := _META_PATTERNS["parent"].search(content):
            defn.parent = term_name(m.group(1))
        if m := _META_PATTERNS["not_to_confuse"].search(content):
            defn.not_to_confuse = term_name(m.group(1))

        paragraph: list[str] = []
        for raw in section:
            line = raw.strip()
            if line.startswith(("```", "~~~", "---")):
                break
            if not line:
                if paragraph:
                    break
                continue
            if line.startswith("**"):
                if paragraph:
                    break
                continue
            paragraph.append(line)
        defn.definition = " ".join(paragraph)
