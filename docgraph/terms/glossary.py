"""Render a registry's definitions as a single glossary document.

The output carries ``generated_by: docgraph`` frontmatter; the term scanner
skips such documents so a saved glossary never redefines its own sources.
"""

from collections.abc import Iterable

from .registry import TermRegistry
from .types import TermDefinition

GENERATED_BY = "docgraph"

TYPE_ORDER = (
    "concept",
    "entity",
    "process",
    "attribute",
    "abbreviation",
    "class",
    "function",
    "module",
    "interface",
    "type",
)


def _type_rank(term_type: str | None) -> tuple[int, str]:
    if not term_type:
        return len(TYPE_ORDER) + 1, ""
    if term_type in TYPE_ORDER:
        return TYPE_ORDER.index(term_type), term_type
    return len(TYPE_ORDER), term_type


def group_by_type(definitions: Iterable[TermDefinition]) -> list[tuple[str, list[TermDefinition]]]:
    """Known types first in a fixed order, other types alphabetically, untyped last."""
    groups: dict[str, list[TermDefinition]] = {}
    for defn in definitions:
        groups.setdefault(defn.type or "", []).append(defn)
    ordered = sorted(groups, key=_type_rank)
    return [(t, sorted(groups[t], key=lambda d: d.term.lower())) for t in ordered]


def _render_term(defn: TermDefinition) -> list[str]:
    lines = [f"### [[{defn.term}]]", ""]
    if defn.type:
        lines.append(f"**Type**: {defn.type}")
    if defn.aliases:
        lines.append(f"**Aliases**: {', '.join(defn.aliases)}")
    if defn.parent:
        lines.append(f"**Parent**: [[{defn.parent}]]")
    if defn.related:
        lines.append(f"**Related**: {', '.join(f'[[{r}]]' for r in defn.related)}")
    if defn.not_to_confuse:
        lines.append(f"**Not to confuse with**: [[{defn.not_to_confuse}]]")
    if lines[-1]:
        lines.append("")
    if defn.definition:
        lines += [defn.definition, ""]
    lines += [f"**Source**: {defn.file}:{defn.line}", "", "---", ""]
    return lines


def render_glossary(registry: TermRegistry, include_document: bool = False, generated: str = "") -> str:
    """Markdown glossary of the registry's terms (global ones unless ``include_document``)."""
    definitions = [d for d in registry.list_all() if include_document or d.scope == "global"]
    lines = ["---", f"generated_by: {GENERATED_BY}", "type: glossary"]
    if generated:
        lines.append(f"generated: '{generated}'")
    lines += ["---", "", "# Glossary", "", f"{len(definitions)} terms.", ""]
    for term_type, group in group_by_type(definitions):
        lines += [f"## {term_type.capitalize() if term_type else 'Other'}", ""]
        for defn in group:
            lines += _render_term(defn)
    return "\n".join(lines).rstrip() + "\n"
