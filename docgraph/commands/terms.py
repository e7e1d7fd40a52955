"""Glossary term listing, lookup and generation."""

import sys
from dataclasses import asdict
from datetime import datetime, timezone
from pathlib import Path

import click
from rich.table import Table

from docgraph.config_runtime import load_runtime_config
from docgraph.errors import TermConflictError
from docgraph.terms.glossary import render_glossary
from docgraph.utils.error_handler import handle_exceptions
from docgraph.utils.exit_codes import ExitCodes
from docgraph.utils.ui import console, print_error, print_warning
from docgraph.validators.terms import load_term_registry

from ._output import emit, format_option, project_path_option, report, save_option, to_json

# Display order for **Type** metadata; anything else is grouped under "other"
TYPE_ORDER = ["concept", "entity", "process", "attribute", "abbreviation", "other"]


def _truncate(text: str, width: int = 70) -> str:
    return text if len(text) <= width else text[: width - 3].rstrip() + "..."


def _registry(project_path: str):
    root = Path(project_path).resolve()
    try:
        return load_term_registry(root, load_runtime_config(root))
    except TermConflictError as e:
        print_error(e.message)
        sys.exit(ExitCodes.VALIDATION_ERRORS)


@click.group()
@click.help_option("-h", "--help")
def terms():
    """List, look up and generate glossary terms.

    Terms are defined by '## [[Term]]' headings; definitions in
    docs/GLOSSARY.md, docs/terms/ or any *glossary* file are global, all
    others are scoped to their own document.
    """
    pass


@terms.command("list")
@project_path_option
@click.option("--scope", type=click.Choice(["all", "global", "document"]), default="all", help="Filter by scope")
@format_option
@handle_exceptions
def terms_list(project_path, scope, output_format):
    """List every defined term, grouped by scope and type."""
    registry = _registry(project_path)
    definitions = [d for d in registry.list_all() if scope == "all" or d.scope == scope]

    if output_format == "json":
        emit(
            to_json(
                {
                    "total": len(definitions),
                    "terms": [{**asdict(d), "usage_count": registry.usage_count(d.term)} for d in definitions],
                }
            )
        )
        return

    if not definitions:
        print_warning("No terms defined")
        return

    for scope_name in ("global", "document"):
        scoped = [d for d in definitions if d.scope == scope_name]
        if not scoped:
            continue
        console.rule(f"[bold]{scope_name.upper()} TERMS ({len(scoped)})[/bold]")

        table = Table(show_header=True, box=None, padding=(0, 2, 0, 0))
        table.add_column("Term", style="term")
        table.add_column("Type", style="dim")
        table.add_column("Definition")
        table.add_column("Uses", justify="right")
        table.add_column("Location", style="path")

        ordered = sorted(
            scoped,
            key=lambda d: (TYPE_ORDER.index(d.type) if d.type in TYPE_ORDER else len(TYPE_ORDER) - 1, d.term.lower()),
        )
        for d in ordered:
            name = d.term if not d.aliases else f"{d.term} ({', '.join(d.aliases)})"
            table.add_row(
                name,
                d.type or "other",
                _truncate(d.definition),
                str(registry.usage_count(d.term)),
                f"{d.file}:{d.line}",
            )
        console.print(table)
        console.print()


@terms.command("find")
@click.argument("query")
@project_path_option
@format_option
@handle_exceptions
def terms_find(query, project_path, output_format):
    """Show a term (by name or alias), or terms matching QUERY.

    \b
    EXAMPLES:
      docgraph terms find "Reference Index"
      docgraph terms find refindex      # alias lookup
      docgraph terms find index         # substring search
    """
    registry = _registry(project_path)
    limit = load_runtime_config(Path(project_path).resolve())["limits"]["max_references_shown"]

    defn = registry.find(query)
    if defn is None:
        matches = registry.search(query)
        if output_format == "json":
            emit(to_json({"query": query, "found": False, "matches": [asdict(d) for d in matches]}))
        elif matches:
            emit(report(f"Terms matching '{query}'", [f"  - {d.term} ({d.file}:{d.line})" for d in matches]))
        else:
            print_error(f'No term matches "{query}"')
        if not matches:
            sys.exit(ExitCodes.VALIDATION_ERRORS)
        return

    references = registry.references_to(defn.term)
    if output_format == "json":
        emit(
            to_json(
                {
                    "query": query,
                    "found": True,
                    "term": asdict(defn),
                    "usage_count": len(references),
                    "references": [asdict(r) for r in references],
                }
            )
        )
        return

    lines = [
        f"Defined in: {defn.file}:{defn.line}",
        f"Scope:      {defn.scope}",
        f"Type:       {defn.type or 'other'}",
    ]
    if defn.aliases:
        lines.append(f"Aliases:    {', '.join(defn.aliases)}")
    if defn.parent:
        lines.append(f"Parent:     [[{defn.parent}]]")
    if defn.related:
        lines.append(f"Related:    {', '.join(f'[[{r}]]' for r in defn.related)}")
    if defn.not_to_confuse:
        lines.append(f"Not to confuse with: [[{defn.not_to_confuse}]]")
    if defn.definition:
        lines += ["", defn.definition]
    lines += ["", f"Usage: {len(references)} references"]
    for ref in references[:limit]:
        lines.append(f"  - {ref.file}:{ref.line}")
    if len(references) > limit:
        lines.append(f"  ... and {len(references) - limit} more")
    emit(report(f"Term: [[{defn.term}]]", lines))


@terms.command("generate")
@project_path_option
@click.option("--include-document", is_flag=True, help="Also include document-scoped terms")
@save_option
@handle_exceptions
def terms_generate(project_path, include_document, save):
    """Render every global term as one glossary document, grouped by type.

    The output is marked 'generated_by: docgraph' in its frontmatter, so
    saving it inside the project never makes its terms look defined twice.

    \b
    EXAMPLE:
      docgraph terms generate --save docs/generated/GLOSSARY.md
    """
    registry = _registry(project_path)
    stamp = datetime.now(timezone.utc).isoformat(timespec="seconds")
    emit(render_glossary(registry, include_document=include_document, generated=stamp), save)
