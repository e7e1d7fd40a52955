"""Reference index build and query commands."""

import sys
from pathlib import Path

import click

from docgraph.config_runtime import load_runtime_config
from docgraph.errors import DocGraphError, IndexNotFoundError
from docgraph.graph import builder, query
from docgraph.graph.store import load_project_index
from docgraph.utils.error_handler import handle_exceptions
from docgraph.utils.exit_codes import ExitCodes
from docgraph.utils.ui import print_error, print_success

from ._output import THIN_RULE, emit, format_option, project_path_option, report, save_option, to_json


@click.group()
@click.help_option("-h", "--help")
def graph():
    """Build and query the feature/code/interface/term reference index.

    The index is a bidirectional graph over four entity kinds:

    \b
      features    feature documents (tasks/features/*.md)
      code        source/test/config files named in code_references
      interfaces  pair documents (01--02.md) and shared types (01--02_01--03.md)
      terms       glossary terms defined as '## [[Term]]' headings

    \b
    SUBCOMMANDS:
      build:  Full rebuild, writes .docgraph/references.json
      query:  Feature details, code reverse lookup, term usage, overview

    \b
    EXAMPLES:
      docgraph graph build
      docgraph graph query --feature 01_GraphBuild
      docgraph graph query --code src/graph/build.ts
      docgraph graph query --term "Reference Index"
    """
    pass


@graph.command("build")
@project_path_option
@click.option("--output", type=click.Path(dir_okay=False), help="Snapshot path (default: paths.index)")
@click.option("--no-symbols", is_flag=True, help="Skip import/export extraction from code files")
@format_option
@handle_exceptions
def graph_build(project_path, output, no_symbols, output_format):
    """Rebuild the reference index from the documentation tree.

    Every run is a full rebuild; the previous snapshot is overwritten.
    Documents with unreadable frontmatter are skipped and listed in the stats.
    A term defined twice is reported, the first definition is kept.
    """
    root = Path(project_path).resolve()
    cfg = load_runtime_config(root)

    result = builder.build_reference_index(root, output=output, include_symbols=not no_symbols, cfg=cfg)
    stats = result.stats

    if output_format == "json":
        emit(to_json({"output": str(result.output), "stats": stats.to_dict()}))
        return

    lines = [
        f"Features:         {stats.features}",
        f"Code files:       {stats.code_files}",
        f"Interfaces:       {stats.interfaces}",
        f"Terms:            {stats.terms}",
        f"Total references: {stats.total_references}",
        f"Build time:       {stats.build_time_ms}ms",
    ]
    if stats.skipped_documents:
        lines += ["", f"Skipped documents ({len(stats.skipped_documents)}):"]
        lines += [f"  - {f}" for f in stats.skipped_documents]
    if stats.duplicate_features:
        lines += ["", f"Duplicate feature ids ({len(stats.duplicate_features)}):"]
        lines += [f"  - {f}" for f in stats.duplicate_features]
    if stats.parse_failures:
        lines += ["", f"Parse failures ({len(stats.parse_failures)}):"]
        lines += [f"  - {path}: {'; '.join(errors)}" for path, errors in stats.parse_failures.items()]
    if stats.term_conflicts:
        lines += ["", f"Term conflicts ({len(stats.term_conflicts)}):"]
        lines += [f"  - {msg}" for msg in stats.term_conflicts]

    emit(report("Reference Index Build", lines))
    print_success(f"Index saved to {result.output}")


@graph.command("query")
@project_path_option
@click.option("--feature", "feature_id", help="Show one feature's links")
@click.option("--code", "code_file", help="Reverse lookup for a code file")
@click.option("--term", help="Show a term's definition and usage")
@format_option
@save_option
@handle_exceptions
def graph_query(project_path, feature_id, code_file, term, output_format, save):
    """Query the persisted reference index.

    With no option an overview is printed (entity counts, top terms).
    Requires 'docgraph graph build' to have run.
    """
    root = Path(project_path).resolve()
    cfg = load_runtime_config(root)

    try:
        index = load_project_index(root, cfg)
    except IndexNotFoundError as e:
        print_error(f"{e.message}. Run 'docgraph graph build' first.")
        sys.exit(ExitCodes.TASK_INCOMPLETE)

    limit = cfg["limits"]["max_references_shown"]
    try:
        if feature_id:
            data = query.feature_details(index, feature_id)
            text = _format_feature(data)
        elif code_file:
            data = query.code_references(index, code_file)
            text = _format_code(data)
        elif term:
            data = query.term_usage(index, term, limit=None if output_format == "json" else limit)
            text = _format_term(data)
        else:
            data = query.overview(index)
            text = _format_overview(data)
    except DocGraphError as e:
        print_error(e.message)
        sys.exit(ExitCodes.VALIDATION_ERRORS)

    emit(to_json(data) if output_format == "json" else text, save)


def _section(title: str, items: list[str]) -> list[str]:
    if not items:
        return []
    return [f"{title}:", *[f"  - {item}" for item in items], ""]


def _format_feature(data: dict) -> str:
    def describe(interfaces: list[dict]) -> list[str]:
        return [
            f"{i['id']} ({i['from']} -> {i['to']})" if i["documented"] else f"{i['id']} (undocumented)"
            for i in interfaces
        ]

    lines = [f"File: {data['file']}", ""]
    lines += _section("Uses code", data["code"]["uses"])
    lines += _section("Used by code", data["code"]["used_by"])
    lines += _section("Related features", data["features"]["related"])
    lines += _section("Depends on", data["features"]["depends_on"])
    lines += _section("Used by features", data["features"]["used_by"])
    lines += _section("Provides interfaces", describe(data["interfaces"]["provides"]))
    lines += _section("Uses interfaces", describe(data["interfaces"]["uses"]))
    lines += _section("Defines terms", [f"[[{t}]]" for t in data["terms"]["defines"]])
    lines += _section("Uses terms", [f"[[{t}]]" for t in data["terms"]["uses"]])
    lines += _section("Tests", data["tests"]["tested_by"])
    return report(f"Feature: {data['id']}", lines)


def _format_code(data: dict) -> str:
    lines = [f"Type: {data['type']}", ""]
    if data["documented_in"]:
        lines += _section("Documented in", [f"{d['feature']} ({d['file']})" for d in data["documented_in"]])
    else:
        lines += ["[WARN] Not documented in any feature", ""]
    lines += _section("Imports", data["imports"])
    lines += _section("Imported by", data["imported_by"])
    lines += _section("Exports", data["exports"])
    return report(f"Code file: {data['path']}", lines)


def _format_term(data: dict) -> str:
    definition = data["definition"]
    lines = [
        f"Defined in: {definition['file']}:{definition['line']}",
        f"Scope:      {definition['scope']}",
        f"Usage:      {data['usage_count']} references",
        "",
    ]
    for ref in data["references"]:
        lines.append(f"  - {ref['file']}:{ref['line']}")
        lines.append(f'    "{ref["context"]}"')
    if data["hidden_references"]:
        lines.append(f"  ... and {data['hidden_references']} more")
    return report(f"Term: [[{data['term']}]]", lines)


def _format_overview(data: dict) -> str:
    lines = [
        f"Version:   {data['version']}",
        f"Generated: {data['generated']}",
        "",
        f"Features:   {data['features']['total']} ({data['features']['with_tests']} with tests)",
        f"Code files: {data['code']['total']} (source {data['code']['source']}, "
        f"test {data['code']['test']}, config {data['code']['config']})",
        f"Interfaces: {data['interfaces']['total']} ({data['interfaces']['shared']} shared types)",
        f"Terms:      {data['terms']['total']} (global {data['terms']['global']}, "
        f"document {data['terms']['document']})",
        "",
        "Top terms:",
        THIN_RULE,
    ]
    lines += [f"  [[{t['term']}]]: {t['usage_count']} uses" for t in data["terms"]["top"]]
    if not data["terms"]["top"]:
        lines.append("  (no terms defined)")
    return report("Reference Index Overview", lines)
