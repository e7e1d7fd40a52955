"""Validation commands: naming, orphans, interface links, terminology, structure and progress."""

import sys
from pathlib import Path

import click

from docgraph.config_runtime import load_runtime_config
from docgraph.errors import DocGraphError, IndexNotFoundError, TermConflictError
from docgraph.findings import Finding
from docgraph.graph.builder import build_reference_index
from docgraph.graph.impact import (
    ImpactResult,
    ReadinessResult,
    dependency_readiness,
    interface_impact,
    load_feature_progress,
)
from docgraph.graph.store import load_project_index
from docgraph.terms.registry import TermValidationResult
from docgraph.utils.error_handler import handle_exceptions
from docgraph.utils.exit_codes import ExitCodes
from docgraph.utils.logging import logger
from docgraph.utils.ui import print_error, print_success
from docgraph.validators.exports import ExportCoverageResult, detect_undocumented_exports
from docgraph.validators.interface_links import InterfaceValidationResult, validate_project_interface_links
from docgraph.validators.naming import NamingValidationResult, validate_naming
from docgraph.validators.orphans import OrphanOptions, OrphanResult, detect_orphans
from docgraph.validators.structure import StructureResult, validate_structure
from docgraph.validators.terms import validate_terms

from ._output import THIN_RULE, emit, format_findings, format_option, project_path_option, report, save_option, to_json


@click.group()
@click.help_option("-h", "--help")
def validate():
    """Check documentation consistency.

    \b
    SUBCOMMANDS:
      naming:       interface / shared-type filenames and cross-references
      orphans:      code files neither documented nor imported
      interfaces:   provides/uses symmetry and sibling coverage (needs the index)
      terms:        undefined, scope-leaking, circular and duplicate terms
      structure:    depends_on cycles, interface endpoints, required fields
      exports:      exported symbols no feature covers (needs the index)
      dependencies: whether the features a feature builds on are ready
      impact:       consumers each interface provider holds back
      all:          rebuild the index and run naming, orphans, interfaces,
                    terms and structure

    \b
    EXIT CODES:
      0 = no errors (warnings allowed)
      1 = errors found
      3 = prerequisite missing (reference index not built)
    """
    pass


def _finish(success: bool, label: str, output_format: str = "text") -> None:
    """Print the verdict (text output only) and exit 1 on failure."""
    if output_format == "text":
        if success:
            print_success(f"{label} passed")
        else:
            print_error(f"{label} failed")
    if not success:
        sys.exit(ExitCodes.VALIDATION_ERRORS)


def _issues(errors: list[Finding], warnings: list[Finding]) -> list[str]:
    lines = []
    if errors:
        lines += ["", f"Errors ({len(errors)}):", THIN_RULE, *format_findings(errors, "[ERROR]")]
    if warnings:
        lines += ["", f"Warnings ({len(warnings)}):", THIN_RULE, *format_findings(warnings, "[WARN]")]
    return lines


def _format_naming(result: NamingValidationResult) -> str:
    lines = [
        f"Files:    {result.total_files}",
        f"Passed:   {result.passed_files}",
        f"Failed:   {result.failed_files}",
        f"Errors:   {len(result.errors)}",
        f"Warnings: {len(result.warnings)}",
    ]
    lines += _issues(result.errors, result.warnings)
    if result.errors:
        lines += [
            "",
            "Hints:",
            "  - interfaces: XX--YY.md with the smaller code first",
            "  - shared types: XX--YY_XX--ZZ.md with every pair sorted",
            "  - shared-type frontmatter needs type: shared, status and a sorted interfaces list",
        ]
    return report("Naming Validation", lines)


def _format_orphans(result: OrphanResult) -> str:
    lines = [
        f"Files scanned: {result.total_files}",
        f"Referenced:    {result.referenced_files}",
        f"Orphans:       {len(result.orphan_files)}",
    ]
    for kind in ("source", "other"):
        orphans = [o for o in result.orphan_files if o.kind == kind]
        if orphans:
            lines += ["", f"Orphan {kind} files:", THIN_RULE]
            lines += [f"  {o.path} ({o.size / 1024:.1f} KB)" for o in orphans]
    if result.orphan_files:
        lines += [
            "",
            "Hints:",
            "  - reference the file from a feature document (code_references or entry_point)",
            "  - delete it if nothing uses it",
        ]
    return report("Orphan Files", lines)


def _format_interfaces(result: InterfaceValidationResult, verbose: bool = False) -> str:
    summary = result.summary
    lines = [
        f"Interfaces: {summary['total_interfaces']}",
        f"Errors:     {summary['error_count']}",
        f"Warnings:   {summary['warning_count']}",
        "",
        "Bidirectional links:",
        THIN_RULE,
    ]
    bidirectional = result.bidirectional
    for missing in bidirectional.missing_providers:
        lines.append(f"  [ERROR] {missing.interface_id} (used by: {', '.join(missing.used_by)}) has no provider")
    for unused in bidirectional.unused_interfaces:
        lines.append(f"  [WARN] {unused.interface_id} (provided by: {', '.join(unused.provided_by)}) is never used")
    if not bidirectional.missing_providers and not bidirectional.unused_interfaces:
        lines.append("  [OK] every interface has a provider and a user")

    lines += ["", "Sibling coverage:", THIN_RULE]
    for coverage in result.incomplete_coverage:
        lines.append(
            f"  [WARN] {coverage.feature} provides {len(coverage.provided)}/{len(coverage.all_siblings)} "
            f"interfaces in {coverage.namespace}/"
        )
        shown = coverage.all_siblings if verbose else coverage.missing
        for interface_id in shown:
            marker = "+" if interface_id in coverage.provided else "-"
            lines.append(f"      {marker} {interface_id}")
    if not result.incomplete_coverage:
        lines.append("  [OK] no partially covered namespaces")
    return report("Interface Links", lines)


def _format_terms(result: TermValidationResult) -> str:
    stats = result.stats
    lines = [
        f"Definitions: {stats['total_definitions']} "
        f"(global {stats['global_definitions']}, document {stats['document_definitions']})",
        f"References:  {stats['total_references']} ({stats['unique_referenced']} unique terms)",
        f"Undefined:   {stats['undefined']}",
        f"Unused:      {stats['unused']}",
        f"Isolated:    {stats['isolated']}",
        f"Circular:    {stats['circular']}",
        f"Duplicates:  {stats['duplicates']}",
    ]
    lines += _issues(result.errors, result.warnings)
    return report("Terminology Validation", lines)


def _format_structure(result: StructureResult) -> str:
    lines = [
        f"Features:   {result.total_features}",
        f"Interfaces: {result.total_interfaces}",
        f"Cycles:     {len(result.cycles)}",
        f"Errors:     {len(result.errors)}",
        f"Warnings:   {len(result.warnings)}",
    ]
    lines += _issues(result.errors, result.warnings)
    return report("Structure Validation", lines)


def _format_exports(result: ExportCoverageResult) -> str:
    lines = [
        f"Source files:       {result.total_files}",
        f"Documented files:   {result.documented_files}",
        f"Exports:            {result.total_exports}",
        f"Documented exports: {result.documented_exports}",
    ]
    if result.undocumented:
        lines += ["", f"Undocumented exports ({len(result.undocumented)}):", THIN_RULE]
        lines += [f"  {u.file}:{u.line} {u.kind} {u.name}" for u in result.undocumented]
    for file, messages in result.parse_failures.items():
        lines.append(f"  [WARN] {file}: {'; '.join(messages)}")
    return report("Export Coverage", lines)


def _format_readiness(result: ReadinessResult) -> str:
    lines = []
    for feature in result.features:
        lines.append(f"  [{feature.readiness.upper()}] {feature.feature} ({feature.progress}%)")
        for dep in feature.dependencies:
            marker = "+" if dep.ready else "-"
            lines.append(f"      {marker} {dep.interface} from {dep.provider}: {dep.progress}% ({dep.status})")
    if not result.features:
        lines.append("  No feature uses an interface")
    return report("Dependency Readiness", lines)


def _format_impact(result: ImpactResult) -> str:
    lines = []
    for impact in result.interfaces:
        lines.append(
            f"  {impact.interface}: {impact.provider} at {impact.provider_progress}% "
            f"({impact.blocked_count} blocked, {impact.at_risk_count} at risk)"
        )
        for consumer in impact.consumers:
            flags = [name for name, on in (("blocked", consumer.blocked), ("at risk", consumer.at_risk)) if on]
            suffix = f" [{', '.join(flags)}]" if flags else ""
            lines.append(f"      -> {consumer.feature}: {consumer.progress}% ({consumer.status}){suffix}")
    if not result.interfaces:
        lines.append("  No interface has a documented provider")
    return report("Interface Impact", lines)


@validate.command("naming")
@project_path_option
@format_option
@save_option
@handle_exceptions
def validate_naming_command(project_path, output_format, save):
    """Validate interface and shared-type document naming.

    \b
    Checks:
      - interfaces/XX--YY.md: two 2-digit codes, smaller first, no 01--02/02--01 twins
      - shared/XX--YY_XX--ZZ.md: pairs sorted inside and across, no duplicates,
        pair count within validation.max_shared_pairs
      - shared-type frontmatter: type, status, sorted interfaces list
      - shared_types <-> interfaces cross-references agree
    """
    result = validate_naming(project_path)
    emit(to_json(result.to_dict()) if output_format == "json" else _format_naming(result), save)
    _finish(result.success, "Naming validation", output_format)


@validate.command("orphans")
@project_path_option
@click.option("--include-vendor", is_flag=True, help="Also scan node_modules / virtualenvs")
@click.option("--include-build", is_flag=True, help="Also scan dist / build / out / target")
@format_option
@save_option
@handle_exceptions
def validate_orphans_command(project_path, include_vendor, include_build, output_format, save):
    """Find code files that no document references and no code imports.

    Import detection is a regex heuristic over import/require/from
    statements, so files loaded in unusual ways can show up as orphans.
    """
    options = OrphanOptions(include_vendor=include_vendor, include_build=include_build)
    result = detect_orphans(project_path, options)
    emit(to_json(result.to_dict()) if output_format == "json" else _format_orphans(result), save)
    _finish(result.success, "Orphan check", output_format)


@validate.command("interfaces")
@project_path_option
@click.option("--feature", help="Only check this feature")
@click.option("--namespace", help="Only check interfaces inside this namespace")
@click.option("--verbose", "-v", is_flag=True, help="List every sibling, not just the missing ones")
@format_option
@save_option
@handle_exceptions
def validate_interfaces_command(project_path, feature, namespace, verbose, output_format, save):
    """Validate provides/uses symmetry and namespace sibling coverage.

    Reads the persisted reference index; run 'docgraph graph build' first.
    """
    try:
        result = validate_project_interface_links(project_path, feature=feature, namespace=namespace)
    except IndexNotFoundError as e:
        print_error(f"{e.message}. Run 'docgraph graph build' first.")
        sys.exit(ExitCodes.TASK_INCOMPLETE)
    except DocGraphError as e:
        print_error(e.message)
        sys.exit(ExitCodes.VALIDATION_ERRORS)

    output = to_json(result.to_dict()) if output_format == "json" else _format_interfaces(result, verbose)
    emit(output, save)
    _finish(result.success, "Interface validation", output_format)


@validate.command("terms")
@project_path_option
@format_option
@save_option
@handle_exceptions
def validate_terms_command(project_path, output_format, save):
    """Validate glossary terms across every markdown document.

    \b
    Errors:   undefined terms, document-scoped terms used in other files,
              a term defined twice
    Warnings: unused, isolated (no parent/related), circular related/parent
              chains, near-duplicate names
    """
    try:
        result = validate_terms(project_path)
    except TermConflictError as e:
        print_error(e.message)
        sys.exit(ExitCodes.VALIDATION_ERRORS)

    emit(to_json(result.to_dict()) if output_format == "json" else _format_terms(result), save)
    _finish(result.success, "Terminology validation", output_format)


@validate.command("structure")
@project_path_option
@format_option
@save_option
@handle_exceptions
def validate_structure_command(project_path, output_format, save):
    """Check depends_on cycles, interface endpoints and required frontmatter.

    \b
    Errors:   circular depends_on chains, interface from/to naming a missing
              feature, missing required fields, duplicate feature ids
    Warnings: depends_on naming an unknown feature, interfaces their
              provider never mentions
    """
    result = validate_structure(project_path)
    emit(to_json(result.to_dict()) if output_format == "json" else _format_structure(result), save)
    _finish(result.success, "Structure validation", output_format)


@validate.command("exports")
@project_path_option
@click.option("--include-vendor", is_flag=True, help="Also scan node_modules / virtualenvs")
@click.option("--include-build", is_flag=True, help="Also scan dist / build / out / target")
@format_option
@save_option
@handle_exceptions
def validate_exports_command(project_path, include_vendor, include_build, output_format, save):
    """Find exported symbols in source files no feature document covers.

    A file is covered when a feature lists it or a covered file imports it.
    Reads the persisted reference index; run 'docgraph graph build' first.
    """
    options = OrphanOptions(include_vendor=include_vendor, include_build=include_build)
    try:
        result = detect_undocumented_exports(project_path, options)
    except IndexNotFoundError as e:
        print_error(f"{e.message}. Run 'docgraph graph build' first.")
        sys.exit(ExitCodes.TASK_INCOMPLETE)

    emit(to_json(result.to_dict()) if output_format == "json" else _format_exports(result), save)
    _finish(result.success, "Export coverage", output_format)


def _progress(project_path: str):
    root = Path(project_path).resolve()
    cfg = load_runtime_config(root)
    try:
        index = load_project_index(root, cfg)
    except IndexNotFoundError as e:
        print_error(f"{e.message}. Run 'docgraph graph build' first.")
        sys.exit(ExitCodes.TASK_INCOMPLETE)
    return cfg, index, load_feature_progress(root, index)


@validate.command("dependencies")
@project_path_option
@click.option("--feature", help="Only check this feature")
@format_option
@save_option
@handle_exceptions
def validate_dependencies_command(project_path, feature, output_format, save):
    """Check whether the features each feature builds on are ready.

    Progress is the share of checked '- [x]' boxes in a feature document. A
    provider is ready at validation.ready_progress percent or once its status
    is 'implemented'. Exits 1 when a feature has no ready provider.
    """
    cfg, index, progress = _progress(project_path)
    try:
        result = dependency_readiness(index, progress, feature, cfg["validation"]["ready_progress"])
    except DocGraphError as e:
        print_error(e.message)
        sys.exit(ExitCodes.VALIDATION_ERRORS)

    emit(to_json(result.to_dict()) if output_format == "json" else _format_readiness(result), save)
    _finish(result.success, "Dependency readiness", output_format)


@validate.command("impact")
@project_path_option
@click.option("--interface", "interface_id", help="Only report this interface (XX--YY)")
@format_option
@save_option
@handle_exceptions
def validate_impact_command(project_path, interface_id, output_format, save):
    """Report which consumers each interface provider holds back.

    Informational: always exits 0 once the index is loaded.
    """
    cfg, index, progress = _progress(project_path)
    try:
        result = interface_impact(index, progress, interface_id, cfg["validation"]["blocked_progress"])
    except DocGraphError as e:
        print_error(e.message)
        sys.exit(ExitCodes.VALIDATION_ERRORS)

    emit(to_json(result.to_dict()) if output_format == "json" else _format_impact(result), save)


@validate.command("all")
@project_path_option
@format_option
@save_option
@handle_exceptions
def validate_all_command(project_path, output_format, save):
    """Rebuild the reference index, then run naming, orphans, interfaces, terms and structure.

    Progress checks (dependencies, impact) and export coverage stay separate.
    """
    root = Path(project_path).resolve()
    cfg = load_runtime_config(root)

    build = build_reference_index(root, cfg=cfg)
    logger.debug(f"Rebuilt reference index at {build.output}")

    naming = validate_naming(root, cfg)
    orphans = detect_orphans(root, cfg=cfg)
    interfaces = validate_project_interface_links(root, cfg=cfg)
    structure = validate_structure(root, cfg)
    try:
        terms = validate_terms(root, cfg)
        conflict = None
    except TermConflictError as e:
        terms, conflict = None, e.message

    checks = {
        "naming": naming.success,
        "orphans": orphans.success,
        "interfaces": interfaces.success,
        "terms": terms.success if terms else False,
        "structure": structure.success,
    }

    if output_format == "json":
        emit(
            to_json(
                {
                    "success": all(checks.values()),
                    "checks": checks,
                    "naming": naming.to_dict(),
                    "orphans": orphans.to_dict(),
                    "interfaces": interfaces.to_dict(),
                    "terms": terms.to_dict() if terms else {"success": False, "error": conflict},
                    "structure": structure.to_dict(),
                }
            ),
            save,
        )
    else:
        sections = [_format_naming(naming), _format_orphans(orphans), _format_interfaces(interfaces)]
        sections.append(_format_terms(terms) if terms else report("Terminology Validation", [f"[ERROR] {conflict}"]))
        sections.append(_format_structure(structure))
        lines = [f"  {'[OK]  ' if ok else '[FAIL]'} {name}" for name, ok in checks.items()]
        sections.append(report("Summary", lines))
        emit("\n\n".join(sections), save)

    if build.stats.term_conflicts or build.stats.skipped_documents:
        logger.warning(
            f"Index built with {len(build.stats.skipped_documents)} skipped documents and "
            f"{len(build.stats.term_conflicts)} term conflicts"
        )
    _finish(all(checks.values()), "Validation", output_format)
