"""Formatting helpers shared by the docgraph commands.

Text reports are plain ASCII (no emojis) so they survive CP1252 consoles and
CI logs; JSON reports are what ``--format json`` prints and ``--save`` writes.
"""

import json
from pathlib import Path
from typing import Any

import click

from docgraph.findings import Finding

RULE = "=" * 60
THIN_RULE = "-" * 60


def format_findings(findings: list[Finding], marker: str) -> list[str]:
    lines = []
    for finding in findings:
        location = f"{finding.location}: " if finding.location else ""
        lines.append(f"  {marker} {location}{finding.message}")
        if finding.suggestion:
            lines.append(f"         -> {finding.suggestion}")
    return lines


def report(title: str, body: list[str]) -> str:
    return "\n".join([RULE, title, RULE, *body])


def to_json(data: dict[str, Any]) -> str:
    return json.dumps(data, indent=2, ensure_ascii=False)


def emit(output: str, save: str | None = None) -> None:
    """Print ``output`` and optionally write it to ``save``."""
    click.echo(output)
    if save:
        save_path = Path(save)
        save_path.parent.mkdir(parents=True, exist_ok=True)
        with open(save_path, "w", encoding="utf-8") as f:
            f.write(output)
        click.echo(f"\nSaved to: {save_path}", err=True)


project_path_option = click.option(
    "--project-path", default=".", type=click.Path(file_okay=False), help="Project root directory"
)
format_option = click.option(
    "--format",
    "output_format",
    type=click.Choice(["text", "json"]),
    default="text",
    help="Output format",
)
save_option = click.option("--save", type=click.Path(), help="Save output to file")
