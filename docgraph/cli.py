"""docgraph CLI - Main entry point and command registration hub."""
# ruff: noqa: E402 - Intentional lazy loading: commands imported after cli group definition

import click
from rich.table import Table

from docgraph import __version__
from docgraph.utils.constants import OUTPUT_DIR
from docgraph.utils.logging import configure_file_logging
from docgraph.utils.ui import console


class VerboseGroup(click.Group):
    """Categorized help - generated from the registered commands."""

    def format_commands(self, ctx, formatter):
        """Suppress the default command listing (categories are printed in format_help)."""
        pass

    COMMAND_CATEGORIES = {
        "INDEX": {
            "title": "REFERENCE INDEX",
            "description": "Build and query the feature/code/interface/term graph",
            "commands": ["graph"],
            "command_meta": {
                "graph": {
                    "run_when": "After editing feature, interface or glossary documents",
                },
            },
        },
        "VALIDATION": {
            "title": "VALIDATION",
            "description": "Consistency checks over the documentation tree",
            "commands": ["validate"],
            "command_meta": {
                "validate": {
                    "use_when": "Before merging documentation changes (CI)",
                },
            },
        },
        "TERMINOLOGY": {
            "title": "TERMINOLOGY",
            "description": "Glossary term listing, lookup and generation",
            "commands": ["terms"],
            "command_meta": {
                "terms": {
                    "use_when": "Need a term's definition, aliases or usages",
                },
            },
        },
    }

    def format_help(self, ctx, formatter):
        """Generate Rich-styled categorized help."""
        super().format_help(ctx, formatter)

        registered = {
            name: cmd
            for name, cmd in self.commands.items()
            if not name.startswith("_") and not getattr(cmd, "hidden", False)
        }

        console.print()
        console.rule("[bold]COMMANDS[/bold]")

        for category_data in self.COMMAND_CATEGORIES.values():
            console.print(f"\n[bold cyan]{category_data['title']}[/bold cyan]")
            console.print(f"[dim]{category_data['description']}[/dim]")

            table = Table(show_header=False, box=None, padding=(0, 2, 0, 0))
            table.add_column("Command", style="cmd", width=12)
            table.add_column("Description", style="white")
            table.add_column("Hint", style="dim", width=44)

            for cmd_name in category_data["commands"]:
                if cmd_name not in registered:
                    continue
                cmd = registered[cmd_name]

                first_line = (cmd.help or "").split("\n")[0].strip()
                period_idx = first_line.find(".")
                short_help = first_line[:period_idx] if period_idx > 0 else first_line
                if len(short_help) > 45:
                    short_help = short_help[:45].rsplit(" ", 1)[0] + "..."

                cmd_meta = category_data.get("command_meta", {}).get(cmd_name, {})
                hint = ""
                if "use_when" in cmd_meta:
                    hint = f"USE: {cmd_meta['use_when']}"
                elif "run_when" in cmd_meta:
                    hint = f"RUN: {cmd_meta['run_when']}"

                table.add_row(cmd_name, short_help, hint)

            console.print(table)

        console.print()
        console.rule()
        console.print("For detailed options: [cmd]docgraph <command> --help[/cmd]")


@click.group(cls=VerboseGroup)
@click.version_option(version=__version__, prog_name="docgraph")
@click.help_option("-h", "--help")
@click.option("--log-file", is_flag=True, help="Also write a debug log to .docgraph/docgraph.log")
def cli(log_file):
    """docgraph - Cross-document reference graph and consistency checks

    \b
    QUICK START:
      docgraph graph build          # Index features, code, interfaces, terms
      docgraph validate all         # Run every consistency check
      docgraph terms list           # Browse the glossary

    \b
    For detailed options: docgraph <command> --help"""
    if log_file:
        configure_file_logging(OUTPUT_DIR)


from docgraph.commands.graph import graph
from docgraph.commands.terms import terms
from docgraph.commands.validate import validate

cli.add_command(graph)
cli.add_command(validate)
cli.add_command(terms)


def main():
    """Main entry point for console script."""
    cli()


if __name__ == "__main__":
    main()
