"""Central UI handler for docgraph.

Single source of truth for Rich console styling. Import this instead of
instantiating Console() in every command file.

Usage:
    from docgraph.utils.ui import console, print_error

    console.print("[success]All checks passed[/success]")
"""

import sys

from rich.console import Console
from rich.theme import Theme

DOCGRAPH_THEME = Theme({
    "info": "bold cyan",
    "warning": "bold yellow",
    "error": "bold red",
    "success": "bold green",
    "cmd": "bold magenta",
    "path": "bold cyan",
    "term": "bold blue",
    "dim": "dim white",
})

# Single console instance - import this, don't create your own
console = Console(
    theme=DOCGRAPH_THEME,
    force_terminal=sys.stdout.isatty(),
)


def print_error(msg: str) -> None:
    """Print an error message in red."""
    console.print(f"[error]ERROR:[/error] {msg}")


def print_warning(msg: str) -> None:
    """Print a warning message in yellow."""
    console.print(f"[warning]WARNING:[/warning] {msg}")


def print_success(msg: str) -> None:
    """Print a success message in green."""
    console.print(f"[success]OK:[/success] {msg}")
