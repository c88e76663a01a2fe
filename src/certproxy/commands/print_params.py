"""Parameter reference table."""

from __future__ import annotations

from rich.console import Console
from rich.table import Table

from certproxy.models import PARAM_TABLE

console = Console()


def build_table() -> Table:
    table = Table(title="Parameters")
    table.add_column("Command", style="magenta")
    table.add_column("Parameter", style="cyan", no_wrap=True)
    table.add_column("ENV", style="yellow", no_wrap=True)
    table.add_column("Description")

    for spec in PARAM_TABLE:
        table.add_row(spec.command, spec.flag or "", spec.env or "", spec.description)
    return table


def print_params() -> None:
    """Show every CLI flag, its environment variable and what it does."""
    console.print(build_table())
