"""Rich-powered console output for retypist."""

from __future__ import annotations

from rich.console import Console as RichConsole
from rich.table import Table

_OUTCOME_STYLES = {
    "pass": ("green", "PASS"),
    "fail": ("yellow", "FAIL"),
    "error": ("red", "ERROR"),
}


class Console:
    """Terminal output for retypist using Rich."""

    def __init__(self, console: RichConsole | None = None) -> None:
        self.console = console or RichConsole()

    def success(self, message: str) -> None:
        self.console.print(f"[green]✓[/green] {message}")

    def error(self, message: str) -> None:
        self.console.print(f"[red]✗[/red] {message}")

    def warning(self, message: str) -> None:
        self.console.print(f"[yellow]![/yellow] {message}")

    def info(self, message: str) -> None:
        self.console.print(f"[blue]i[/blue] {message}")

    def show_batch(self, iteration: int, mutations: list) -> None:
        """List the mutations about to be tried together."""
        self.console.print(
            f"[bold]#{iteration}[/bold] trying {len(mutations)} mutation(s)"
        )
        for mutation in mutations:
            self.console.print(f"  [dim]{mutation.describe()}[/dim]", highlight=False)

    def iteration_status(self, iteration: int, outcome: str) -> None:
        """The terse per-iteration status token."""
        style, token = _OUTCOME_STYLES[outcome]
        self.console.print(f"[bold]#{iteration}[/bold] [{style}]{token}[/{style}]")

    def show_mutations(self, mutations: list) -> None:
        """Display every candidate mutation in a table."""
        table = Table(title="Candidate Mutations", border_style="cyan")
        table.add_column("File", style="cyan")
        table.add_column("Position", justify="right")
        table.add_column("Operation", style="bold")
        table.add_column("Replacement")
        for mutation in mutations:
            table.add_row(
                str(mutation.source_file.tree_relative),
                str(mutation.span.start),
                mutation.op.value,
                repr(mutation.op.replacement),
            )
        self.console.print(table)

    def show_stats(self, stats) -> None:
        """Display campaign counters."""
        table = Table(title="Campaign Summary", border_style="cyan")
        table.add_column("Metric", style="bold")
        table.add_column("Count", justify="right", style="cyan")
        table.add_row("Iterations", str(stats.iterations))
        table.add_row("Passed", str(stats.passed))
        table.add_row("Failed", str(stats.failed))
        table.add_row("Errors", str(stats.errors))
        table.add_row("Mutations committed", str(stats.mutations_committed))
        self.console.print(table)
