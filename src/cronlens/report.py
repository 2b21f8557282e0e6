"""Report rendering for cron evaluations."""

import json
from dataclasses import dataclass

from rich.console import Console
from rich.table import Table

from cronlens.scheduling.evaluator import Evaluation
from cronlens.scheduling.search import TIMESTAMP_FORMAT


@dataclass
class EvaluationReport:
    """Field breakdown and upcoming executions of one expression."""

    evaluation: Evaluation
    timestamp_format: str = TIMESTAMP_FORMAT
    requested: int | None = None

    def __str__(self) -> str:
        """Return a formatted string representation using Rich."""
        console = Console(force_terminal=True, width=80)
        with console.capture() as capture:
            self._print_to_console(console)
        return capture.get()

    def _print_to_console(self, console: Console) -> None:
        evaluation = self.evaluation

        console.print()
        console.print(f"[bold]Cron Expression[/bold] {evaluation.expression.strip()}")
        console.print("━" * 52)

        if evaluation.error is not None:
            console.print(f"[red]✗ {evaluation.error}[/red]")
            console.print()
            return

        if evaluation.is_empty:
            console.print("[dim]No expression given[/dim]")
            console.print()
            return

        table = Table(show_header=True, header_style="bold")
        table.add_column("Field", style="cyan")
        table.add_column("Value", style="white")
        table.add_column("Active", justify="center")

        active = evaluation.active_fields
        for label, value in evaluation.field_values.items():
            marker = "[green]●[/green]" if active[label] else "[dim]○[/dim]"
            table.add_row(label, value, marker)

        console.print(table)
        console.print()

        if evaluation.pending:
            console.print("Calculating...")
            console.print()
            return

        executions = evaluation.formatted(self.timestamp_format)
        if not executions:
            console.print("[yellow]No upcoming executions found[/yellow]")
        else:
            console.print("[bold]Next executions[/bold]")
            for index, stamp in enumerate(executions, start=1):
                console.print(f"  {index}. {stamp}")

        if self.requested is not None and len(executions) < self.requested:
            console.print(
                f"[dim]Found {len(executions)} of {self.requested} requested "
                "within the iteration budget[/dim]"
            )
        console.print()

    def print(self) -> None:
        """Print the report to stdout."""
        console = Console()
        self._print_to_console(console)

    def to_dict(self) -> dict:
        """Convert report to dictionary for JSON serialization."""
        evaluation = self.evaluation
        error = evaluation.error
        return {
            "expression": evaluation.expression,
            "valid": evaluation.is_valid,
            "error": (
                {
                    "type": type(error).__name__,
                    "field": error.field,
                    "fragment": error.fragment,
                    "message": str(error),
                }
                if error is not None
                else None
            ),
            "fields": evaluation.field_values,
            "active_fields": evaluation.active_fields,
            "pending": evaluation.pending,
            "requested": self.requested,
            "next_executions": evaluation.formatted(self.timestamp_format),
        }

    def to_json(self, indent: int = 2) -> str:
        """Convert report to JSON string."""
        return json.dumps(self.to_dict(), indent=indent)
