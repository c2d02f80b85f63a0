"""Rich terminal formatter for ShipScore."""

import io
from typing import Optional

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from ..models import NONE_DETECTED, ShipScoreReport, Status
from .base import BaseFormatter

_STATUS_COLOR = {
    Status.PASS: "green",
    Status.WARNING: "yellow",
    Status.CRITICAL: "red",
}

_STATUS_STYLE = {
    Status.PASS: "[green]pass[/green]",
    Status.WARNING: "[yellow]warning[/yellow]",
    Status.CRITICAL: "[red bold]critical[/red bold]",
}


def _ship_score_color(score: int) -> str:
    # The composite has no configured thresholds; these bands are display only.
    if score >= 70:
        return "green"
    elif score >= 40:
        return "yellow"
    else:
        return "red"


class RichFormatter(BaseFormatter):
    """Summary panel followed by a per-category table."""

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console()

    def render(self, report: ShipScoreReport) -> None:
        self.console.print(self._summary(report))
        self.console.print(self._table(report))

    def format(self, report: ShipScoreReport) -> str:
        console = Console(file=io.StringIO(), record=True, width=self.console.width)
        console.print(self._summary(report))
        console.print(self._table(report))
        return console.export_text()

    def _summary(self, report: ShipScoreReport) -> Panel:
        stack = report.stack
        color = _ship_score_color(report.ship_score)
        technologies = ", ".join(stack.technologies) or NONE_DETECTED
        body = (
            f"[bold {color}]{report.ship_score}[/bold {color}] / 100\n\n"
            f"[dim]Stack:[/dim] {technologies}\n"
            f"[dim]Framework:[/dim] {stack.framework}    "
            f"[dim]Build tool:[/dim] {stack.build_tool}"
        )
        return Panel(body, title="[bold cyan]Ship Score[/bold cyan]", expand=False)

    def _table(self, report: ShipScoreReport) -> Table:
        table = Table(show_header=True, header_style="bold", show_lines=True)
        table.add_column("Category", style="cyan", no_wrap=True)
        table.add_column("Score", justify="right")
        table.add_column("Status")
        table.add_column("Findings")
        table.add_column("Suggestion", style="dim")

        for item in report.categories:
            color = _STATUS_COLOR[item.status]
            table.add_row(
                item.category.value,
                f"[{color}]{item.score}[/{color}]",
                _STATUS_STYLE[item.status],
                "\n".join(item.findings),
                item.suggestion if item.fix_available else "",
            )
        return table
