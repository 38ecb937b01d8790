"""Rich terminal renderer for a pipeline RunReport.

Color scheme
------------
- green     : PASSED
- red       : FAILED
- yellow    : RUNNING
- dim       : NOT_STARTED
"""

from __future__ import annotations

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from themeforge.core.size_report import AssetSize
from themeforge.models.stages import RunReport, StageState

_STATE_ICONS: dict[StageState, str] = {
    StageState.PASSED: "[green]PASSED[/green]",
    StageState.FAILED: "[bold red]FAILED[/bold red]",
    StageState.RUNNING: "[yellow]RUNNING[/yellow]",
    StageState.NOT_STARTED: "[dim]NOT STARTED[/dim]",
}


class MonitorRenderer:
    """Renders run reports and size reports as Rich output.

    Parameters
    ----------
    console:
        Rich Console instance. A new one is created if not provided.
    """

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()

    def render_report(self, report: RunReport) -> Panel:
        table = Table(show_header=True, header_style="bold", expand=True)
        table.add_column("#", justify="right", style="dim", width=3)
        table.add_column("Stage", style="cyan")
        table.add_column("State", justify="center")
        table.add_column("Time", justify="right")
        table.add_column("Output", style="dim")

        for index, record in enumerate(report.records.values(), start=1):
            duration = record.duration_seconds
            detail = record.error or (record.output_hash[:12] if record.output_hash else "")
            table.add_row(
                str(index),
                record.display_name,
                _STATE_ICONS.get(record.state, record.state.value),
                f"{duration:.1f}s" if duration is not None else "",
                detail,
            )

        if report.succeeded:
            border, status = "green", "[green]succeeded[/green]"
        elif report.failed_stages:
            border, status = "red", "[red]failed[/red]"
        else:
            border, status = "yellow", "[yellow]incomplete[/yellow]"

        return Panel(
            table,
            title=(
                f"[bold]{report.project_name}[/bold] run [dim]{report.run_id}[/dim] "
                f"({status})"
            ),
            subtitle=", ".join(report.tenants),
            border_style=border,
        )

    def print_report(self, report: RunReport) -> None:
        self.console.print(self.render_report(report))

    @staticmethod
    def render_sizes(theme: str, sizes: list[AssetSize]) -> Table:
        table = Table(title=f"JavaScript bundles: {theme}")
        table.add_column("Asset", style="cyan")
        table.add_column("Size", justify="right")
        table.add_column("Gzipped", justify="right", style="green")
        for entry in sizes:
            table.add_row(entry.name, f"{entry.size:,}", f"{entry.gzipped_size:,}")
        return table
