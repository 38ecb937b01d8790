"""``themeforge size-report`` — raw and gzip size of a theme's JS bundles."""

from __future__ import annotations

import asyncio
from pathlib import Path

import typer
from rich.console import Console

from themeforge.config import ThemeforgeSettings
from themeforge.core.sequencer import BuildSequencer
from themeforge.core.size_report import SizeReporter
from themeforge.errors import ThemeforgeError
from themeforge.models.config import PipelineConfig
from themeforge.monitor.renderer import MonitorRenderer

console = Console()


def size_report_cmd(
    project: str = typer.Option(..., "--project", "-p", help="Application project name."),
    theme: str = typer.Option(..., "--theme", "-t", help="Theme to build and measure."),
    root: Path = typer.Option(None, "--root", "-r", help="Workspace root."),
    table: bool = typer.Option(
        False, "--table", help="Print a table instead of name;size;gzipped lines."
    ),
) -> None:
    """Build one theme with a stats manifest and report its bundle sizes."""
    config = PipelineConfig.from_settings(project, ThemeforgeSettings(), package_root=root)
    reporter = SizeReporter(BuildSequencer(config))

    try:
        sizes = asyncio.run(reporter.report(theme))
    except ThemeforgeError as exc:
        console.print(f"[bold red]Error:[/bold red] {exc}")
        raise typer.Exit(code=exc.exit_code) from None

    if table:
        console.print(MonitorRenderer.render_sizes(theme, sizes))
        return
    for entry in sizes:
        typer.echo(entry.as_line())
