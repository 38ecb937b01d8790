"""``themeforge build`` — build and compose every theme of a project.

Runs the full pipeline, prints the run report and exits nonzero on any
failure. The global build configuration is restored in every case.
"""

from __future__ import annotations

import asyncio
from pathlib import Path

import typer
from rich.console import Console

from themeforge.config import ThemeforgeSettings
from themeforge.core.orchestrator import ThemeBuildOrchestrator
from themeforge.errors import RestoreFailure, ThemeforgeError
from themeforge.models.config import PipelineConfig
from themeforge.monitor.renderer import MonitorRenderer

console = Console()


def build_cmd(
    project: str = typer.Option(
        ...,
        "--project",
        "-p",
        help="Name of the application project in angular.json.",
    ),
    root: Path = typer.Option(
        None,
        "--root",
        "-r",
        help="Workspace root holding angular.json, themes/ and dist/.",
    ),
    principal: str = typer.Option(
        None,
        "--principal",
        help="Principal theme whose build is shared by every tenant.",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Stream the build tool's output.",
    ),
) -> None:
    """Build the principal theme, then every customer theme on top of it."""
    config = PipelineConfig.from_settings(
        project,
        ThemeforgeSettings(),
        package_root=root,
        principal_theme=principal,
        silent_builds=False if verbose else None,
    )
    orchestrator = ThemeBuildOrchestrator(config)
    renderer = MonitorRenderer(console)

    try:
        asyncio.run(orchestrator.run())
    except RestoreFailure as exc:
        renderer.print_report(orchestrator.report)
        console.print(
            f"[bold red]FATAL:[/bold red] {exc}\n"
            f"[red]Check {config.config_file} by hand; the backup may still be at "
            f"{config.backup_path}.[/red]"
        )
        raise typer.Exit(code=exc.exit_code) from None
    except ThemeforgeError as exc:
        if orchestrator.report.records:
            renderer.print_report(orchestrator.report)
        console.print(f"[bold red]Error:[/bold red] {exc}")
        raise typer.Exit(code=exc.exit_code) from None
    except KeyboardInterrupt:
        console.print(f"[yellow]Interrupted; {config.config_file} restored.[/yellow]")
        raise typer.Exit(code=130) from None

    renderer.print_report(orchestrator.report)
