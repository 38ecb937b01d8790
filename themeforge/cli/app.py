"""Main Typer application — imports and registers all CLI commands.

Entry point: ``themeforge`` (configured via pyproject.toml scripts).
"""

from __future__ import annotations

import typer

from themeforge.cli.commands.build import build_cmd
from themeforge.cli.commands.size_report import size_report_cmd
from themeforge.config import ThemeforgeSettings
from themeforge.logging import configure_logging

app = typer.Typer(
    name="themeforge",
    help="Themeforge: build one web application once per theme and compose the results.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
)


@app.callback()
def main_callback(
    log_level: str = typer.Option(
        None, "--log-level", help="DEBUG, INFO, WARNING or ERROR (default from THEMEFORGE_LOG_LEVEL)."
    ),
) -> None:
    configure_logging(log_level or ThemeforgeSettings().log_level)


app.command(name="build", help="Build and compose every theme of a project.")(build_cmd)
app.command(name="size-report", help="Report JavaScript bundle sizes for one theme.")(
    size_report_cmd
)


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
