"""Themeforge CLI — Typer-based command-line interface.

Provides the ``themeforge`` command with ``build`` and ``size-report``
subcommands. Output uses Rich for formatted terminal display.
"""
