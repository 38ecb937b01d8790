"""Themeforge exception hierarchy.

All pipeline-level exceptions inherit from ThemeforgeError so the CLI can
report them uniformly and always exit nonzero.
"""

from __future__ import annotations


class ThemeforgeError(Exception):
    """Base exception for all Themeforge errors."""

    exit_code: int = 1


class PreconditionError(ThemeforgeError):
    """A required input is missing or invalid; raised before any mutation."""


class BuildFailure(ThemeforgeError):
    """The external build command exited nonzero or could not be started."""

    def __init__(
        self,
        message: str,
        *,
        command: list[str] | None = None,
        returncode: int | None = None,
        stdout: str = "",
        stderr: str = "",
    ) -> None:
        super().__init__(message)
        self.command = command or []
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr


class MissingArtifactError(ThemeforgeError):
    """An expected build output, manifest or chunk is absent."""


class RestoreFailure(ThemeforgeError):
    """Restoring the global build configuration failed. Fatal."""

    exit_code = 2


class StageExecutionError(ThemeforgeError):
    """A pipeline stage raised an unexpected exception."""
