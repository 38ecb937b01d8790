"""Async subprocess runner for the external build tool.

Output from both streams is captured in full. When the runner is not
silent, each non-empty line is forwarded to the logger (stdout at INFO,
stderr at WARNING) as it arrives.

A caller may pass ``wait_for_match``: the call then resolves as soon as
the output captured so far on either stream matches the pattern,
leaving the process running.
"""

from __future__ import annotations

import asyncio
import codecs
import logging
import os
import re
import sys
from collections.abc import Mapping, Sequence
from pathlib import Path

from pydantic import BaseModel, ConfigDict

from themeforge.errors import BuildFailure

logger = logging.getLogger(__name__)

_LINE_SPLIT = re.compile(r"[\n\r]+")
_READ_SIZE = 64 * 1024


class ProcessResult(BaseModel):
    """Captured output of a finished (or matched) subprocess."""

    model_config = ConfigDict(frozen=True)

    command: list[str]
    stdout: str = ""
    stderr: str = ""
    returncode: int | None = None  # None when resolved on a match
    matched: bool = False


class ProcessRunner:
    """Runs commands one at a time and tracks the ones still alive.

    Parameters
    ----------
    cwd:
        Default working directory for every command.
    """

    def __init__(self, cwd: Path | None = None) -> None:
        self.cwd = cwd
        self._processes: list[asyncio.subprocess.Process] = []

    @property
    def active_count(self) -> int:
        return sum(1 for p in self._processes if p.returncode is None)

    async def run(
        self,
        command: str,
        args: Sequence[str | None],
        *,
        silent: bool = False,
        env: Mapping[str, str] | None = None,
        cwd: Path | None = None,
        wait_for_match: str | re.Pattern[str] | None = None,
    ) -> ProcessResult:
        """Run *command* with *args* and wait for it.

        ``None`` entries in *args* are dropped. ``env`` values are layered
        over the current environment. Raises ``BuildFailure`` on a nonzero
        exit code or when the command cannot be started.
        """
        argv = [command, *(a for a in args if a is not None)]
        spawn_argv = list(argv)
        if sys.platform.startswith("win"):
            spawn_argv = ["cmd.exe", "/c", *argv]

        pattern = re.compile(wait_for_match) if wait_for_match else None
        workdir = cwd or self.cwd
        flags = ", ".join(
            f for f in (
                "silent" if silent else "",
                f"matching({pattern.pattern})" if pattern else "",
            ) if f
        )
        logger.info(
            "Running `%s`%s",
            " ".join(f'"{a}"' for a in argv),
            f" [{flags}]" if flags else "",
        )
        logger.debug("CWD: %s", workdir or Path.cwd())
        logger.debug("ENV: %s", dict(env) if env else {})

        try:
            proc = await asyncio.create_subprocess_exec(
                *spawn_argv,
                cwd=str(workdir) if workdir else None,
                env={**os.environ, **env} if env else None,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as exc:
            logger.error("Could not start %s: %s", command, exc)
            raise BuildFailure(
                f"Could not start {command!r}: {exc}", command=argv
            ) from exc

        self._processes.append(proc)
        stdout_parts: list[str] = []
        stderr_parts: list[str] = []
        matched = asyncio.Event()

        async def pump(stream: asyncio.StreamReader, sink: list[str], level: int) -> None:
            decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
            pending = ""
            while True:
                data = await stream.read(_READ_SIZE)
                text = decoder.decode(data, final=not data)
                if text:
                    sink.append(text)
                    if not silent:
                        *lines, pending = _LINE_SPLIT.split(pending + text)
                        for line in lines:
                            if line:
                                logger.log(level, "  %s", line)
                    if pattern is not None and not matched.is_set():
                        if pattern.search("".join(sink)):
                            matched.set()
                if not data:
                    break
            if pending and not silent:
                logger.log(level, "  %s", pending)

        readers = [
            asyncio.ensure_future(pump(proc.stdout, stdout_parts, logging.INFO)),
            asyncio.ensure_future(pump(proc.stderr, stderr_parts, logging.WARNING)),
        ]
        waiter = asyncio.ensure_future(self._wait(proc, readers))

        try:
            if pattern is not None:
                match_task = asyncio.ensure_future(matched.wait())
                await asyncio.wait(
                    {waiter, match_task}, return_when=asyncio.FIRST_COMPLETED
                )
                if matched.is_set():
                    logger.info("Output of %s matched %s", command, pattern.pattern)
                    return ProcessResult(
                        command=argv,
                        stdout="".join(stdout_parts),
                        stderr="".join(stderr_parts),
                        returncode=proc.returncode,
                        matched=True,
                    )
                match_task.cancel()
            returncode = await waiter
        except asyncio.CancelledError:
            self._terminate(proc)
            raise

        stdout = "".join(stdout_parts)
        stderr = "".join(stderr_parts)
        if returncode != 0:
            logger.error("`%s` exited with code %s", " ".join(argv), returncode)
            raise BuildFailure(
                f'Running "{" ".join(argv)}" returned error code {returncode}'
                f"\n\nSTDOUT:\n{stdout}\n\nSTDERR:\n{stderr}\n",
                command=argv,
                returncode=returncode,
                stdout=stdout,
                stderr=stderr,
            )
        return ProcessResult(
            command=argv, stdout=stdout, stderr=stderr, returncode=returncode
        )

    def terminate_all(self) -> None:
        """Terminate every tracked process that is still running."""
        for proc in list(self._processes):
            self._terminate(proc)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    async def _wait(
        self, proc: asyncio.subprocess.Process, readers: list[asyncio.Future]
    ) -> int:
        try:
            await asyncio.gather(*readers)
            return await proc.wait()
        finally:
            if proc in self._processes:
                self._processes.remove(proc)

    @staticmethod
    def _terminate(proc: asyncio.subprocess.Process) -> None:
        if proc.returncode is not None:
            return
        logger.warning("Terminating build process pid=%s", proc.pid)
        try:
            proc.terminate()
        except ProcessLookupError:
            pass
