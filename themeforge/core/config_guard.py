"""Scoped backup and guaranteed restoration of the global build configuration.

The pipeline has to add per-theme entries to ``angular.json`` for the
build tool to see them, but those entries must never survive the run.
``ConfigMutationGuard`` snapshots the file on entry and puts it back on
every exit path: normal completion, an exception, or SIGINT/SIGTERM.

Usage::

    with ConfigMutationGuard(config.config_path, config.backup_path) as guard:
        guard.add_interrupt_callback(runner.terminate_all)
        ...  # mutate angular.json freely

    # or, for a plain callable
    ConfigMutationGuard(path, backup).guard(critical_section)
"""

from __future__ import annotations

import logging
import os
import shutil
import signal
import threading
from collections.abc import Callable
from pathlib import Path
from types import FrameType
from typing import Any, TypeVar

from themeforge.core.hasher import file_digest
from themeforge.errors import PreconditionError, RestoreFailure

logger = logging.getLogger(__name__)

T = TypeVar("T")

_GUARDED_SIGNALS = tuple(
    sig for sig in (getattr(signal, "SIGINT", None), getattr(signal, "SIGTERM", None))
    if sig is not None
)


class ConfigMutationGuard:
    """Back up a configuration file and restore it unconditionally.

    Parameters
    ----------
    config_path:
        The file the critical section is allowed to mutate.
    backup_path:
        Where the snapshot is kept. Defaults to ``<name>.save<suffix>`` next
        to the original.
    handle_signals:
        Install SIGINT/SIGTERM handlers while the guard is active. Only
        possible from the main thread; elsewhere this is skipped.
    """

    def __init__(
        self,
        config_path: Path,
        backup_path: Path | None = None,
        *,
        handle_signals: bool = True,
    ) -> None:
        self.config_path = Path(config_path)
        self.backup_path = (
            Path(backup_path)
            if backup_path is not None
            else self.config_path.with_name(
                f"{self.config_path.stem}.save{self.config_path.suffix}"
            )
        )
        self.handle_signals = handle_signals
        self._snapshot_digest: str | None = None
        self._active = False
        self._restoring = False
        self._deferred_signal: int | None = None
        self._previous_handlers: dict[int, Any] = {}
        self._interrupt_callbacks: list[Callable[[], None]] = []

    # ------------------------------------------------------------------
    # Scoped acquisition
    # ------------------------------------------------------------------

    def __enter__(self) -> ConfigMutationGuard:
        self.backup()
        self._install_signal_handlers()
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        try:
            self.restore()
        finally:
            self._uninstall_signal_handlers()
        deferred, self._deferred_signal = self._deferred_signal, None
        if deferred is not None:
            _exit_for_signal(deferred)
        return False

    def guard(self, critical_section: Callable[[], T]) -> T:
        """Run *critical_section* with the configuration file protected."""
        with self:
            return critical_section()

    def add_interrupt_callback(self, callback: Callable[[], None]) -> None:
        """Register *callback* to run on SIGINT/SIGTERM, before restoring."""
        self._interrupt_callbacks.append(callback)

    @property
    def active(self) -> bool:
        return self._active

    # ------------------------------------------------------------------
    # Backup / restore
    # ------------------------------------------------------------------

    def backup(self) -> None:
        """Copy the configuration file to the backup location."""
        if not self.config_path.is_file():
            raise PreconditionError(
                f"Build configuration not found: {self.config_path}"
            )
        if self.backup_path.exists():
            raise PreconditionError(
                f"Stale configuration backup found at {self.backup_path}; a previous "
                f"run did not finish cleanly. Restore it over {self.config_path.name} "
                "or delete it before building again."
            )
        shutil.copy2(self.config_path, self.backup_path)
        self._snapshot_digest = file_digest(self.config_path)
        self._active = True
        logger.debug("Backed up %s to %s", self.config_path, self.backup_path)

    def restore(self) -> None:
        """Move the backup over the original. Idempotent.

        Raises ``RestoreFailure`` if the backup cannot be moved back or the
        restored bytes differ from the snapshot. A signal arriving while
        the restore is in progress is handled once it has finished.
        """
        if not self._active or self._restoring:
            return
        self._restoring = True
        try:
            self._restore()
        finally:
            self._restoring = False

    def _restore(self) -> None:
        logger.info("Restoring %s", self.config_path.name)
        try:
            os.replace(self.backup_path, self.config_path)
            self._active = False
            restored_digest = file_digest(self.config_path)
        except OSError as exc:
            logger.critical(
                "Could not restore %s from %s: %s",
                self.config_path, self.backup_path, exc,
            )
            raise RestoreFailure(
                f"Could not restore {self.config_path} from {self.backup_path}: {exc}"
            ) from exc

        if restored_digest != self._snapshot_digest:
            logger.critical(
                "Restored %s does not match its snapshot", self.config_path
            )
            raise RestoreFailure(
                f"Restored {self.config_path} does not match the snapshot taken "
                "before the run"
            )

    # ------------------------------------------------------------------
    # Signal handling
    # ------------------------------------------------------------------

    def _install_signal_handlers(self) -> None:
        if not self.handle_signals:
            return
        if threading.current_thread() is not threading.main_thread():
            logger.debug("Not in the main thread; interrupt handlers not installed")
            return
        for sig in _GUARDED_SIGNALS:
            self._previous_handlers[sig] = signal.getsignal(sig)
            signal.signal(sig, self._on_signal)

    def _uninstall_signal_handlers(self) -> None:
        for sig, handler in self._previous_handlers.items():
            signal.signal(sig, handler)
        self._previous_handlers.clear()

    def _on_signal(self, signum: int, frame: FrameType | None) -> None:
        if self._restoring:
            logger.warning(
                "Received %s while restoring %s; exiting once restored",
                signal.Signals(signum).name, self.config_path.name,
            )
            self._deferred_signal = signum
            return
        logger.warning(
            "Received %s; cleaning up %s",
            signal.Signals(signum).name, self.config_path.name,
        )
        for callback in self._interrupt_callbacks:
            try:
                callback()
            except Exception:  # noqa: BLE001
                logger.exception("Interrupt callback %r failed", callback)
        self.restore()
        self._uninstall_signal_handlers()
        self._deferred_signal = None
        _exit_for_signal(signum)


def _exit_for_signal(signum: int) -> None:
    if signum == getattr(signal, "SIGINT", None):
        raise KeyboardInterrupt
    raise SystemExit(128 + signum)
