"""Abstract base stage with an enforced lifecycle.

Every concrete stage inherits from BaseStage and implements only
``execute()``. The ``run_stage()`` wrapper is **not overridable** — it
enforces the canonical ordering:

    compute_input_hash -> mark RUNNING -> execute
        -> compute_output_hash -> mark PASSED / FAILED -> record

Errors from the pipeline's own hierarchy propagate unchanged so callers can
tell a failed build from a missing artifact. Anything else is wrapped in
``StageExecutionError``.
"""

from __future__ import annotations

import abc
import logging
from typing import Any, final

from themeforge.core.hasher import compute_input_hash, compute_output_hash
from themeforge.errors import StageExecutionError, ThemeforgeError
from themeforge.models.stages import RunReport, StageState

logger = logging.getLogger(__name__)


class BaseStage(abc.ABC):
    """Abstract base for all Themeforge pipeline stages.

    Subclasses **must** implement:
        * ``stage_id``     — unique identifier (e.g. ``"build_themes"``).
        * ``display_name`` — human-readable name shown in the run report.
        * ``execute(run_context)`` — the stage's core logic.

    Subclasses **may** override ``describe_inputs()`` to control what the
    input hash covers.
    """

    @property
    @abc.abstractmethod
    def stage_id(self) -> str:
        ...

    @property
    @abc.abstractmethod
    def display_name(self) -> str:
        ...

    @abc.abstractmethod
    async def execute(self, run_context: dict[str, Any]) -> dict[str, Any]:
        """Run the stage.

        Parameters
        ----------
        run_context:
            Run-wide state: ``run_id``, ``config``, ``tenants``, the
            ``asset_manifest`` once built, and ``stage_results``.

        Returns
        -------
        dict:
            JSON-friendly result, stored under ``stage_results[stage_id]``.
        """
        ...

    def describe_inputs(self, run_context: dict[str, Any]) -> dict[str, Any]:
        return {
            "run_id": run_context.get("run_id", ""),
            "tenants": run_context.get("tenants", []),
        }

    # ------------------------------------------------------------------
    # Lifecycle (not overridable)
    # ------------------------------------------------------------------

    @final
    async def run_stage(self, run_context: dict[str, Any]) -> dict[str, Any]:
        report: RunReport | None = run_context.get("report")
        if report is not None:
            report.register(self.stage_id, self.display_name)

        input_hash = compute_input_hash(self.stage_id, self.describe_inputs(run_context))
        if report is not None:
            report.transition(self.stage_id, StageState.RUNNING, input_hash=input_hash)
        logger.info("%s [%s] started", self.display_name, self.stage_id)

        try:
            result = await self.execute(run_context)
        except ThemeforgeError as exc:
            self._fail(report, exc)
            raise
        except Exception as exc:
            self._fail(report, exc)
            raise StageExecutionError(f"Stage {self.stage_id} failed: {exc}") from exc

        output_hash = compute_output_hash(self.stage_id, result)
        if report is not None:
            report.transition(self.stage_id, StageState.PASSED, output_hash=output_hash)
        run_context.setdefault("stage_results", {})[self.stage_id] = result

        logger.info(
            "%s [%s] passed (output=%s)",
            self.display_name, self.stage_id, output_hash[:12],
        )
        return result

    @final
    def _fail(self, report: RunReport | None, exc: BaseException) -> None:
        logger.error("%s [%s] failed: %s", self.display_name, self.stage_id, exc)
        if report is not None:
            report.transition(
                self.stage_id, StageState.FAILED, error=f"{type(exc).__name__}: {exc}"
            )

    def __repr__(self) -> str:
        return f"<{type(self).__name__} stage_id={self.stage_id!r}>"
