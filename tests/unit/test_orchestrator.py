"""Unit tests for the ThemeBuildOrchestrator."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import pytest

from themeforge.core.markup import MarkupGenerator
from themeforge.core.orchestrator import ThemeBuildOrchestrator
from themeforge.errors import BuildFailure, PreconditionError
from themeforge.models.config import PipelineConfig
from themeforge.models.stages import StageState
from themeforge.stages import BaseStage, BuildThemesStage, ComposeThemeStage, SynthesizeConfigStage


# ---------------------------------------------------------------------------
# Test: construction and planning
# ---------------------------------------------------------------------------


class TestOrchestratorInit:
    def test_run_id_generated(self, workspace: PipelineConfig):
        orch = ThemeBuildOrchestrator(workspace)
        assert orch.run_id.startswith("tf-")
        assert orch.report.run_id == orch.run_id

    def test_run_id_provided(self, workspace: PipelineConfig):
        assert ThemeBuildOrchestrator(workspace, run_id="my-run").run_id == "my-run"

    def test_components_share_the_runner(self, workspace: PipelineConfig, fake_runner):
        orch = ThemeBuildOrchestrator(workspace, runner=fake_runner)
        assert orch.sequencer.runner is fake_runner

    def test_plan_order(self, workspace: PipelineConfig):
        orch = ThemeBuildOrchestrator(workspace)
        stages = orch.plan(["forgerock", "acme", "globex"], MarkupGenerator())
        assert [type(s) for s in stages[:2]] == [SynthesizeConfigStage, BuildThemesStage]
        assert all(isinstance(s, ComposeThemeStage) for s in stages[2:])
        assert [s.stage_id for s in stages] == [
            "synthesize_config",
            "build_themes",
            "compose:forgerock",
            "compose:acme",
            "compose:globex",
        ]


# ---------------------------------------------------------------------------
# Test: run
# ---------------------------------------------------------------------------


class TestOrchestratorRun:
    @pytest.mark.asyncio
    async def test_successful_run(self, workspace: PipelineConfig, fake_runner):
        orch = ThemeBuildOrchestrator(workspace, runner=fake_runner, handle_signals=False)
        report = await orch.run()

        assert report.succeeded
        assert report.tenants == ["forgerock", "acme"]
        assert fake_runner.built() == ["forgerock", "acme"]

    @pytest.mark.asyncio
    async def test_stages_see_the_run_id_and_tenants_of_the_report(
        self, workspace: PipelineConfig, fake_runner
    ):
        orch = ThemeBuildOrchestrator(workspace, runner=fake_runner, handle_signals=False)
        seen: list[dict[str, Any]] = []
        original_plan = orch.plan

        class _Record(BaseStage):
            stage_id = "record"
            display_name = "Record"

            async def execute(self, run_context: dict[str, Any]) -> dict[str, Any]:
                seen.append(dict(run_context))
                return {}

        orch.plan = lambda tenants, markup: [*original_plan(tenants, markup), _Record()]
        report = await orch.run()

        assert seen[0]["run_id"] == report.run_id == orch.run_id
        assert seen[0]["tenants"] == report.tenants == ["forgerock", "acme"]
        assert seen[0]["customers"] == ["acme"]
        assert seen[0]["config"] is workspace
        assert report.state_of("record") == StageState.PASSED

    @pytest.mark.asyncio
    async def test_preconditions_fail_before_anything_runs(
        self, make_workspace: Callable[..., PipelineConfig], fake_runner
    ):
        config = make_workspace({"Bad_Name": {}})
        orch = ThemeBuildOrchestrator(config, runner=fake_runner, handle_signals=False)
        with pytest.raises(PreconditionError):
            await orch.run()
        assert fake_runner.calls == []
        assert not config.backup_path.exists()

    @pytest.mark.asyncio
    async def test_build_failure_marks_report(self, workspace: PipelineConfig, make_runner):
        runner = make_runner(fail_on={"acme"})
        orch = ThemeBuildOrchestrator(workspace, runner=runner, handle_signals=False)
        original = workspace.config_path.read_bytes()

        with pytest.raises(BuildFailure):
            await orch.run()

        assert orch.report.state_of("synthesize_config") == StageState.PASSED
        assert orch.report.state_of("build_themes") == StageState.FAILED
        assert orch.report.state_of("compose:acme") == StageState.NOT_STARTED
        assert orch.report.failed_stages == ["build_themes"]
        assert workspace.config_path.read_bytes() == original
        assert not workspace.backup_path.exists()

    @pytest.mark.asyncio
    async def test_interrupt_callback_terminates_runner(self, workspace: PipelineConfig, fake_runner):
        terminated: list[bool] = []
        fake_runner.terminate_all = lambda: terminated.append(True)

        orch = ThemeBuildOrchestrator(workspace, runner=fake_runner, handle_signals=False)
        await orch.run()
        # Only called on a signal
        assert terminated == []
