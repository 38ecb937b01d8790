"""Pipeline orchestrator — the central coordinator for a multi-theme build.

The ThemeBuildOrchestrator wires theme discovery, the ConfigMutationGuard,
the ConfigurationSynthesizer, the BuildSequencer, the ArtifactComposer,
the SettingsMerger and the MarkupGenerator into one run:

    discover themes (preconditions, nothing mutated yet)
    guard angular.json
        SynthesizeConfig -> BuildThemes -> Compose(principal) -> Compose(tenant)...
        remove build manifests
    restore angular.json (always)

A failure partway through leaves tenants already composed in place and
later tenants absent; there is no per-tenant rollback.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Any

from themeforge.core.composer import ArtifactComposer
from themeforge.core.config_guard import ConfigMutationGuard
from themeforge.core.markup import MarkupGenerator, load_build_settings
from themeforge.core.process_runner import ProcessRunner
from themeforge.core.sequencer import BuildSequencer
from themeforge.core.settings_merger import SettingsMerger
from themeforge.core.synthesizer import ConfigurationSynthesizer
from themeforge.core.themes import customer_ids, discover_themes, tenant_ids
from themeforge.errors import ThemeforgeError
from themeforge.models.config import PipelineConfig
from themeforge.models.stages import RunReport
from themeforge.stages.base import BaseStage
from themeforge.stages.build import BuildThemesStage
from themeforge.stages.compose import ComposeThemeStage
from themeforge.stages.synthesize import SynthesizeConfigStage

logger = logging.getLogger(__name__)


class ThemeBuildOrchestrator:
    """Runs the whole multi-theme pipeline for one project.

    Parameters
    ----------
    config:
        The bound project and workspace layout.
    runner:
        Process runner for the build tool. A new one rooted at the package
        root is created if not provided.
    env:
        Environment overrides passed to every build invocation.
    run_id:
        Identifier for this run. Generated if None.
    handle_signals:
        Let the configuration guard install SIGINT/SIGTERM handlers.
    """

    def __init__(
        self,
        config: PipelineConfig,
        *,
        runner: ProcessRunner | None = None,
        env: Mapping[str, str] | None = None,
        run_id: str | None = None,
        handle_signals: bool = True,
    ) -> None:
        self.config = config
        self.runner = runner or ProcessRunner(cwd=config.root)
        self.sequencer = BuildSequencer(config, self.runner, env=env)
        self.synthesizer = ConfigurationSynthesizer()
        self.composer = ArtifactComposer(config)
        self.settings_merger = SettingsMerger(config)
        self.handle_signals = handle_signals

        ts = datetime.now(timezone.utc).strftime("%Y%m%d-%H%M%S")
        self.run_id = run_id or f"tf-{ts}-{uuid.uuid4().hex[:3]}"
        self.report = RunReport(run_id=self.run_id, project_name=config.project_name)

    # ------------------------------------------------------------------
    # Planning
    # ------------------------------------------------------------------

    def plan(self, tenants: list[str], markup: MarkupGenerator) -> list[BaseStage]:
        """The ordered stages for *tenants* (principal first)."""
        stages: list[BaseStage] = [
            SynthesizeConfigStage(self.config, self.synthesizer),
            BuildThemesStage(self.sequencer),
        ]
        stages.extend(
            ComposeThemeStage(
                tenant, self.config, self.composer, self.settings_merger, markup
            )
            for tenant in tenants
        )
        return stages

    # ------------------------------------------------------------------
    # Run
    # ------------------------------------------------------------------

    async def run(self) -> RunReport:
        """Execute the pipeline and return the run report.

        Raises the first ``ThemeforgeError`` encountered after the global
        configuration has been restored.
        """
        themes = discover_themes(self.config.themes_path, self.config.principal_theme)
        tenants = tenant_ids(themes)
        customers = customer_ids(themes)
        markup = MarkupGenerator(load_build_settings(self.config, tenants))

        self.report.tenants = tenants
        stages = self.plan(tenants, markup)
        for stage in stages:
            self.report.register(stage.stage_id, stage.display_name)

        run_context: dict[str, Any] = {
            "run_id": self.run_id,
            "config": self.config,
            "report": self.report,
            "tenants": tenants,
            "customers": customers,
            "stage_results": {},
        }

        logger.info(
            "Run %s: building %s for %s",
            self.run_id, self.config.project_name, ", ".join(tenants),
        )
        guard = ConfigMutationGuard(
            self.config.config_path,
            self.config.backup_path,
            handle_signals=self.handle_signals,
        )
        try:
            with guard:
                guard.add_interrupt_callback(self.runner.terminate_all)
                for stage in stages:
                    await stage.run_stage(run_context)
                self.sequencer.remove_manifests(tenants)
        except ThemeforgeError as exc:
            logger.error("Run %s failed: %s", self.run_id, exc)
            raise

        logger.info("Run %s completed for %d theme(s)", self.run_id, len(tenants))
        return self.report
