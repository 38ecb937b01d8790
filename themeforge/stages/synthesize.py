"""Stage — add a build configuration for every customer theme."""

from __future__ import annotations

from typing import Any

from themeforge.core.synthesizer import ConfigurationSynthesizer
from themeforge.models.config import PipelineConfig
from themeforge.stages.base import BaseStage


class SynthesizeConfigStage(BaseStage):
    """Writes missing per-theme entries into the (guarded) global config."""

    def __init__(
        self, config: PipelineConfig, synthesizer: ConfigurationSynthesizer | None = None
    ) -> None:
        self.config = config
        self.synthesizer = synthesizer or ConfigurationSynthesizer()

    @property
    def stage_id(self) -> str:
        return "synthesize_config"

    @property
    def display_name(self) -> str:
        return "Synthesize Build Configuration"

    async def execute(self, run_context: dict[str, Any]) -> dict[str, Any]:
        customers: list[str] = run_context.get("customers", [])
        added = self.synthesizer.synthesize(
            self.config.config_path, self.config.project_name, customers
        )
        return {"added": added, "customers": customers}
