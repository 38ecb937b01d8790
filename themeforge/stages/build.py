"""Stage — build every theme, principal first, and capture its manifest."""

from __future__ import annotations

from typing import Any

from themeforge.core.sequencer import BuildSequencer
from themeforge.stages.base import BaseStage


class BuildThemesStage(BaseStage):
    """Runs the build sequence and publishes the principal's asset manifest.

    The manifest is placed on ``run_context["asset_manifest"]`` so compose
    stages read it as data rather than re-reading ``stats.json``.
    """

    def __init__(self, sequencer: BuildSequencer) -> None:
        self.sequencer = sequencer

    @property
    def stage_id(self) -> str:
        return "build_themes"

    @property
    def display_name(self) -> str:
        return "Build Themes"

    async def execute(self, run_context: dict[str, Any]) -> dict[str, Any]:
        tenants: list[str] = run_context.get("tenants", [])
        manifest = await self.sequencer.run(tenants)
        run_context["asset_manifest"] = manifest
        return {
            "built": list(tenants),
            "chunks": manifest.chunk_map(),
        }
