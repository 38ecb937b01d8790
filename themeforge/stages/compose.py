"""Stage — finish one tenant's output directory.

For a customer theme: compose the directory from the principal build,
then write its merged deployment settings and ``index.html``. For the
principal theme the build output is already the baseline, so only the
settings and ``index.html`` are written.
"""

from __future__ import annotations

import logging
from typing import Any

from themeforge.core.composer import ArtifactComposer
from themeforge.core.markup import MarkupGenerator
from themeforge.core.settings_merger import SettingsMerger
from themeforge.errors import MissingArtifactError
from themeforge.models.build import AssetManifest
from themeforge.models.config import PipelineConfig
from themeforge.stages.base import BaseStage

logger = logging.getLogger(__name__)


class ComposeThemeStage(BaseStage):
    def __init__(
        self,
        tenant: str,
        config: PipelineConfig,
        composer: ArtifactComposer,
        settings_merger: SettingsMerger,
        markup: MarkupGenerator,
    ) -> None:
        self.tenant = tenant
        self.config = config
        self.composer = composer
        self.settings_merger = settings_merger
        self.markup = markup

    @property
    def stage_id(self) -> str:
        return f"compose:{self.tenant}"

    @property
    def display_name(self) -> str:
        return f"Compose {self.tenant}"

    @property
    def is_principal(self) -> bool:
        return self.tenant == self.config.principal_theme

    def describe_inputs(self, run_context: dict[str, Any]) -> dict[str, Any]:
        manifest: AssetManifest | None = run_context.get("asset_manifest")
        return {
            "run_id": run_context.get("run_id", ""),
            "tenant": self.tenant,
            "chunks": manifest.chunk_map() if manifest else {},
        }

    async def execute(self, run_context: dict[str, Any]) -> dict[str, Any]:
        manifest: AssetManifest | None = run_context.get("asset_manifest")
        if manifest is None:
            raise MissingArtifactError(
                f"No asset manifest available to compose {self.tenant}; "
                "the principal build did not run"
            )

        if not self.is_principal:
            self.composer.compose(self.tenant, manifest)

        settings = self.settings_merger.merge(self.tenant)
        settings_path = self.settings_merger.write(self.tenant, settings)

        document = self.markup.generate(
            self.config.project_name, self.tenant, manifest.assets_by_chunk_name
        )
        index_path = self.config.dist_path(self.tenant) / "index.html"
        index_path.write_text(document, encoding="utf-8")
        logger.info("Wrote %s", index_path)

        return {
            "tenant": self.tenant,
            "output": str(self.config.dist_path(self.tenant)),
            "settings": str(settings_path),
            "index": str(index_path),
        }
