"""Bundle size report: raw and gzip size of every emitted JavaScript asset."""

from __future__ import annotations

import gzip
import logging
from pathlib import Path

from pydantic import BaseModel, ConfigDict

from themeforge.core.sequencer import BuildSequencer
from themeforge.errors import MissingArtifactError
from themeforge.models.build import AssetManifest

logger = logging.getLogger(__name__)


class AssetSize(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    size: int
    gzipped_size: int

    def as_line(self) -> str:
        return f"{self.name};{self.size};{self.gzipped_size}"


def gzip_size(path: Path) -> int:
    """Size in bytes of *path* once gzip-compressed at level 9."""
    return len(gzip.compress(path.read_bytes(), compresslevel=9))


def measure_assets(output_dir: Path, manifest: AssetManifest) -> list[AssetSize]:
    """Measure the JavaScript assets listed in *manifest*, largest gzip first."""
    sizes: list[AssetSize] = []
    for asset in manifest.javascript_assets():
        path = output_dir / asset.name
        if not path.is_file():
            raise MissingArtifactError(f"Asset listed in manifest is missing: {path}")
        sizes.append(
            AssetSize(
                name=asset.name.split(".")[0],
                size=asset.size,
                gzipped_size=gzip_size(path),
            )
        )
    return sorted(sizes, key=lambda s: s.gzipped_size, reverse=True)


class SizeReporter:
    """Builds one theme with a stats manifest and measures its bundles."""

    def __init__(self, sequencer: BuildSequencer) -> None:
        self.sequencer = sequencer
        self.config = sequencer.config

    async def report(self, theme: str) -> list[AssetSize]:
        await self.sequencer.build(theme, with_stats=True)
        manifest = AssetManifest.from_file(self.config.manifest_path(theme))
        sizes = measure_assets(self.config.dist_path(theme), manifest)
        logger.info("Measured %d JavaScript asset(s) for %s", len(sizes), theme)
        return sizes
