"""Compose a tenant's output directory on top of the principal build.

The principal build provides the JavaScript, runtime and HTML skeleton
shared by every tenant. A tenant's own build is kept only for its
compiled stylesheet; everything else comes from the principal output plus
the tenant's asset overlays.

There is no cross-tenant atomicity: a failure while composing one tenant
leaves the tenants composed before it untouched.
"""

from __future__ import annotations

import logging
import shutil
import tempfile
from pathlib import Path

from themeforge.errors import MissingArtifactError
from themeforge.models.build import AssetManifest
from themeforge.models.config import PipelineConfig

logger = logging.getLogger(__name__)


def overlay_directory(source: Path, destination: Path) -> int:
    """Copy *source* into *destination*, overwriting same-named files.

    Returns the number of files copied.
    """
    copied = 0
    for path in sorted(source.rglob("*")):
        if path.is_dir():
            continue
        target = destination / path.relative_to(source)
        target.parent.mkdir(parents=True, exist_ok=True)
        shutil.copy2(path, target)
        copied += 1
    return copied


def _remove_if_empty(directory: Path) -> None:
    try:
        directory.rmdir()
    except OSError:
        pass


class ArtifactComposer:
    """Builds ``dist/<tenant>`` from the principal output and tenant assets."""

    def __init__(self, config: PipelineConfig) -> None:
        self.config = config

    def compose(self, tenant: str, manifest: AssetManifest) -> Path:
        """Compose *tenant*'s final output directory and return its path."""
        principal = self.config.principal_theme
        principal_dir = self.config.dist_path(principal)
        tenant_dir = self.config.dist_path(tenant)

        # 1. Everything we read must be there before anything moves.
        if not principal_dir.is_dir():
            raise MissingArtifactError(f"Principal build output not found: {principal_dir}")
        if not self.config.manifest_path(principal).is_file():
            raise MissingArtifactError(
                f"Principal build manifest not found: {self.config.manifest_path(principal)}"
            )
        if not tenant_dir.is_dir():
            raise MissingArtifactError(f"Build output for {tenant} not found: {tenant_dir}")
        stylesheet = manifest.stylesheet

        # 2. Keep the tenant build aside, only its stylesheet is needed.
        staging_root = self.config.staging_path
        staging_root.mkdir(parents=True, exist_ok=True)
        temp_dir = Path(tempfile.mkdtemp(prefix=f"{tenant}-", dir=staging_root))
        aside = temp_dir / tenant
        shutil.move(str(tenant_dir), str(aside))

        # 3. The principal output is the baseline.
        shutil.copytree(principal_dir, tenant_dir)

        # 4. Tenant assets, then tenant-per-app assets; later layers win.
        self._overlay_assets(tenant, tenant_dir / "assets")

        # 5. The tenant's own compiled CSS replaces the principal's.
        compiled = aside / self.config.tenant_stylesheet
        if not compiled.is_file():
            raise MissingArtifactError(
                f"Compiled stylesheet for {tenant} not found: {compiled}"
            )
        shutil.copyfile(compiled, tenant_dir / stylesheet)

        # 6. Drop the tenant's build output.
        shutil.rmtree(temp_dir)
        _remove_if_empty(staging_root)

        logger.info("Composed %s from %s", tenant_dir, principal_dir.name)
        return tenant_dir

    def _overlay_assets(self, tenant: str, destination: Path) -> None:
        theme_assets = self.config.theme_assets_path(tenant)
        if theme_assets.is_dir():
            count = overlay_directory(theme_assets, destination)
            logger.debug("Overlaid %d file(s) from %s", count, theme_assets)
        else:
            logger.warning("Theme %s has no assets directory at %s", tenant, theme_assets)

        app_assets = self.config.theme_app_assets_path(tenant)
        if app_assets.is_dir():
            count = overlay_directory(app_assets, destination)
            logger.debug("Overlaid %d file(s) from %s", count, app_assets)
