"""Strictly sequential per-theme builds, principal first.

The principal build is the only one asked for a stats manifest: every
other theme's composed output reuses the principal's JavaScript and reads
file names from that manifest, so builds run one at a time and in order.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence

from themeforge.core.process_runner import ProcessRunner, ProcessResult
from themeforge.errors import PreconditionError
from themeforge.models.build import AssetManifest
from themeforge.models.config import PipelineConfig

logger = logging.getLogger(__name__)


class BuildSequencer:
    """Drives the external build tool once per theme.

    Parameters
    ----------
    config:
        The bound project and workspace layout.
    runner:
        Shared process runner; the orchestrator terminates its processes on
        interrupt.
    env:
        Environment overrides for every build invocation.
    """

    def __init__(
        self,
        config: PipelineConfig,
        runner: ProcessRunner | None = None,
        *,
        env: Mapping[str, str] | None = None,
    ) -> None:
        self.config = config
        self.runner = runner or ProcessRunner(cwd=config.root)
        self.env = dict(env) if env else None

    def build_args(self, tenant: str, *, with_stats: bool) -> list[str]:
        """Arguments for one ``<build-command> build`` invocation."""
        args = [
            "build",
            "--project",
            self.config.project_name,
            "--configuration",
            tenant,
            "--output-path",
            self.config.output_path_arg(tenant),
        ]
        if self.config.extra_webpack_config:
            args += ["--extra-webpack-config", self.config.extra_webpack_config]
        if with_stats:
            args.append(self.config.stats_flag)
        return args

    async def build(self, tenant: str, *, with_stats: bool = False) -> ProcessResult:
        logger.info("Building %s for %s", self.config.project_name, tenant)
        return await self.runner.run(
            self.config.build_command,
            self.build_args(tenant, with_stats=with_stats),
            silent=self.config.silent_builds,
            env=self.env,
            cwd=self.config.root,
        )

    async def run(self, tenant_ids: Sequence[str]) -> AssetManifest:
        """Build every tenant in order and return the principal's manifest.

        *tenant_ids* must start with the principal theme. The first failing
        build raises ``BuildFailure`` and the remaining tenants are not built.
        """
        if not tenant_ids or tenant_ids[0] != self.config.principal_theme:
            raise PreconditionError(
                f"Builds must start with the principal theme "
                f"{self.config.principal_theme!r}, got {list(tenant_ids)!r}"
            )

        manifest: AssetManifest | None = None
        for tenant in tenant_ids:
            is_principal = tenant == self.config.principal_theme
            await self.build(tenant, with_stats=is_principal)
            if is_principal:
                manifest = AssetManifest.from_file(self.config.manifest_path(tenant))
                logger.info(
                    "Loaded %s manifest: %d asset(s), %d chunk(s)",
                    tenant, len(manifest.assets), len(manifest.assets_by_chunk_name),
                )
        assert manifest is not None
        return manifest

    def remove_manifests(self, tenant_ids: Sequence[str]) -> list[str]:
        """Delete the transient stats manifest from every tenant output."""
        removed: list[str] = []
        for tenant in tenant_ids:
            path = self.config.manifest_path(tenant)
            if path.exists():
                path.unlink()
                removed.append(tenant)
        logger.debug("Removed build manifests for: %s", ", ".join(removed) or "none")
        return removed
