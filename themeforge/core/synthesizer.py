"""Build configuration synthesis — one ``angular.json`` entry per theme.

Entries are additive: a configuration that already exists for a theme is
left exactly as it is, so running the synthesizer twice changes nothing
the second time.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from themeforge.errors import PreconditionError
from themeforge.models.build import BuildConfigEntry

logger = logging.getLogger(__name__)


class ConfigurationSynthesizer:
    """Injects per-theme build configurations into the global config file."""

    def synthesize(
        self, config_path: Path, project_name: str, tenant_ids: Iterable[str]
    ) -> list[str]:
        """Add a configuration entry for every tenant that lacks one.

        Returns the ids that were added. The file is rewritten whole, and
        only when at least one entry was added.
        """
        document = self._load(config_path)
        project = self._application_project(document, project_name, config_path)

        configurations: dict[str, Any] = (
            project.setdefault("architect", {})
            .setdefault("build", {})
            .setdefault("configurations", {})
        )

        added: list[str] = []
        for tenant in tenant_ids:
            if tenant in configurations:
                logger.debug("Configuration %r already present; skipping", tenant)
                continue
            configurations[tenant] = BuildConfigEntry.for_theme(
                tenant, project_name
            ).to_document()
            added.append(tenant)

        if added:
            config_path.write_text(
                json.dumps(document, indent=2) + "\n", encoding="utf-8"
            )
            logger.info(
                "%s updated with configuration(s): %s",
                config_path.name, ", ".join(added),
            )
        else:
            logger.info("%s already has every theme configuration", config_path.name)
        return added

    @staticmethod
    def _load(config_path: Path) -> dict[str, Any]:
        if not config_path.is_file():
            raise PreconditionError(f"Build configuration not found: {config_path}")
        try:
            return json.loads(config_path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            raise PreconditionError(
                f"{config_path} is not valid JSON: {exc}"
            ) from exc

    @staticmethod
    def _application_project(
        document: dict[str, Any], project_name: str, config_path: Path
    ) -> dict[str, Any]:
        project = document.get("projects", {}).get(project_name)
        if project is None:
            raise PreconditionError(
                f"Project {project_name!r} is not defined in {config_path.name}"
            )
        if project.get("projectType") != "application":
            raise PreconditionError(
                f"Project {project_name!r} must be an application, "
                f"not {project.get('projectType')!r}"
            )
        return project
