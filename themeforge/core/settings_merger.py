"""Deployment settings: infrastructure defaults, tenant defaults, per-app overrides."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from themeforge.core.merge import deep_merge, load_json_document, tenant_layers
from themeforge.errors import MissingArtifactError
from themeforge.models.config import PipelineConfig

logger = logging.getLogger(__name__)

OUTPUT_FILE = "deployment-settings.json"


class SettingsMerger:
    """Produces the merged ``deployment-settings.json`` for each tenant.

    Precedence, lowest to highest: the project's infrastructure defaults,
    the tenant's ``defaultSettings``, the tenant's ``appsSettings.<project>``.
    The principal theme owns the infrastructure defaults and gets them as is.
    """

    def __init__(self, config: PipelineConfig) -> None:
        self.config = config

    def infrastructure_defaults(self) -> dict[str, Any]:
        path = self.config.infra_settings_path
        if not path.is_file():
            raise MissingArtifactError(
                f"Infrastructure deployment settings not found: {path}"
            )
        return load_json_document(path)

    def tenant_document(self, tenant: str) -> dict[str, Any]:
        path = self.config.tenant_settings_path(tenant)
        if not path.is_file():
            logger.info("Theme %s has no deployment settings; using defaults", tenant)
            return {}
        return load_json_document(path)

    def merge(self, tenant: str) -> dict[str, Any]:
        infra = self.infrastructure_defaults()
        if tenant == self.config.principal_theme:
            return deep_merge(infra)
        defaults, per_app = tenant_layers(
            self.tenant_document(tenant), self.config.project_name
        )
        return deep_merge(infra, defaults, per_app)

    def write(self, tenant: str, settings: dict[str, Any]) -> Path:
        path = self.config.dist_path(tenant) / OUTPUT_FILE
        path.write_text(json.dumps(settings, indent=2) + "\n", encoding="utf-8")
        logger.info("Wrote %s", path)
        return path
