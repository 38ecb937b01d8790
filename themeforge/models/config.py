"""Pipeline configuration model."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict

from themeforge.config import ThemeforgeSettings


class PipelineConfig(BaseModel):
    """A project bound to a workspace layout.

    Every filesystem location the pipeline touches is derived here so the
    components never build paths on their own.
    """

    model_config = ConfigDict(frozen=True)

    project_name: str
    package_root: Path = Path(".")
    principal_theme: str = "forgerock"
    themes_dir: str = "themes"
    dist_dir: str = "dist"
    config_file: str = "angular.json"
    backup_file: str = "angular.save.json"
    build_command: str = "ng"
    extra_webpack_config: str = "webpack.extra.js"
    stats_flag: str = "--statsJson"
    manifest_file: str = "stats.json"
    tenant_stylesheet: str = "styles.css"
    silent_builds: bool = True

    @classmethod
    def from_settings(
        cls, project_name: str, settings: ThemeforgeSettings | None = None, **overrides
    ) -> PipelineConfig:
        """Build a PipelineConfig from environment settings plus overrides."""
        settings = settings or ThemeforgeSettings()
        values = settings.model_dump(exclude={"log_level"})
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(project_name=project_name, **values)

    # ------------------------------------------------------------------
    # Derived paths
    # ------------------------------------------------------------------

    @property
    def root(self) -> Path:
        return Path(self.package_root)

    @property
    def themes_path(self) -> Path:
        return self.root / self.themes_dir

    @property
    def config_path(self) -> Path:
        return self.root / self.config_file

    @property
    def backup_path(self) -> Path:
        return self.root / self.backup_file

    def theme_path(self, theme: str) -> Path:
        return self.themes_path / theme

    def theme_assets_path(self, theme: str) -> Path:
        return self.theme_path(theme) / "assets"

    def theme_app_assets_path(self, theme: str) -> Path:
        return self.theme_path(theme) / "apps" / self.project_name / "assets"

    def dist_path(self, theme: str) -> Path:
        return self.root / self.dist_dir / theme

    @property
    def staging_path(self) -> Path:
        """Scratch space under ``dist`` that no theme id can name."""
        return self.root / self.dist_dir / ".themeforge-tmp"

    def manifest_path(self, theme: str) -> Path:
        return self.dist_path(theme) / self.manifest_file

    def output_path_arg(self, theme: str) -> str:
        """The ``--output-path`` value, relative to the package root."""
        return f"{self.dist_dir}/{theme}"

    @property
    def infra_settings_path(self) -> Path:
        return self.root / "projects" / self.project_name / "docker" / "deployment-settings.json"

    def tenant_settings_path(self, theme: str) -> Path:
        return self.theme_path(theme) / "deployment-settings.json"

    def build_settings_path(self, theme: str) -> Path:
        return self.theme_path(theme) / "build-settings.json"

