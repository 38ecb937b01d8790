"""Environment-driven settings for Themeforge.

Centralized configuration using pydantic-settings. Every value can be
overridden through ``THEMEFORGE_*`` environment variables or a ``.env``
file in the working directory.

Examples
--------
Override via environment::

    export THEMEFORGE_PRINCIPAL_THEME=forgerock
    export THEMEFORGE_BUILD_COMMAND=npx
    export THEMEFORGE_LOG_LEVEL=DEBUG
"""

from __future__ import annotations

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class ThemeforgeSettings(BaseSettings):
    """Workspace layout and build tool settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="THEMEFORGE_",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Workspace layout
    package_root: Path = Path(".")
    principal_theme: str = "forgerock"
    themes_dir: str = "themes"
    dist_dir: str = "dist"
    config_file: str = "angular.json"
    backup_file: str = "angular.save.json"

    # External build tool
    build_command: str = "ng"
    extra_webpack_config: str = "webpack.extra.js"  # empty string omits the flag
    stats_flag: str = "--statsJson"
    manifest_file: str = "stats.json"
    tenant_stylesheet: str = "styles.css"
    silent_builds: bool = True

    # Logging
    log_level: str = "INFO"
