"""Shared test fixtures for Themeforge."""

from __future__ import annotations

import json
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

from themeforge.core.process_runner import ProcessResult, ProcessRunner
from themeforge.errors import BuildFailure
from themeforge.models.build import AssetManifest
from themeforge.models.config import PipelineConfig

PRINCIPAL = "forgerock"
PROJECT = "app"

PRINCIPAL_STATS: dict[str, Any] = {
    "assets": [
        {"name": "runtime.js", "size": 12},
        {"name": "polyfills.js", "size": 30},
        {"name": "main.js", "size": 200},
        {"name": "styles.abc123.css", "size": 22},
    ],
    "assetsByChunkName": {
        "runtime": "runtime.js",
        "polyfills": "polyfills.js",
        "main": ["main.js", "main.js.map"],
        "styles": "styles.abc123.css",
    },
}


def write_json(path: Path, data: Any) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2), encoding="utf-8")
    return path


def write_text(path: Path, text: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


def angular_config(project_type: str = "application") -> dict[str, Any]:
    return {
        "version": 1,
        "projects": {
            PROJECT: {
                "projectType": project_type,
                "root": f"projects/{PROJECT}",
                "architect": {
                    "build": {
                        "options": {"outputPath": f"dist/{PROJECT}"},
                        "configurations": {
                            "production": {"optimization": True},
                            PRINCIPAL: {"optimization": True, "outputHashing": "all"},
                        },
                    }
                },
            },
            "shared": {"projectType": "library", "root": "projects/shared"},
        },
    }


# ---------------------------------------------------------------------------
# Workspace
# ---------------------------------------------------------------------------


@pytest.fixture
def make_workspace(tmp_path: Path) -> Callable[..., PipelineConfig]:
    """Factory fixture: lay out angular.json, themes and settings under tmp_path.

    ``customers`` maps each customer theme id to its options:
    ``assets`` (relative path -> content), ``app_assets``, ``settings``
    (deployment-settings document) and ``build_settings``.
    """

    def _factory(
        customers: dict[str, dict[str, Any]] | None = None,
        *,
        infra_settings: dict[str, Any] | None = None,
        project_type: str = "application",
    ) -> PipelineConfig:
        root = tmp_path
        write_json(root / "angular.json", angular_config(project_type))
        write_text(root / f"themes/{PRINCIPAL}/assets/logo.svg", "<svg>forgerock</svg>")
        write_json(
            root / f"projects/{PROJECT}/docker/deployment-settings.json",
            infra_settings
            if infra_settings is not None
            else {
                "apiUrl": "https://api.example.com",
                "features": {"analytics": True, "darkMode": False},
                "locales": ["en"],
            },
        )

        for theme, options in (customers or {}).items():
            theme_dir = root / "themes" / theme
            theme_dir.mkdir(parents=True, exist_ok=True)
            for rel, content in options.get("assets", {}).items():
                write_text(theme_dir / "assets" / rel, content)
            for rel, content in options.get("app_assets", {}).items():
                write_text(theme_dir / "apps" / PROJECT / "assets" / rel, content)
            if "settings" in options:
                write_json(theme_dir / "deployment-settings.json", options["settings"])
            if "build_settings" in options:
                write_json(theme_dir / "build-settings.json", options["build_settings"])

        return PipelineConfig(project_name=PROJECT, package_root=root)

    return _factory


@pytest.fixture
def workspace(make_workspace: Callable[..., PipelineConfig]) -> PipelineConfig:
    """A workspace with the principal theme and one customer, ``acme``."""
    return make_workspace(
        {
            "acme": {
                "assets": {"logo.svg": "<svg>acme</svg>"},
                "settings": {
                    "defaultSettings": {"features": {"darkMode": True}},
                    "appsSettings": {PROJECT: {"apiUrl": "https://acme.example.com"}},
                },
                "build_settings": {
                    "defaultSettings": {
                        "html": {
                            "head": [{"id": "title", "tag": "<title>Acme</title>"}]
                        }
                    }
                },
            }
        }
    )


@pytest.fixture
def principal_manifest() -> AssetManifest:
    return AssetManifest.model_validate(PRINCIPAL_STATS)


# ---------------------------------------------------------------------------
# Fake build tool
# ---------------------------------------------------------------------------


class FakeBuildRunner(ProcessRunner):
    """Stands in for ``ng build``: records calls and writes plausible output.

    The build with the stats flag produces hashed principal output and a
    ``stats.json``; any other build produces an unhashed ``styles.css``.
    """

    def __init__(self, root: Path, *, fail_on: set[str] | None = None) -> None:
        super().__init__(cwd=root)
        self.root = root
        self.fail_on = fail_on or set()
        self.calls: list[list[str]] = []
        self.config_at_build: list[dict[str, Any]] = []

    async def run(
        self,
        command: str,
        args,
        *,
        silent: bool = False,
        env=None,
        cwd=None,
        wait_for_match=None,
    ) -> ProcessResult:
        argv = [command, *(a for a in args if a is not None)]
        self.calls.append(argv)
        configuration = argv[argv.index("--configuration") + 1]
        output = self.root / argv[argv.index("--output-path") + 1]
        self.config_at_build.append(
            json.loads((self.root / "angular.json").read_text(encoding="utf-8"))
        )

        if configuration in self.fail_on:
            raise BuildFailure(
                f"build of {configuration} failed", command=argv, returncode=1
            )

        output.mkdir(parents=True, exist_ok=True)
        if "--statsJson" in argv:
            write_text(output / "index.html", "<html>skeleton</html>")
            write_text(output / "runtime.js", "/* runtime */")
            write_text(output / "polyfills.js", "/* polyfills */")
            write_text(output / "main.js", "/* main */")
            write_text(output / "styles.abc123.css", "/* forgerock styles */")
            write_text(output / "assets/logo.svg", "<svg>built</svg>")
            write_text(output / "assets/i18n/en.json", "{}")
            write_json(output / "stats.json", PRINCIPAL_STATS)
        else:
            write_text(output / "styles.css", f"/* {configuration} styles */")
            write_text(output / "main.js", f"/* {configuration} main */")
        return ProcessResult(command=argv, returncode=0)

    def built(self) -> list[str]:
        return [call[call.index("--configuration") + 1] for call in self.calls]


@pytest.fixture
def make_runner(tmp_path: Path) -> Callable[..., FakeBuildRunner]:
    def _factory(**kwargs: Any) -> FakeBuildRunner:
        return FakeBuildRunner(tmp_path, **kwargs)

    return _factory


@pytest.fixture
def fake_runner(make_runner: Callable[..., FakeBuildRunner]) -> FakeBuildRunner:
    return make_runner()
