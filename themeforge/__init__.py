"""Themeforge: multi-theme build and composition pipeline.

Builds one web application once per theme. The principal theme's build
provides the shared JavaScript baseline and asset manifest; every other
theme is composed on top of it with its own assets, stylesheet, merged
deployment settings and generated ``index.html``.
"""

__version__ = "0.1.0"
__description__ = "Multi-theme build and composition pipeline"

from themeforge.core.orchestrator import ThemeBuildOrchestrator
from themeforge.models.config import PipelineConfig

__all__ = ["PipelineConfig", "ThemeBuildOrchestrator", "__version__"]
