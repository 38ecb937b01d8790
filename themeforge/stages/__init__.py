"""Themeforge pipeline stages.

Usage::

    from themeforge.stages import BuildThemesStage, ComposeThemeStage

    result = await stage.run_stage(run_context)
"""

from __future__ import annotations

from themeforge.stages.base import BaseStage
from themeforge.stages.build import BuildThemesStage
from themeforge.stages.compose import ComposeThemeStage
from themeforge.stages.synthesize import SynthesizeConfigStage

__all__ = [
    "BaseStage",
    "BuildThemesStage",
    "ComposeThemeStage",
    "SynthesizeConfigStage",
]
