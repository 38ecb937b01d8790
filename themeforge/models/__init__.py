"""Themeforge data models — Pydantic v2, frozen where they are values."""

from themeforge.models.build import (
    AssetManifest,
    BuildAsset,
    BuildConfigEntry,
    StylePreprocessorOptions,
)
from themeforge.models.config import PipelineConfig
from themeforge.models.markup import (
    DEFAULT_BUILD_SETTINGS,
    BodySettings,
    HeadTag,
    HtmlSettings,
)
from themeforge.models.stages import (
    VALID_TRANSITIONS,
    InvalidTransitionError,
    RunReport,
    StageRecord,
    StageState,
)

__all__ = [
    # build
    "AssetManifest",
    "BuildAsset",
    "BuildConfigEntry",
    "StylePreprocessorOptions",
    # config
    "PipelineConfig",
    # markup
    "DEFAULT_BUILD_SETTINGS",
    "BodySettings",
    "HeadTag",
    "HtmlSettings",
    # stages
    "VALID_TRANSITIONS",
    "InvalidTransitionError",
    "RunReport",
    "StageRecord",
    "StageState",
]
