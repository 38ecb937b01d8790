"""Themeforge core — build orchestration components."""

from themeforge.core.composer import ArtifactComposer
from themeforge.core.config_guard import ConfigMutationGuard
from themeforge.core.markup import MarkupGenerator
from themeforge.core.merge import deep_merge
from themeforge.core.process_runner import ProcessResult, ProcessRunner
from themeforge.core.sequencer import BuildSequencer
from themeforge.core.settings_merger import SettingsMerger
from themeforge.core.synthesizer import ConfigurationSynthesizer

__all__ = [
    "ArtifactComposer",
    "BuildSequencer",
    "ConfigMutationGuard",
    "ConfigurationSynthesizer",
    "MarkupGenerator",
    "ProcessResult",
    "ProcessRunner",
    "SettingsMerger",
    "deep_merge",
]
