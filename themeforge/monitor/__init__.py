"""Rich rendering of pipeline run reports."""

from themeforge.monitor.renderer import MonitorRenderer

__all__ = ["MonitorRenderer"]
