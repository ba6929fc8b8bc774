"""Render-ready scene descriptions for the sky plot"""

from .background import background_grid, background_svg
from .scene import RenderModel, Scene
from .telemetry import Telemetry, format_telemetry

__all__ = ["RenderModel", "Scene", "Telemetry", "background_grid", "background_svg", "format_telemetry"]
