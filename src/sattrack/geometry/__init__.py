"""Sky-plot geometry"""

from .kernel import (
    ArcPath,
    PlotPoint,
    PolylinePath,
    Viewport,
    build_arc_path,
    elevation_to_radius,
    fit_circle_through_three,
    segment_path,
    to_plot_point,
)
from .pass_geometry import entry_point, exit_point, is_geostationary, peak_azimuth, peak_point, predicted_path_arc

__all__ = [
    "ArcPath",
    "PlotPoint",
    "PolylinePath",
    "Viewport",
    "build_arc_path",
    "elevation_to_radius",
    "fit_circle_through_three",
    "segment_path",
    "to_plot_point",
    "entry_point",
    "exit_point",
    "is_geostationary",
    "peak_azimuth",
    "peak_point",
    "predicted_path_arc",
]
