"""Entry/exit/peak points and the predicted-path arc for a pass prediction."""
from __future__ import annotations

import math
from typing import Optional

from sattrack.models import PassPrediction, Position

from .kernel import DEFAULT_VIEWPORT, PathDescriptor, PlotPoint, Viewport, build_arc_path, normalize_azimuth

# azimuth sweep below which a pass is treated as a stationary (geostationary) object
GEOSTATIONARY_SWEEP_DEG = 5.0


def _valid(v: Optional[float]) -> bool:
    return v is not None and math.isfinite(v)


def is_geostationary(pass_: PassPrediction) -> bool:
    if not (_valid(pass_.start_azimuth) and _valid(pass_.end_azimuth)):
        return False
    return abs(pass_.start_azimuth - pass_.end_azimuth) < GEOSTATIONARY_SWEEP_DEG


def entry_point(pass_: PassPrediction, viewport: Viewport = DEFAULT_VIEWPORT) -> Optional[PlotPoint]:
    if is_geostationary(pass_) or not _valid(pass_.start_azimuth):
        return None
    return viewport.to_plot_point(pass_.start_azimuth, 0.0)


def exit_point(pass_: PassPrediction, viewport: Viewport = DEFAULT_VIEWPORT) -> Optional[PlotPoint]:
    if is_geostationary(pass_) or not _valid(pass_.end_azimuth):
        return None
    return viewport.to_plot_point(pass_.end_azimuth, 0.0)


def peak_azimuth(pass_: PassPrediction) -> Optional[float]:
    """Azimuth at culmination.

    Uses maxAzimuth when the prediction has one. Otherwise the midpoint of start and
    end azimuth, taken along the shorter arc when the raw difference exceeds 180°.
    """
    if _valid(pass_.max_azimuth):
        return normalize_azimuth(pass_.max_azimuth)

    start, end = pass_.start_azimuth, pass_.end_azimuth
    if not (_valid(start) and _valid(end)):
        return None

    if abs(end - start) > 180.0:
        if end > start:
            mid = (start + end - 360.0) / 2.0
        else:
            mid = (start + end + 360.0) / 2.0
    else:
        mid = (start + end) / 2.0
    return normalize_azimuth(mid)


def peak_point(pass_: PassPrediction, viewport: Viewport = DEFAULT_VIEWPORT) -> Optional[PlotPoint]:
    az = peak_azimuth(pass_)
    if az is None or not _valid(pass_.max_elevation):
        return None
    return viewport.to_plot_point(az, pass_.max_elevation)


def predicted_path_arc(pass_: PassPrediction, viewport: Viewport = DEFAULT_VIEWPORT) -> Optional[PathDescriptor]:
    if is_geostationary(pass_):
        return None
    entry = entry_point(pass_, viewport)
    peak = peak_point(pass_, viewport)
    exit_ = exit_point(pass_, viewport)
    if entry is None or peak is None or exit_ is None:
        return None
    return build_arc_path(entry, peak, exit_)


def stationary_position(pass_: PassPrediction) -> Optional[Position]:
    """Static sample for an object that does not move across the sky."""
    az = peak_azimuth(pass_)
    if az is None or not _valid(pass_.max_elevation):
        return None
    return Position(azimuth=az, elevation=pass_.max_elevation, distance=0.0, timestamp=pass_.start_time)
