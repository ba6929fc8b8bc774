"""Assembles pass geometry, live paths and the current marker into a drawable scene."""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Optional, Sequence, Tuple

from sattrack.geometry import pass_geometry
from sattrack.geometry.kernel import DEFAULT_VIEWPORT, PathDescriptor, PlotPoint, Viewport, points_to_svg, segment_path
from sattrack.models import PassPrediction, Position
from sattrack.tracking.status import is_stationary

from .background import BackgroundGrid, background_grid, background_svg
from .telemetry import Telemetry, format_telemetry

Polyline = Tuple[PlotPoint, ...]


def usable(azimuth: Optional[float], elevation: Optional[float]) -> bool:
    """Whether an az/el pair can be plotted. Both values zero counts as "never set"."""
    if azimuth is None or elevation is None:
        return False
    if not (math.isfinite(azimuth) and math.isfinite(elevation)):
        return False
    return not (azimuth == 0 and elevation == 0)


@dataclass(frozen=True)
class Scene:
    viewport: Viewport
    background: BackgroundGrid
    predicted_path: Optional[PathDescriptor] = None
    past_paths: Tuple[Polyline, ...] = ()
    future_paths: Tuple[Polyline, ...] = ()
    entry: Optional[PlotPoint] = None
    exit: Optional[PlotPoint] = None
    peak: Optional[PlotPoint] = None
    current: Optional[PlotPoint] = None
    telemetry: Telemetry = field(default_factory=Telemetry)
    stationary: bool = False
    no_data: bool = False

    def to_svg(self) -> str:
        vp = self.viewport
        parts = [
            f'<svg xmlns="http://www.w3.org/2000/svg" width="{vp.size:g}" height="{vp.size:g}" '
            f'viewBox="0 0 {vp.size:g} {vp.size:g}">',
            background_svg(vp),
        ]
        if self.predicted_path is not None:
            parts.append(
                f'<path d="{self.predicted_path.to_svg()}" fill="none" stroke="#60a5fa" '
                'stroke-width="2" stroke-dasharray="6,4" opacity="0.7"/>'
            )
        for seg in self.past_paths:
            if len(seg) > 1:
                parts.append(f'<path d="{points_to_svg(seg)}" fill="none" stroke="#22d3ee" stroke-width="3"/>')
        for seg in self.future_paths:
            if len(seg) > 1:
                parts.append(
                    f'<path d="{points_to_svg(seg)}" fill="none" stroke="#22d3ee" stroke-width="2" '
                    'stroke-dasharray="3,3" opacity="0.6"/>'
                )
        for point, color in ((self.entry, "#22c55e"), (self.exit, "#ef4444"), (self.peak, "#eab308")):
            if point is not None:
                parts.append(f'<circle cx="{point.x:.2f}" cy="{point.y:.2f}" r="5" fill="{color}"/>')
        if self.current is not None:
            parts.append(
                f'<circle cx="{self.current.x:.2f}" cy="{self.current.y:.2f}" r="7" fill="#22d3ee" '
                'stroke="#ffffff" stroke-width="2"/>'
            )
        if self.no_data:
            parts.append(
                f'<text x="{vp.cx:g}" y="{vp.cy:g}" text-anchor="middle" fill="#94a3b8" font-size="14">No position data</text>'
            )
        parts.append("</svg>")
        return "".join(parts)


class RenderModel:
    """Builds a Scene per redraw. Holds no satellite state between calls."""

    def __init__(self, viewport: Viewport = DEFAULT_VIEWPORT, distance_units: str = "km"):
        self.viewport = viewport
        self.distance_units = distance_units

    def _paths(self, positions: Sequence[Position]) -> Tuple[Polyline, ...]:
        valid = [p for p in positions if usable(p.azimuth, p.elevation)]
        return tuple(tuple(seg) for seg in segment_path(valid, self.viewport))

    def build(
        self,
        pass_: Optional[PassPrediction] = None,
        past: Sequence[Position] = (),
        future: Sequence[Position] = (),
        current: Optional[Position] = None,
    ) -> Scene:
        vp = self.viewport
        stationary = pass_ is not None and is_stationary(pass_)

        predicted = entry = exit_ = peak = None
        if pass_ is not None and not stationary:
            predicted = pass_geometry.predicted_path_arc(pass_, vp)
            entry = pass_geometry.entry_point(pass_, vp)
            exit_ = pass_geometry.exit_point(pass_, vp)
            peak = pass_geometry.peak_point(pass_, vp)

        if stationary:
            current = pass_geometry.stationary_position(pass_)
            past = future = ()

        marker = None
        if current is not None and usable(current.azimuth, current.elevation):
            marker = vp.to_plot_point(current.azimuth, current.elevation)
        else:
            current = None

        past_paths = self._paths(past)
        future_paths = self._paths(future)

        return Scene(
            viewport=vp,
            background=background_grid(vp),
            predicted_path=predicted,
            past_paths=past_paths,
            future_paths=future_paths,
            entry=entry,
            exit=exit_,
            peak=peak,
            current=marker,
            telemetry=format_telemetry(current, self.distance_units),
            stationary=stationary,
            no_data=marker is None and not past_paths and not future_paths,
        )

    def from_controller(self, pass_: Optional[PassPrediction], controller) -> Scene:
        """Scene for a pass using the live state of a TrackingController (may be idle)."""
        if controller is None or not controller.is_tracking:
            return self.build(pass_)
        return self.build(
            pass_,
            past=controller.past_positions(),
            future=controller.future_positions(),
            current=controller.current_position,
        )
