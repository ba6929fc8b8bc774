"""Polar sky-plot geometry: az/el to plot coordinates, wraparound-safe paths and arc fitting.

All functions are pure and never raise for numeric input; they compute with whatever
they are given. Deciding whether a result is meaningful is left to the caller.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Union

from sattrack.models import Position

# collinearity threshold on the circumcenter determinant, in plot units
COLLINEAR_EPSILON = 1e-4

TWO_PI = 2.0 * math.pi


@dataclass(frozen=True)
class PlotPoint:
    x: float
    y: float


@dataclass(frozen=True)
class Viewport:
    """Square plot area. The outer circle of `radius` around the centre is the horizon."""

    size: float = 400.0
    cx: float = 200.0
    cy: float = 200.0
    radius: float = 180.0

    def elevation_to_radius(self, elevation: float) -> float:
        return self.radius * (1.0 - elevation / 90.0)

    def to_plot_point(self, azimuth: float, elevation: float) -> PlotPoint:
        r = self.elevation_to_radius(elevation)
        theta = math.radians(azimuth)
        return PlotPoint(self.cx + r * math.sin(theta), self.cy - r * math.cos(theta))


DEFAULT_VIEWPORT = Viewport()


@dataclass(frozen=True)
class Circle:
    center: PlotPoint
    radius: float


@dataclass(frozen=True)
class ArcPath:
    """A single circular arc from `start` to `end` (SVG arc semantics).

    `sweep` is True when the arc runs in the direction of increasing angle in plot
    coordinates (clockwise on screen, since y grows downwards).
    """

    start: PlotPoint
    end: PlotPoint
    center: PlotPoint
    radius: float
    start_angle: float
    span: float
    large_arc: bool
    sweep: bool

    def to_svg(self) -> str:
        r = _fmt(self.radius)
        return (
            f"M {_fmt(self.start.x)} {_fmt(self.start.y)} "
            f"A {r} {r} 0 {int(self.large_arc)} {int(self.sweep)} {_fmt(self.end.x)} {_fmt(self.end.y)}"
        )


@dataclass(frozen=True)
class PolylinePath:
    points: tuple

    def to_svg(self) -> str:
        if not self.points:
            return ""
        head, *rest = self.points
        cmds = [f"M {_fmt(head.x)} {_fmt(head.y)}"]
        cmds.extend(f"L {_fmt(p.x)} {_fmt(p.y)}" for p in rest)
        return " ".join(cmds)


PathDescriptor = Union[ArcPath, PolylinePath]


def _fmt(v: float) -> str:
    return f"{v:.2f}"


def wrap_degrees(delta: float) -> float:
    """Normalise an angle difference into (-180, 180]."""
    d = math.fmod(delta, 360.0)
    if d > 180.0:
        d -= 360.0
    elif d <= -180.0:
        d += 360.0
    return d


def normalize_azimuth(azimuth: float) -> float:
    """Reduce an azimuth into [0, 360)."""
    a = math.fmod(azimuth, 360.0)
    if a < 0.0:
        a += 360.0
    # fmod of a tiny negative can round back up to 360.0
    return 0.0 if a >= 360.0 else a


def elevation_to_radius(elevation: float, viewport: Viewport = DEFAULT_VIEWPORT) -> float:
    """Linear map: 90° -> 0 (centre), 0° -> horizon radius. Not clamped."""
    return viewport.elevation_to_radius(elevation)


def to_plot_point(azimuth: float, elevation: float, viewport: Viewport = DEFAULT_VIEWPORT) -> PlotPoint:
    """Azimuth 0° points up (North), 90° to the right (East)."""
    return viewport.to_plot_point(azimuth, elevation)


def segment_path(positions: Sequence[Position], viewport: Viewport = DEFAULT_VIEWPORT) -> List[List[PlotPoint]]:
    """Split a sample sequence into polylines wherever consecutive azimuths jump by more than 180°.

    The jump is the raw difference of the azimuths reduced into [0, 360), so 355° -> 5°
    counts as a 0°/360° crossing and starts a new polyline. Segments are never joined
    across a split. Returns [] for fewer than two samples.
    """
    if len(positions) < 2:
        return []

    segments: List[List[PlotPoint]] = []
    current = [viewport.to_plot_point(positions[0].azimuth, positions[0].elevation)]
    prev_az = normalize_azimuth(positions[0].azimuth)
    for pos in positions[1:]:
        az = normalize_azimuth(pos.azimuth)
        point = viewport.to_plot_point(pos.azimuth, pos.elevation)
        if abs(az - prev_az) > 180.0:
            segments.append(current)
            current = [point]
        else:
            current.append(point)
        prev_az = az
    segments.append(current)
    return segments


def fit_circle_through_three(p1: PlotPoint, p2: PlotPoint, p3: PlotPoint) -> Optional[Circle]:
    """Circumscribed circle of three points, or None when they are collinear."""
    x1, y1 = p1.x, p1.y
    x2, y2 = p2.x, p2.y
    x3, y3 = p3.x, p3.y

    d = 2.0 * (x1 * (y2 - y3) + x2 * (y3 - y1) + x3 * (y1 - y2))
    if abs(d) < COLLINEAR_EPSILON:
        return None

    s1 = x1 * x1 + y1 * y1
    s2 = x2 * x2 + y2 * y2
    s3 = x3 * x3 + y3 * y3
    ux = (s1 * (y2 - y3) + s2 * (y3 - y1) + s3 * (y1 - y2)) / d
    uy = (s1 * (x3 - x2) + s2 * (x1 - x3) + s3 * (x2 - x1)) / d
    return Circle(PlotPoint(ux, uy), math.hypot(x1 - ux, y1 - uy))


def build_arc_path(p1: PlotPoint, p2: PlotPoint, p3: PlotPoint) -> PathDescriptor:
    """Arc from p1 to p3 passing through p2; two straight segments if the points are collinear."""
    circle = fit_circle_through_three(p1, p2, p3)
    if circle is None:
        return PolylinePath((p1, p2, p3))

    c = circle.center
    a1 = math.atan2(p1.y - c.y, p1.x - c.x)
    a2 = math.atan2(p2.y - c.y, p2.x - c.x)
    a3 = math.atan2(p3.y - c.y, p3.x - c.x)

    forward = (a2 - a1) % TWO_PI + (a3 - a2) % TWO_PI
    if forward < TWO_PI:
        # increasing angle reaches p2 before p3
        sweep = True
        total = forward
    else:
        sweep = False
        total = 2.0 * TWO_PI - forward

    return ArcPath(
        start=p1,
        end=p3,
        center=c,
        radius=circle.radius,
        start_angle=a1,
        span=total if sweep else -total,
        large_arc=total > math.pi,
        sweep=sweep,
    )


def points_to_svg(points: Iterable[PlotPoint]) -> str:
    return PolylinePath(tuple(points)).to_svg()
