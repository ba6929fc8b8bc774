"""Static polar-plot background (horizon, elevation rings, cardinal spokes, labels).

Depends only on the viewport, so one copy is shared by every plot.
"""
import math
from dataclasses import dataclass
from functools import lru_cache
from typing import Tuple

from sattrack.geometry.kernel import DEFAULT_VIEWPORT, PlotPoint, Viewport

ELEVATION_RINGS = (30, 60)
CARDINALS = (("N", 0), ("E", 90), ("S", 180), ("W", 270))


@dataclass(frozen=True)
class Label:
    text: str
    at: PlotPoint
    size: int = 14
    bold: bool = True
    anchor: str = "middle"


@dataclass(frozen=True)
class BackgroundGrid:
    viewport: Viewport
    horizon_radius: float
    rings: Tuple[float, ...]
    spokes: Tuple[PlotPoint, ...]
    labels: Tuple[Label, ...]


@lru_cache(maxsize=8)
def background_grid(viewport: Viewport = DEFAULT_VIEWPORT) -> BackgroundGrid:
    c = PlotPoint(viewport.cx, viewport.cy)
    rings = tuple(viewport.elevation_to_radius(el) for el in ELEVATION_RINGS)
    spokes = tuple(viewport.to_plot_point(az, 0.0) for _, az in CARDINALS)

    labels = []
    # letters sit halfway into the margin outside the horizon
    label_r = (viewport.size / 2.0 + viewport.radius) / 2.0
    for name, az in CARDINALS:
        x = c.x + label_r * math.sin(math.radians(az))
        y = c.y - label_r * math.cos(math.radians(az))
        labels.append(Label(name, PlotPoint(x, y + 5.0)))
    for el in ELEVATION_RINGS:
        labels.append(Label(f"{el}°", PlotPoint(c.x + 10.0, c.y - viewport.elevation_to_radius(el) + 5.0), 10, False, "start"))
    labels.append(Label("Horizon (0°)", PlotPoint(c.x, c.y + viewport.radius + 15.0), 10, False))

    return BackgroundGrid(viewport, viewport.radius, rings, spokes, tuple(labels))


@lru_cache(maxsize=8)
def background_svg(viewport: Viewport = DEFAULT_VIEWPORT) -> str:
    grid = background_grid(viewport)
    cx, cy = viewport.cx, viewport.cy
    parts = [
        f'<circle cx="{cx:g}" cy="{cy:g}" r="{grid.horizon_radius:g}" fill="#0f172a" stroke="#334155" stroke-width="1"/>'
    ]
    for r in grid.rings:
        parts.append(
            f'<circle cx="{cx:g}" cy="{cy:g}" r="{r:g}" fill="none" stroke="#475569" stroke-width="1" stroke-dasharray="4,4"/>'
        )
    for p in grid.spokes:
        parts.append(
            f'<line x1="{cx:g}" y1="{cy:g}" x2="{p.x:.2f}" y2="{p.y:.2f}" stroke="#475569" stroke-width="1" opacity="0.3"/>'
        )
    for lab in grid.labels:
        weight = ' font-weight="bold"' if lab.bold else ""
        fill = "#94a3b8" if lab.bold else "#64748b"
        parts.append(
            f'<text x="{lab.at.x:.2f}" y="{lab.at.y:.2f}" text-anchor="{lab.anchor}" fill="{fill}" '
            f'font-size="{lab.size}"{weight}>{lab.text}</text>'
        )
    return "".join(parts)
