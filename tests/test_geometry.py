import math

import pytest

from sattrack.geometry.kernel import (
    ArcPath,
    PlotPoint,
    PolylinePath,
    Viewport,
    build_arc_path,
    elevation_to_radius,
    fit_circle_through_three,
    normalize_azimuth,
    points_to_svg,
    segment_path,
    to_plot_point,
    wrap_degrees,
)
from sattrack.models import Position


def _pos(az, el=30.0, ts=0.0):
    return Position(azimuth=az, elevation=el, distance=1000.0, timestamp=ts)


def test_elevation_to_radius_linear():
    assert elevation_to_radius(90) == pytest.approx(0.0)
    assert elevation_to_radius(0) == pytest.approx(180.0)
    assert elevation_to_radius(45) == pytest.approx(90.0)
    # not clamped below the horizon
    assert elevation_to_radius(-10) == pytest.approx(200.0)


def test_to_plot_point_cardinals():
    n = to_plot_point(0, 0)
    e = to_plot_point(90, 0)
    s = to_plot_point(180, 0)
    w = to_plot_point(270, 0)
    assert (n.x, n.y) == pytest.approx((200.0, 20.0))
    assert (e.x, e.y) == pytest.approx((380.0, 200.0))
    assert (s.x, s.y) == pytest.approx((200.0, 380.0))
    assert (w.x, w.y) == pytest.approx((20.0, 200.0))
    zenith = to_plot_point(123, 90)
    assert (zenith.x, zenith.y) == pytest.approx((200.0, 200.0))


def test_custom_viewport():
    vp = Viewport(size=200, cx=100, cy=100, radius=90)
    p = to_plot_point(90, 45, vp)
    assert (p.x, p.y) == pytest.approx((145.0, 100.0))


def test_wrap_and_normalize():
    assert wrap_degrees(350) == pytest.approx(-10)
    assert wrap_degrees(-350) == pytest.approx(10)
    assert wrap_degrees(180) == pytest.approx(180)
    assert wrap_degrees(-180) == pytest.approx(180)
    assert normalize_azimuth(-90) == pytest.approx(270)
    assert normalize_azimuth(720) == pytest.approx(0)
    assert normalize_azimuth(359.5) == pytest.approx(359.5)


def test_segment_path_splits_on_north_crossing():
    segs = segment_path([_pos(350), _pos(355), _pos(5), _pos(10)])
    assert [len(s) for s in segs] == [2, 2]


def test_segment_path_no_split_for_small_steps():
    segs = segment_path([_pos(10), _pos(60), _pos(120), _pos(170)])
    assert len(segs) == 1 and len(segs[0]) == 4


def test_segment_path_keeps_singletons():
    segs = segment_path([_pos(10), _pos(350)])
    assert [len(s) for s in segs] == [1, 1]


def test_segment_path_short_input():
    assert segment_path([]) == []
    assert segment_path([_pos(10)]) == []


def test_segment_path_normalizes_before_comparing():
    # -5 reduces to 355, so stepping to 5 crosses north
    segs = segment_path([_pos(-5), _pos(5)])
    assert len(segs) == 2
    segs = segment_path([_pos(365), _pos(10)])
    assert len(segs) == 1


def test_fit_circle_three_points():
    c = fit_circle_through_three(PlotPoint(0, 10), PlotPoint(10, 0), PlotPoint(0, -10))
    assert c is not None
    assert (c.center.x, c.center.y) == pytest.approx((0.0, 0.0), abs=1e-9)
    assert c.radius == pytest.approx(10.0)


def test_fit_circle_collinear():
    assert fit_circle_through_three(PlotPoint(0, 0), PlotPoint(1, 1), PlotPoint(2, 2)) is None


def test_build_arc_path_collinear_falls_back_to_polyline():
    path = build_arc_path(PlotPoint(200, 20), PlotPoint(200, 200), PlotPoint(200, 380))
    assert isinstance(path, PolylinePath)
    assert path.to_svg() == "M 200.00 20.00 L 200.00 200.00 L 200.00 380.00"


def test_build_arc_path_passes_through_middle_point():
    p1 = PlotPoint(10 * math.cos(1.0), 10 * math.sin(1.0))
    p2 = PlotPoint(10, 0)
    p3 = PlotPoint(10 * math.cos(-1.0), 10 * math.sin(-1.0))
    arc = build_arc_path(p1, p2, p3)
    assert isinstance(arc, ArcPath)
    # p1 -> p2 -> p3 in decreasing atan2 angle
    assert arc.sweep is False
    assert arc.large_arc is False
    assert arc.span == pytest.approx(-2.0)
    assert arc.radius == pytest.approx(10.0)
    assert arc.to_svg() == "M 5.40 8.41 A 10.00 10.00 0 0 0 5.40 -8.41"


def test_build_arc_path_large_arc():
    # middle point on the far side: the arc must go the long way round
    p1 = PlotPoint(10 * math.cos(0.2), 10 * math.sin(0.2))
    p2 = PlotPoint(-10, 0)
    p3 = PlotPoint(10 * math.cos(-0.2), 10 * math.sin(-0.2))
    arc = build_arc_path(p1, p2, p3)
    assert isinstance(arc, ArcPath)
    assert arc.sweep is True
    assert arc.large_arc is True
    assert arc.span == pytest.approx(2 * math.pi - 0.4)


def test_points_to_svg():
    assert points_to_svg([PlotPoint(1, 2), PlotPoint(3.456, 4)]) == "M 1.00 2.00 L 3.46 4.00"
    assert points_to_svg([]) == ""
