import math

import pytest

from sattrack.geometry.kernel import ArcPath, Viewport
from sattrack.models import PassPrediction, Position
from sattrack.render.background import background_grid, background_svg
from sattrack.render.scene import RenderModel, usable
from sattrack.render.telemetry import compass_direction, format_distance, format_telemetry


def make_pass(start_az=315.0, end_az=45.0, max_az=0.0, max_el=60.0, norad_id=25544):
    return PassPrediction(norad_id, 1_000_000.0, 1_600_000.0, start_az, end_az, max_az, max_el, 600.0)


def _pos(az, el, ts=0.0, dist=800.0):
    return Position(azimuth=az, elevation=el, distance=dist, timestamp=ts)


def test_usable():
    assert usable(10.0, 20.0)
    assert usable(0.0, 20.0)
    assert not usable(0.0, 0.0)
    assert not usable(None, 20.0)
    assert not usable(float("nan"), 20.0)
    assert not usable(10.0, math.inf)


def test_compass_direction():
    assert compass_direction(0) == "N"
    assert compass_direction(22) == "N"
    assert compass_direction(23) == "NE"
    assert compass_direction(180) == "S"
    assert compass_direction(359) == "N"


def test_format_distance():
    assert format_distance(1234.4) == "1234 km"
    assert format_distance(1234.4, "miles") == "767 mi"
    assert format_distance(None) == "--"
    assert format_distance(0.0) == "--"


def test_format_telemetry():
    t = format_telemetry(_pos(45.4, 30.6, dist=1234.4))
    assert t.elevation == "31°"
    assert t.azimuth == "45° NE"
    assert t.distance == "1234 km"
    assert format_telemetry(_pos(359.6, 10.0)).azimuth == "0° N"
    empty = format_telemetry(None)
    assert (empty.elevation, empty.azimuth, empty.distance) == ("--", "--", "--")


def test_background_grid_is_cached_and_complete():
    grid = background_grid()
    assert grid is background_grid()
    assert grid.rings == pytest.approx((120.0, 60.0))
    texts = [lab.text for lab in grid.labels]
    assert texts[:4] == ["N", "E", "S", "W"]
    assert "30°" in texts and "60°" in texts and "Horizon (0°)" in texts
    svg = background_svg(Viewport(size=200, cx=100, cy=100, radius=90))
    assert svg.count("<circle") == 3


def test_build_without_pass_is_no_data():
    scene = RenderModel().build()
    assert scene.no_data
    assert scene.predicted_path is None
    assert "No position data" in scene.to_svg()


def test_build_pass_geometry_only():
    scene = RenderModel().build(make_pass())
    assert isinstance(scene.predicted_path, ArcPath)
    assert scene.entry is not None and scene.exit is not None and scene.peak is not None
    assert scene.current is None
    assert scene.no_data
    svg = scene.to_svg()
    assert svg.startswith("<svg") and svg.endswith("</svg>")
    assert 'stroke-dasharray="6,4"' in svg


def test_build_live_paths_split_at_north():
    past = [_pos(340, 20, 0), _pos(350, 30, 1000), _pos(10, 30, 2000)]
    future = [_pos(20, 25, 3000), _pos(30, 20, 4000)]
    scene = RenderModel().build(make_pass(), past=past, future=future, current=_pos(15, 28, 2500))
    assert [len(s) for s in scene.past_paths] == [2, 1]
    assert [len(s) for s in scene.future_paths] == [2]
    assert scene.current is not None
    assert not scene.no_data
    assert scene.telemetry.azimuth == "15° N"
    # the single-point past segment is not stroked
    assert scene.to_svg().count('stroke="#22d3ee" stroke-width="3"') == 1


def test_build_skips_unusable_samples_and_current():
    past = [_pos(0, 0, 0), _pos(100, 20, 1000), _pos(float("nan"), 20, 2000), _pos(110, 25, 3000)]
    scene = RenderModel().build(make_pass(), past=past, current=_pos(0, 0))
    assert scene.current is None
    assert [len(s) for s in scene.past_paths] == [2]
    assert scene.telemetry.elevation == "--"


def test_build_stationary_pass():
    geo = make_pass(start_az=180.0, end_az=181.0, max_az=180.5, max_el=35.0, norad_id=43700)
    scene = RenderModel().build(geo, past=[_pos(100, 20), _pos(110, 20, 1000)])
    assert scene.stationary
    assert scene.predicted_path is None
    assert scene.entry is None and scene.exit is None
    assert scene.past_paths == ()
    assert scene.current is not None
    assert scene.telemetry.elevation == "35°"
    assert not scene.no_data


def test_distance_units():
    scene = RenderModel(distance_units="miles").build(make_pass(), current=_pos(10, 10, dist=1000.0))
    assert scene.telemetry.distance == "621 mi"


def test_from_controller_idle():
    class Idle:
        is_tracking = False

    scene = RenderModel().from_controller(make_pass(), Idle())
    assert scene.current is None
    assert scene.predicted_path is not None
    assert RenderModel().from_controller(None, None).no_data
