import pytest

from sattrack.geometry.kernel import ArcPath, PolylinePath
from sattrack.geometry.pass_geometry import (
    entry_point,
    exit_point,
    is_geostationary,
    peak_azimuth,
    peak_point,
    predicted_path_arc,
    stationary_position,
)
from sattrack.models import PassPrediction


def make_pass(start_az, end_az, max_az=None, max_el=45.0, norad_id=25544, start=1_000_000.0, end=1_600_000.0):
    return PassPrediction(
        norad_id=norad_id,
        start_time=start,
        end_time=end,
        start_azimuth=start_az,
        end_azimuth=end_az,
        max_azimuth=max_az,
        max_elevation=max_el,
        duration=(end - start) / 1000.0,
    )


def test_geostationary_threshold():
    assert is_geostationary(make_pass(100, 102))
    assert not is_geostationary(make_pass(100, 105))
    assert not is_geostationary(make_pass(None, 102))


def test_entry_and_exit_on_horizon():
    p = make_pass(90, 270, 180)
    e = entry_point(p)
    x = exit_point(p)
    assert (e.x, e.y) == pytest.approx((380.0, 200.0))
    assert (x.x, x.y) == pytest.approx((20.0, 200.0))


def test_entry_exit_absent_for_geostationary_or_missing():
    assert entry_point(make_pass(100, 101)) is None
    assert exit_point(make_pass(100, 101)) is None
    assert entry_point(make_pass(None, 200)) is None
    assert exit_point(make_pass(10, None)) is None


def test_peak_azimuth_prefers_max_azimuth():
    assert peak_azimuth(make_pass(10, 100, max_az=400)) == pytest.approx(40)


@pytest.mark.parametrize(
    "start,end,expected",
    [
        (10, 100, 55),
        (350, 10, 0),
        (10, 350, 0),
        (270, 30, 330),
        (300, 100, 20),
    ],
)
def test_peak_azimuth_midpoint(start, end, expected):
    assert peak_azimuth(make_pass(start, end)) == pytest.approx(expected)


def test_peak_point_needs_elevation():
    assert peak_point(make_pass(10, 100, 55, max_el=None)) is None
    p = peak_point(make_pass(10, 100, 90, max_el=45))
    assert (p.x, p.y) == pytest.approx((290.0, 200.0))


def test_predicted_path_crossing_north():
    # NW -> N (60 deg up) -> NE: one arc, the short way over the top
    p = make_pass(315, 45, max_az=0, max_el=60)
    path = predicted_path_arc(p)
    assert isinstance(path, ArcPath)
    assert path.large_arc is False
    assert path.sweep is False
    assert (path.start.x, path.start.y) == pytest.approx((72.72, 72.72), abs=0.01)
    assert (path.end.x, path.end.y) == pytest.approx((327.28, 72.72), abs=0.01)
    assert path.to_svg().startswith("M 72.72 72.72 A ")


def test_predicted_path_overhead_is_straight():
    p = make_pass(0, 180, max_el=90)
    path = predicted_path_arc(p)
    assert isinstance(path, PolylinePath)
    assert len(path.points) == 3


def test_predicted_path_absent():
    assert predicted_path_arc(make_pass(100, 102)) is None
    assert predicted_path_arc(make_pass(10, 100, max_el=None)) is None


def test_stationary_position():
    p = make_pass(180.0, 181.0, max_az=180.5, max_el=35.0, norad_id=43700)
    pos = stationary_position(p)
    assert pos.azimuth == pytest.approx(180.5)
    assert pos.elevation == pytest.approx(35.0)
    assert pos.timestamp == p.start_time
