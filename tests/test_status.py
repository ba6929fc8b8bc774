from sattrack.models import PassPrediction
from sattrack.tracking.status import (
    PassStatus,
    format_time_until_pass,
    is_stationary,
    pass_status,
    remove_expired_passes,
    should_show_predicted_path,
)

NOW = 1_700_000_000_000.0


def make_pass(start_offset_ms, duration_ms=600_000, norad_id=25544, start_az=200.0, end_az=20.0):
    start = NOW + start_offset_ms
    end = start + duration_ms
    return PassPrediction(norad_id, start, end, start_az, end_az, None, 40.0, duration_ms / 1000.0)


def test_pass_status():
    assert pass_status(make_pass(60_000), NOW) == PassStatus.UPCOMING
    assert pass_status(make_pass(-60_000), NOW) == PassStatus.PASSING
    assert pass_status(make_pass(-700_000), NOW) == PassStatus.PASSED
    assert pass_status(make_pass(0), NOW) == PassStatus.PASSING


def test_stationary_detection():
    assert is_stationary(make_pass(0, norad_id=43700))
    assert is_stationary(make_pass(0, start_az=150.0, end_az=151.0))
    assert not is_stationary(make_pass(0))
    assert pass_status(make_pass(-700_000, norad_id=43700), NOW) == PassStatus.STATIONARY


def test_format_time_until_pass():
    assert format_time_until_pass(make_pass(3_725_000), NOW) == "1h 2m"
    assert format_time_until_pass(make_pass(65_000), NOW) == "1m 5s"
    assert format_time_until_pass(make_pass(5_000), NOW) == "5s"
    assert format_time_until_pass(make_pass(-1_000), NOW) == "Passing"
    assert format_time_until_pass(make_pass(-700_000), NOW) == "Passed"
    assert format_time_until_pass(make_pass(0, norad_id=43700), NOW) == "Stationary"


def test_should_show_predicted_path():
    assert should_show_predicted_path(make_pass(5 * 60_000), NOW)
    assert not should_show_predicted_path(make_pass(20 * 60_000), NOW)
    assert not should_show_predicted_path(make_pass(-1_000), NOW)


def test_remove_expired_passes():
    recent = make_pass(-605_000)  # ended 5 s ago
    old = make_pass(-700_000)  # ended 100 s ago
    geo = make_pass(-700_000, norad_id=43700)
    upcoming = make_pass(60_000)
    assert remove_expired_passes([recent, old, geo, upcoming], NOW) == [recent, geo, upcoming]
