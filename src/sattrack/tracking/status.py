"""Pass status and time-until-pass helpers."""
from enum import Enum

from sattrack.geometry.pass_geometry import is_geostationary
from sattrack.models import PassPrediction

# satellites that never "pass" (QO-100)
GEOSTATIONARY_NORAD_IDS = frozenset({43700})

PREDICTED_PATH_LEAD_MS = 10 * 60 * 1000


class PassStatus(str, Enum):
    UPCOMING = "upcoming"
    PASSING = "passing"
    PASSED = "passed"
    STATIONARY = "stationary"


def is_stationary(pass_: PassPrediction) -> bool:
    return pass_.norad_id in GEOSTATIONARY_NORAD_IDS or is_geostationary(pass_)


def pass_status(pass_: PassPrediction, now_ms: float) -> PassStatus:
    if is_stationary(pass_):
        return PassStatus.STATIONARY
    if now_ms < pass_.start_time:
        return PassStatus.UPCOMING
    if now_ms <= pass_.end_time:
        return PassStatus.PASSING
    return PassStatus.PASSED


def should_show_predicted_path(pass_: PassPrediction, now_ms: float) -> bool:
    """True during the ten minutes before the pass starts."""
    return pass_.start_time - PREDICTED_PATH_LEAD_MS <= now_ms < pass_.start_time


def format_time_until_pass(pass_: PassPrediction, now_ms: float) -> str:
    status = pass_status(pass_, now_ms)
    if status == PassStatus.STATIONARY:
        return "Stationary"
    if status == PassStatus.PASSING:
        return "Passing"
    if status == PassStatus.PASSED:
        return "Passed"

    remaining = int(pass_.start_time - now_ms)
    hours = remaining // 3_600_000
    minutes = (remaining % 3_600_000) // 60_000
    seconds = (remaining % 60_000) // 1000
    if hours > 0:
        return f"{hours}h {minutes}m"
    if minutes > 0:
        return f"{minutes}m {seconds}s"
    return f"{seconds}s"


def remove_expired_passes(passes, now_ms: float, grace_ms: float = 10_000):
    """Drop passes that ended more than `grace_ms` ago. Stationary objects are kept."""
    return [p for p in passes if is_stationary(p) or now_ms - p.end_time < grace_ms]
