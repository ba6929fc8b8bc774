"""Offline position and pass provider: propagates a TLE locally with skyfield.

Answers through the same asynchronous callback contract as the network providers,
so it can stand in for N2YO when no API key is configured.
"""
import logging
from datetime import datetime, timedelta, timezone
from typing import List, Optional

import numpy as np
from skyfield.api import EarthSatellite, load, wgs84

from sattrack.models import Observer, PassPrediction, Position, PositionBatch

from .base import (
    CompletedRequest,
    PassCallback,
    PassPredictionProvider,
    PendingRequest,
    PositionCallback,
    PositionProvider,
    ProviderError,
)
from .http import deliver_later

logger = logging.getLogger(__name__)


def load_tle(path: str) -> List[str]:
    """Load TLE file containing two-line elements. Returns list [name, line1, line2]."""
    with open(path, "r") as f:
        return parse_tle(f.read())


def parse_tle(text: str) -> List[str]:
    lines = [l.strip() for l in text.splitlines() if l.strip()]
    if len(lines) >= 3:
        return [lines[0], lines[1], lines[2]]
    if len(lines) == 2 and lines[0].startswith("1 ") and lines[1].startswith("2 "):
        return ["UNKNOWN", lines[0], lines[1]]
    raise ValueError("TLE must contain a name line and two element lines")


def _utc(dt: datetime) -> datetime:
    return dt.replace(tzinfo=timezone.utc) if dt.tzinfo is None else dt


def propagate_positions(tle: List[str], start: datetime, seconds: int, observer: Observer, step_s: int = 1, ts=None) -> List[Position]:
    """Observer-relative samples every `step_s` seconds for `seconds` seconds from `start`."""
    ts = ts or load.timescale()
    name, line1, line2 = tle
    sat = EarthSatellite(line1, line2, name, ts)
    station = wgs84.latlon(observer.lat, observer.lng, elevation_m=observer.alt)

    start = _utc(start)
    offsets = np.arange(0, int(seconds), int(step_s), dtype=float)
    t = ts.utc(start.year, start.month, start.day, start.hour, start.minute,
               start.second + start.microsecond / 1e6 + offsets)

    geocentric = sat.at(t)
    lat, lon = wgs84.latlon_of(geocentric)
    height = wgs84.height_of(geocentric)
    alt, az, distance = (sat - station).at(t).altaz()

    base_ms = start.timestamp() * 1000.0
    return [
        Position(
            azimuth=float(az.degrees[i]),
            elevation=float(alt.degrees[i]),
            distance=float(distance.km[i]),
            timestamp=base_ms + offsets[i] * 1000.0,
            sat_latitude=float(lat.degrees[i]),
            sat_longitude=float(lon.degrees[i]),
            sat_altitude=float(height.km[i]),
        )
        for i in range(len(offsets))
    ]


def compute_passes(tle: List[str], start: datetime, days: int, observer: Observer, min_elevation: float = 0.0, ts=None) -> List[PassPrediction]:
    """Passes in the next `days` reaching `min_elevation`, including one already in progress at `start`."""
    ts = ts or load.timescale()
    name, line1, line2 = tle
    sat = EarthSatellite(line1, line2, name, ts)
    station = wgs84.latlon(observer.lat, observer.lng, elevation_m=observer.alt)
    difference = sat - station
    norad_id = int(sat.model.satnum)

    start = _utc(start)
    t0 = ts.from_datetime(start)
    t1 = ts.from_datetime(start + timedelta(days=days))
    # 0 = rise, 1 = culminate, 2 = set
    times, events = sat.find_events(station, t0, t1, altitude_degrees=0.0)

    passes = []
    rise = None
    culminations = []
    # already above the horizon: the pass in progress starts at the window start
    if difference.at(t0).altaz()[0].degrees > 0.0:
        rise, culminations = t0, [t0]
    for ti, event in zip(times, events):
        if event == 0:
            rise, culminations = ti, []
        elif event == 1 and rise is not None:
            culminations.append(ti)
        elif event == 2 and rise is not None:
            if culminations:
                peak = max(culminations, key=lambda c: difference.at(c).altaz()[0].degrees)
                max_el, max_az, _ = difference.at(peak).altaz()
                if max_el.degrees >= min_elevation:
                    start_az = difference.at(rise).altaz()[1].degrees
                    end_az = difference.at(ti).altaz()[1].degrees
                    start_ms = rise.utc_datetime().timestamp() * 1000.0
                    end_ms = ti.utc_datetime().timestamp() * 1000.0
                    passes.append(PassPrediction(
                        norad_id=norad_id,
                        start_time=start_ms,
                        end_time=end_ms,
                        start_azimuth=float(start_az),
                        end_azimuth=float(end_az),
                        max_azimuth=float(max_az.degrees),
                        max_elevation=float(max_el.degrees),
                        duration=(end_ms - start_ms) / 1000.0,
                        max_time=peak.utc_datetime().timestamp() * 1000.0,
                    ))
            rise, culminations = None, []
    return passes


class SkyfieldProvider(PositionProvider, PassPredictionProvider):
    """Positions and passes computed from a TLE. Needs no API key."""

    max_seconds = 300
    requires_api_key = False

    def __init__(self, tle: List[str], step_s: int = 1, now=None):
        self.tle = tle
        self.step_s = int(step_s)
        self._now = now or (lambda: datetime.now(timezone.utc))
        self._ts = load.timescale()

    def request_positions(
        self,
        norad_id: int,
        observer: Observer,
        seconds: int,
        api_key: Optional[str],
        callback: PositionCallback,
    ) -> PendingRequest:
        try:
            seconds = max(1, min(int(seconds), self.max_seconds))
            positions = propagate_positions(self.tle, self._now(), seconds, observer, self.step_s, self._ts)
        except Exception as e:
            logger.warning("Local propagation for NORAD %s failed: %s", norad_id, e)
            deliver_later(callback, None, ProviderError(f"propagation failed: {e}"))
        else:
            deliver_later(callback, PositionBatch(positions, None), None)
        return CompletedRequest()

    def request_passes(
        self,
        norad_id: int,
        observer: Observer,
        days: int,
        min_elevation: float,
        api_key: Optional[str],
        callback: PassCallback,
    ) -> PendingRequest:
        try:
            passes = compute_passes(self.tle, self._now(), days, observer, min_elevation, self._ts)
        except Exception as e:
            logger.warning("Local pass prediction for NORAD %s failed: %s", norad_id, e)
            deliver_later(callback, None, ProviderError(f"pass prediction failed: {e}"))
        else:
            deliver_later(callback, passes, None)
        return CompletedRequest()
