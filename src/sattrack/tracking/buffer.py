"""Time-ordered, duplicate-free position buffer with wraparound-aware interpolation."""
from __future__ import annotations

import math
from bisect import bisect_left, bisect_right
from typing import Iterable, Iterator, List, Optional, Tuple

from sattrack.geometry.kernel import normalize_azimuth, wrap_degrees
from sattrack.models import Position

# samples closer than this (after rounding) are the same sample
BUCKET_MS = 100


def bucket(timestamp: float) -> int:
    # round half up; round() would use banker's rounding
    return int(math.floor(timestamp / BUCKET_MS + 0.5))


def interpolate(a: Position, b: Position, t: float) -> Position:
    """Blend two samples, 0 <= t <= 1. Azimuth follows the shorter way round."""
    az = normalize_azimuth(a.azimuth + wrap_degrees(b.azimuth - a.azimuth) * t)

    def lerp(x, y):
        if x is None or y is None:
            return None
        return x + (y - x) * t

    return Position(
        azimuth=az,
        elevation=a.elevation + (b.elevation - a.elevation) * t,
        distance=a.distance + (b.distance - a.distance) * t,
        timestamp=a.timestamp + (b.timestamp - a.timestamp) * t,
        sat_latitude=lerp(a.sat_latitude, b.sat_latitude),
        sat_longitude=lerp(a.sat_longitude, b.sat_longitude),
        sat_altitude=lerp(a.sat_altitude, b.sat_altitude),
    )


class PositionBuffer:
    def __init__(self):
        self._samples: List[Position] = []
        self._times: List[float] = []

    def __len__(self) -> int:
        return len(self._samples)

    def __iter__(self) -> Iterator[Position]:
        return iter(self._samples)

    @property
    def samples(self) -> Tuple[Position, ...]:
        return tuple(self._samples)

    def clear(self) -> None:
        self._samples = []
        self._times = []

    def merge(self, incoming: Iterable[Position]) -> int:
        """Add samples whose 100 ms bucket is not present yet. Returns the number added.

        The new list is built aside and swapped in at the end, so readers never see a
        half-merged buffer.
        """
        seen = {bucket(p.timestamp) for p in self._samples}
        added = []
        for p in incoming:
            b = bucket(p.timestamp)
            if b in seen:
                continue
            seen.add(b)
            added.append(p)
        if not added:
            return 0
        merged = sorted(self._samples + added, key=lambda p: p.timestamp)
        self._samples = merged
        self._times = [p.timestamp for p in merged]
        return len(added)

    def prune(self, before_ms: float) -> int:
        """Drop samples older than `before_ms`."""
        idx = bisect_left(self._times, before_ms)
        if idx == 0:
            return 0
        self._samples = self._samples[idx:]
        self._times = self._times[idx:]
        return idx

    def past(self, now_ms: float) -> List[Position]:
        return self._samples[: bisect_right(self._times, now_ms)]

    def future(self, now_ms: float) -> List[Position]:
        return self._samples[bisect_right(self._times, now_ms):]

    def bracket(self, at_ms: float) -> Optional[Tuple[Position, Position]]:
        """The two consecutive samples around `at_ms`; the first/last pair outside the range."""
        n = len(self._samples)
        if n < 2:
            return None
        idx = bisect_right(self._times, at_ms)
        idx = min(max(idx, 1), n - 1)
        return self._samples[idx - 1], self._samples[idx]

    def interpolate(self, at_ms: float) -> Optional[Position]:
        """Position at `at_ms`, clamped to the first/last sample outside the buffered range."""
        if not self._samples:
            return None
        if at_ms <= self._times[0]:
            return self._samples[0]
        if at_ms >= self._times[-1]:
            return self._samples[-1]
        a, b = self.bracket(at_ms)
        span = b.timestamp - a.timestamp
        t = (at_ms - a.timestamp) / span if span > 0 else 0.0
        return interpolate(a, b, t)

    def radial_velocity_km_s(self, at_ms: float) -> Optional[float]:
        """Range rate from the consecutive pair around `at_ms`. Positive = receding."""
        pair = self.bracket(at_ms)
        if pair is None:
            return None
        a, b = pair
        dt = (b.timestamp - a.timestamp) / 1000.0
        if dt <= 0:
            return None
        return (b.distance - a.distance) / dt
