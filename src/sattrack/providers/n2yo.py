"""N2YO REST client: real-time positions and radio pass predictions.

N2YO limits (per hour): positions 1000 requests, radiopasses 100 requests, and at most
300 seconds of positions per request. Radio passes are cached for 61 minutes.
"""
import logging
import math
import time
from typing import Callable, Dict, List, Optional, Tuple

from sattrack.models import Observer, PassPrediction, Position, PositionBatch

from .base import (
    CompletedRequest,
    MissingApiKey,
    PassCallback,
    PassPredictionProvider,
    PendingRequest,
    PositionCallback,
    PositionProvider,
    ProviderError,
    RateLimitExceeded,
)
from .http import JsonHttpClient, deliver_later

logger = logging.getLogger(__name__)

N2YO_BASE_URL = "https://api.n2yo.com/rest/v1/satellite"
MAX_POSITION_SECONDS = 300
POSITIONS_PER_HOUR = 1000
RADIOPASSES_PER_HOUR = 100
PASS_CACHE_MS = 61 * 60 * 1000
EARTH_RADIUS_KM = 6371.0


def slant_range_km(
    observer_lat: float,
    observer_lng: float,
    observer_alt_m: float,
    sat_lat: float,
    sat_lng: float,
    sat_alt_km: float,
) -> float:
    """Observer-satellite distance from the sub-satellite point, on a spherical Earth."""
    lat1 = math.radians(observer_lat)
    lat2 = math.radians(sat_lat)
    dlat = math.radians(sat_lat - observer_lat)
    dlng = math.radians(sat_lng - observer_lng)

    a = math.sin(dlat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(dlng / 2) ** 2
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

    r_obs = EARTH_RADIUS_KM + observer_alt_m / 1000.0
    r_sat = EARTH_RADIUS_KM + sat_alt_km
    # law of cosines
    return math.sqrt(max(0.0, r_obs * r_obs + r_sat * r_sat - 2 * r_obs * r_sat * math.cos(c)))


def check_payload(payload) -> dict:
    if not isinstance(payload, dict):
        raise ProviderError("N2YO: unexpected response shape")
    if payload.get("error"):
        raise ProviderError(f"N2YO API error: {payload['error']}")
    return payload


def parse_positions(payload, observer: Observer, server_timestamp: Optional[float] = None) -> PositionBatch:
    payload = check_payload(payload)
    raw = payload.get("positions")
    if not isinstance(raw, list):
        raise ProviderError("N2YO: response has no positions")

    out = []
    try:
        for p in raw:
            lat = float(p["satlatitude"])
            lng = float(p["satlongitude"])
            alt = float(p["sataltitude"])
            out.append(Position(
                azimuth=float(p["azimuth"]),
                elevation=float(p["elevation"]),
                distance=slant_range_km(observer.lat, observer.lng, observer.alt, lat, lng, alt),
                timestamp=float(p["timestamp"]) * 1000.0,
                sat_latitude=lat,
                sat_longitude=lng,
                sat_altitude=alt,
            ))
    except (KeyError, TypeError, ValueError) as e:
        raise ProviderError(f"N2YO: malformed position sample ({e})") from e

    info = payload.get("info") or {}
    logger.debug("N2YO positions: %d samples, transactions=%s", len(out), info.get("transactionscount"))
    return PositionBatch(out, server_timestamp)


def parse_radio_passes(payload, norad_id: int) -> List[PassPrediction]:
    payload = check_payload(payload)
    passes = []
    try:
        for p in payload.get("passes") or []:
            start = float(p["startUTC"]) * 1000.0
            end = float(p["endUTC"]) * 1000.0
            max_utc = p.get("maxUTC")
            passes.append(PassPrediction(
                norad_id=int(norad_id),
                start_time=start,
                end_time=end,
                start_azimuth=_opt_float(p.get("startAz")),
                end_azimuth=_opt_float(p.get("endAz")),
                max_azimuth=_opt_float(p.get("maxAz")),
                max_elevation=_opt_float(p.get("maxEl")),
                duration=(end - start) / 1000.0,
                max_time=float(max_utc) * 1000.0 if max_utc is not None else None,
            ))
    except (KeyError, TypeError, ValueError) as e:
        raise ProviderError(f"N2YO: malformed pass record ({e})") from e
    return passes


def _opt_float(v) -> Optional[float]:
    return None if v is None else float(v)


class HourlyQuota:
    """Counts requests in a fixed one-hour window."""

    def __init__(self, limit: int, clock: Optional[Callable[[], float]] = None):
        self.limit = int(limit)
        self._clock = clock or (lambda: time.time() * 1000.0)
        self._window_start = self._clock()
        self.count = 0

    def _roll(self) -> None:
        now = self._clock()
        if now - self._window_start > 3_600_000:
            self._window_start = now
            self.count = 0

    def allow(self) -> bool:
        self._roll()
        return self.count < self.limit

    def record(self) -> None:
        self._roll()
        self.count += 1


class N2YOClient(PositionProvider, PassPredictionProvider):
    max_seconds = MAX_POSITION_SECONDS
    requires_api_key = True

    def __init__(
        self,
        http: Optional[JsonHttpClient] = None,
        base_url: str = N2YO_BASE_URL,
        clock: Optional[Callable[[], float]] = None,
    ):
        self.http = http or JsonHttpClient()
        self.base_url = base_url.rstrip("/")
        self._clock = clock or (lambda: time.time() * 1000.0)
        self.positions_quota = HourlyQuota(POSITIONS_PER_HOUR, self._clock)
        self.passes_quota = HourlyQuota(RADIOPASSES_PER_HOUR, self._clock)
        self._pass_cache: Dict[Tuple, Tuple[float, List[PassPrediction]]] = {}

    def positions_url(self, norad_id: int, observer: Observer, seconds: int, api_key: str) -> str:
        return (
            f"{self.base_url}/positions/{int(norad_id)}/{observer.lat}/{observer.lng}/{observer.alt}/"
            f"{int(seconds)}/&apiKey={api_key}"
        )

    def radiopasses_url(self, norad_id: int, observer: Observer, days: int, min_elevation: float, api_key: str) -> str:
        return (
            f"{self.base_url}/radiopasses/{int(norad_id)}/{observer.lat}/{observer.lng}/{observer.alt}/"
            f"{int(days)}/{int(min_elevation)}/&apiKey={api_key}"
        )

    def request_positions(
        self,
        norad_id: int,
        observer: Observer,
        seconds: int,
        api_key: Optional[str],
        callback: PositionCallback,
    ) -> PendingRequest:
        if not api_key:
            deliver_later(callback, None, MissingApiKey("N2YO API key is missing"))
            return CompletedRequest()
        if not self.positions_quota.allow():
            deliver_later(callback, None, RateLimitExceeded(
                f"N2YO positions quota of {POSITIONS_PER_HOUR} requests per hour exhausted"
            ))
            return CompletedRequest()

        seconds = max(1, min(int(seconds), self.max_seconds))
        self.positions_quota.record()

        def done(payload, error, server_ms):
            if error is not None:
                callback(None, error)
                return
            try:
                batch = parse_positions(payload, observer, server_ms)
            except ProviderError as e:
                callback(None, e)
                return
            callback(batch, None)

        return self.http.get(self.positions_url(norad_id, observer, seconds, api_key), done)

    def request_passes(
        self,
        norad_id: int,
        observer: Observer,
        days: int,
        min_elevation: float,
        api_key: Optional[str],
        callback: PassCallback,
    ) -> PendingRequest:
        if not api_key:
            deliver_later(callback, None, MissingApiKey("N2YO API key is missing"))
            return CompletedRequest()

        key = (int(norad_id), round(observer.lat, 4), round(observer.lng, 4), round(observer.alt), int(days), int(min_elevation))
        cached = self._pass_cache.get(key)
        if cached is not None and self._clock() - cached[0] < PASS_CACHE_MS:
            logger.debug("N2YO radiopasses cache hit for NORAD %s", norad_id)
            deliver_later(callback, list(cached[1]), None)
            return CompletedRequest()

        if not self.passes_quota.allow():
            deliver_later(callback, None, RateLimitExceeded(
                f"N2YO radiopasses quota of {RADIOPASSES_PER_HOUR} requests per hour exhausted"
            ))
            return CompletedRequest()
        self.passes_quota.record()

        def done(payload, error, server_ms):
            if error is not None:
                callback(None, error)
                return
            try:
                passes = parse_radio_passes(payload, norad_id)
            except ProviderError as e:
                callback(None, e)
                return
            self._pass_cache[key] = (self._clock(), passes)
            callback(list(passes), None)

        return self.http.get(self.radiopasses_url(norad_id, observer, days, min_elevation, api_key), done)

    def clear_cache(self) -> None:
        self._pass_cache.clear()
