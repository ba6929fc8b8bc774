"""Plain data records shared by the geometry, tracking and render layers."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional


@dataclass(frozen=True)
class Position:
    """One observer-relative sample of a satellite.

    azimuth/elevation in degrees, distance in km, timestamp in epoch milliseconds.
    The sub-satellite point is optional and only present when the provider reports it.
    """

    azimuth: float
    elevation: float
    distance: float
    timestamp: float
    sat_latitude: Optional[float] = None
    sat_longitude: Optional[float] = None
    sat_altitude: Optional[float] = None


@dataclass(frozen=True)
class PositionBatch:
    """Result of a single position-provider request."""

    positions: List[Position] = field(default_factory=list)
    # reference "now" reported by the server, epoch ms
    server_timestamp: Optional[float] = None


@dataclass(frozen=True)
class PassPrediction:
    norad_id: int
    start_time: float
    end_time: float
    start_azimuth: Optional[float]
    end_azimuth: Optional[float]
    max_azimuth: Optional[float]
    max_elevation: Optional[float]
    duration: float
    max_time: Optional[float] = None


@dataclass(frozen=True)
class Observer:
    lat: float
    lng: float
    alt: float = 0.0  # metres


@dataclass(frozen=True)
class Transmitter:
    frequency: Optional[float]
    mode: str = ""
    description: str = ""
    status: str = "unknown"
    uplink: Optional[float] = None
    invert: bool = False
    baud: Optional[float] = None


@dataclass
class TrackingSession:
    norad_id: int
    observer: Observer
    api_key: Optional[str] = None
    is_active: bool = False
    last_fetch_time: Optional[float] = None
