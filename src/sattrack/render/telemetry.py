"""Text telemetry for the current position."""
import math
from dataclasses import dataclass
from typing import Optional

from sattrack.models import Position

KM_TO_MILES = 0.621371
COMPASS_POINTS = ("N", "NE", "E", "SE", "S", "SW", "W", "NW")
PLACEHOLDER = "--"


@dataclass(frozen=True)
class Telemetry:
    elevation: str = PLACEHOLDER
    azimuth: str = PLACEHOLDER
    distance: str = PLACEHOLDER


def compass_direction(azimuth: float) -> str:
    return COMPASS_POINTS[int(math.floor(azimuth / 45.0 + 0.5)) % 8]


def format_distance(distance_km: Optional[float], units: str = "km") -> str:
    if distance_km is None or not math.isfinite(distance_km) or distance_km <= 0:
        return PLACEHOLDER
    if units == "miles":
        return f"{round(distance_km * KM_TO_MILES)} mi"
    return f"{round(distance_km)} km"


def format_telemetry(position: Optional[Position], units: str = "km") -> Telemetry:
    if position is None:
        return Telemetry()
    el, az = position.elevation, position.azimuth
    elevation = f"{round(el)}°" if math.isfinite(el) else PLACEHOLDER
    azimuth = f"{round(az) % 360}° {compass_direction(az)}" if math.isfinite(az) else PLACEHOLDER
    return Telemetry(elevation, azimuth, format_distance(position.distance, units))
