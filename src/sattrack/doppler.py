"""Doppler calculation utilities and a controller that corrects displayed transmitter frequencies."""
from dataclasses import dataclass
from typing import List, Optional

from sattrack.models import Transmitter


SPEED_OF_LIGHT = 299792458.0  # m/s


def shifted_frequency(nominal_hz: float, radial_velocity_m_s: Optional[float]) -> float:
    """Observed frequency in Hz for a transmitter moving at `radial_velocity_m_s`.

    Positive velocity = receding (downshift), negative = approaching (upshift).
    With no velocity the nominal frequency is returned unchanged.
    """
    if radial_velocity_m_s is None:
        return nominal_hz
    # relativistic correction negligible at these speeds; use non-relativistic approximation
    return nominal_hz * (1.0 - (radial_velocity_m_s / SPEED_OF_LIGHT))


def doppler_shift_hz(center_freq_hz: float, range_rate_km_s: float) -> float:
    """Same as shifted_frequency() with the range rate given in km/s."""
    return shifted_frequency(center_freq_hz, range_rate_km_s * 1000.0)


def freq_correction_hz(center_freq_hz: float, range_rate_km_s: float) -> float:
    """Return delta f (Hz) between the observed and the nominal frequency."""
    obs = doppler_shift_hz(center_freq_hz, range_rate_km_s)
    return obs - center_freq_hz


def format_doppler_shift(shift_hz: float) -> str:
    khz = shift_hz / 1000.0
    sign = "+" if khz >= 0 else ""
    return f"{sign}{khz:.1f} kHz"


def format_frequency(freq_hz: Optional[float], precision: int = 3) -> str:
    if not freq_hz:
        return "Unknown"
    if freq_hz >= 1_000_000:
        return f"{freq_hz / 1_000_000:.{precision}f} MHz"
    if freq_hz >= 1000:
        return f"{freq_hz / 1000:.{precision}f} kHz"
    return f"{freq_hz:g} Hz"


@dataclass(frozen=True)
class DopplerReading:
    transmitter: Transmitter
    nominal_hz: Optional[float]
    shifted_hz: Optional[float]
    applicable: bool

    @property
    def shift_hz(self) -> float:
        if not self.applicable or self.nominal_hz is None or self.shifted_hz is None:
            return 0.0
        return self.shifted_hz - self.nominal_hz

    def label(self, precision: int = 6) -> str:
        text = format_frequency(self.shifted_hz, precision)
        if self.applicable:
            text += f" ({format_doppler_shift(self.shift_hz)})"
        return text


class DopplerController:
    """Corrects transmitter frequencies with the radial velocity of a tracking controller.

    Correction only applies while the tracker is actively following a moving target
    and has a velocity estimate; otherwise readings carry the nominal frequency.
    """

    def __init__(self, tracker=None, geostationary: bool = False):
        self.tracker = tracker
        self.geostationary = geostationary

    def radial_velocity_m_s(self) -> Optional[float]:
        if self.tracker is None or self.geostationary or not self.tracker.is_tracking:
            return None
        v = self.tracker.radial_velocity_km_s
        if v is None:
            return None
        return v * 1000.0

    def apply_correction(self, nominal_hz: float) -> float:
        return shifted_frequency(nominal_hz, self.radial_velocity_m_s())

    def readings(self, transmitters: List[Transmitter]) -> List[DopplerReading]:
        v = self.radial_velocity_m_s()
        out = []
        for tx in transmitters:
            if tx.frequency is None:
                out.append(DopplerReading(tx, None, None, False))
                continue
            out.append(DopplerReading(tx, tx.frequency, shifted_frequency(tx.frequency, v), v is not None))
        return out
