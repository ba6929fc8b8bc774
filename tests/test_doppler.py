import pytest

from sattrack.doppler import (
    DopplerController,
    doppler_shift_hz,
    format_doppler_shift,
    format_frequency,
    freq_correction_hz,
    shifted_frequency,
)
from sattrack.models import Transmitter


class FakeTracker:
    def __init__(self, v_km_s, tracking=True):
        self.radial_velocity_km_s = v_km_s
        self.is_tracking = tracking


def test_doppler_shift_approaching():
    # Satellite approaching (negative range rate) should increase observed frequency
    f0 = 145_800_000.0
    vr = -0.2  # km/s approaching
    obs = doppler_shift_hz(f0, vr)
    assert obs > f0


def test_freq_correction_sign():
    f0 = 435_000_000.0
    vr = 0.1
    delta = freq_correction_hz(f0, vr)
    assert delta < 0  # receding -> observed frequency lower -> correction negative


def test_shifted_frequency_magnitude():
    assert shifted_frequency(100e6, 7000.0) == pytest.approx(100e6 * (1 - 7000.0 / 299792458.0))
    assert shifted_frequency(100e6, None) == 100e6
    assert shifted_frequency(100e6, 0.0) == 100e6


def test_format_helpers():
    assert format_doppler_shift(2500.0) == "+2.5 kHz"
    assert format_doppler_shift(-1234.0) == "-1.2 kHz"
    assert format_frequency(145_800_000.0) == "145.800 MHz"
    assert format_frequency(14_500.0) == "14.500 kHz"
    assert format_frequency(None) == "Unknown"


def test_doppler_controller_applies_velocity():
    ctrl = DopplerController(FakeTracker(-5.0))
    assert ctrl.radial_velocity_m_s() == pytest.approx(-5000.0)
    assert ctrl.apply_correction(437_800_000.0) > 437_800_000.0


def test_doppler_controller_nominal_when_not_applicable():
    f0 = 437_800_000.0
    assert DopplerController().apply_correction(f0) == f0
    assert DopplerController(FakeTracker(-5.0, tracking=False)).apply_correction(f0) == f0
    assert DopplerController(FakeTracker(None)).apply_correction(f0) == f0
    assert DopplerController(FakeTracker(-5.0), geostationary=True).apply_correction(f0) == f0


def test_doppler_readings():
    txs = [Transmitter(frequency=145_800_000.0, mode="FM"), Transmitter(frequency=None, mode="CW")]
    readings = DopplerController(FakeTracker(3.0)).readings(txs)
    assert readings[0].applicable
    assert readings[0].shift_hz < 0
    assert readings[0].label().endswith("kHz)")
    assert not readings[1].applicable
    assert readings[1].shift_hz == 0.0

    idle = DopplerController(FakeTracker(3.0, tracking=False)).readings(txs)
    assert not idle[0].applicable
    assert idle[0].shifted_hz == 145_800_000.0
    assert idle[0].label() == "145.800000 MHz"
