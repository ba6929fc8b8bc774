import pytest

pytest.importorskip("PyQt6")

from sattrack.providers.base import ProviderError
from sattrack.providers.satnogs import SatnogsTransmitterDirectory, parse_transmitters

PAYLOAD = [
    {"uuid": "a", "description": "Mode V/U FM", "alive": True, "type": "Transceiver",
     "uplink_low": 145990000, "downlink_low": 437800000, "mode": "FM", "invert": False,
     "baud": None, "norad_cat_id": 25544, "status": "active"},
    {"uuid": "b", "description": "APRS", "alive": False, "downlink_low": 145825000,
     "mode": "AFSK", "baud": 1200},
    {"uuid": "c", "description": "Beacon", "downlink_low": None, "mode": None},
]


class FakeHttp:
    def __init__(self, payload=None, error=None):
        self.payload = payload
        self.error = error
        self.urls = []

    def get(self, url, callback):
        self.urls.append(url)
        callback(self.payload, self.error, None)
        return None


def test_parse_transmitters():
    txs = parse_transmitters(PAYLOAD)
    assert len(txs) == 3
    assert txs[0].frequency == 437_800_000.0
    assert txs[0].uplink == 145_990_000.0
    assert txs[0].status == "active"
    assert txs[1].status == "inactive"
    assert txs[1].baud == 1200.0
    assert txs[2].frequency is None
    assert txs[2].mode == ""


def test_parse_transmitters_rejects_bad_shape():
    with pytest.raises(ProviderError):
        parse_transmitters({"detail": "Not found."})
    with pytest.raises(ProviderError):
        parse_transmitters(["x"])


def test_request_transmitters_and_cache(qtbot):
    http = FakeHttp(PAYLOAD)
    directory = SatnogsTransmitterDirectory(http=http, clock=lambda: 0.0)
    got = []
    directory.request_transmitters(25544, lambda r, e: got.append((r, e)))
    assert http.urls == ["https://db.satnogs.org/api/transmitters/?satellite__norad_cat_id=25544&format=json"]
    assert len(got[0][0]) == 3

    directory.request_transmitters(25544, lambda r, e: got.append((r, e)))
    qtbot.waitUntil(lambda: len(got) == 2, timeout=1000)
    assert len(http.urls) == 1


def test_request_transmitters_error(qtbot):
    directory = SatnogsTransmitterDirectory(http=FakeHttp(error=ProviderError("HTTP 404")))
    got = []
    directory.request_transmitters(1, lambda r, e: got.append((r, e)))
    assert got[0][0] is None
    assert isinstance(got[0][1], ProviderError)
