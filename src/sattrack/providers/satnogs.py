"""SatNOGS DB transmitter directory."""
import logging
import time
from typing import Callable, Dict, List, Optional, Tuple

from sattrack.models import Transmitter

from .base import CompletedRequest, PendingRequest, ProviderError, TransmitterCallback, TransmitterDirectory
from .http import JsonHttpClient, deliver_later

logger = logging.getLogger(__name__)

SATNOGS_BASE_URL = "https://db.satnogs.org/api"
TRANSMITTER_CACHE_MS = 6 * 60 * 60 * 1000


def parse_transmitters(payload) -> List[Transmitter]:
    if not isinstance(payload, list):
        raise ProviderError("SatNOGS: expected a list of transmitters")
    out = []
    for t in payload:
        if not isinstance(t, dict):
            raise ProviderError("SatNOGS: malformed transmitter record")
        status = t.get("status") or ("active" if t.get("alive") else "inactive")
        out.append(Transmitter(
            frequency=_hz(t.get("downlink_low")),
            mode=t.get("mode") or "",
            description=t.get("description") or "",
            status=status,
            uplink=_hz(t.get("uplink_low")),
            invert=bool(t.get("invert")),
            baud=_hz(t.get("baud")),
        ))
    return out


def _hz(v) -> Optional[float]:
    try:
        return float(v) if v is not None else None
    except (TypeError, ValueError):
        return None


class SatnogsTransmitterDirectory(TransmitterDirectory):
    def __init__(
        self,
        http: Optional[JsonHttpClient] = None,
        base_url: str = SATNOGS_BASE_URL,
        clock: Optional[Callable[[], float]] = None,
    ):
        self.http = http or JsonHttpClient()
        self.base_url = base_url.rstrip("/")
        self._clock = clock or (lambda: time.time() * 1000.0)
        self._cache: Dict[int, Tuple[float, List[Transmitter]]] = {}

    def transmitters_url(self, norad_id: int) -> str:
        return f"{self.base_url}/transmitters/?satellite__norad_cat_id={int(norad_id)}&format=json"

    def request_transmitters(self, norad_id: int, callback: TransmitterCallback) -> PendingRequest:
        cached = self._cache.get(int(norad_id))
        if cached is not None and self._clock() - cached[0] < TRANSMITTER_CACHE_MS:
            deliver_later(callback, list(cached[1]), None)
            return CompletedRequest()

        def done(payload, error, server_ms):
            if error is not None:
                callback(None, error)
                return
            try:
                transmitters = parse_transmitters(payload)
            except ProviderError as e:
                callback(None, e)
                return
            logger.debug("SatNOGS: %d transmitters for NORAD %s", len(transmitters), norad_id)
            self._cache[int(norad_id)] = (self._clock(), transmitters)
            callback(list(transmitters), None)

        return self.http.get(self.transmitters_url(norad_id), done)
