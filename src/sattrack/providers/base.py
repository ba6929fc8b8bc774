"""Collaborator interfaces consumed by the tracking core.

Requests are asynchronous: a `request_*` call returns immediately with a pending
handle and later invokes `callback(result, error)` exactly once on the Qt event loop,
with either a result and error=None, or result=None and the exception. Errors are
never raised to the caller of `request_*`.
"""
from abc import ABC, abstractmethod
from typing import Callable, List, Optional

from sattrack.models import Observer, PassPrediction, PositionBatch, Transmitter


class ProviderError(RuntimeError):
    """A collaborator request failed (network, timeout, quota, malformed payload)."""


class MissingApiKey(ProviderError):
    pass


class RateLimitExceeded(ProviderError):
    pass


class PendingRequest(ABC):
    @abstractmethod
    def abort(self) -> None:
        """Cancel the request. The callback may still fire; its result must be ignored."""


class CompletedRequest(PendingRequest):
    """Handle for a request that finished synchronously or was never sent."""

    def abort(self) -> None:
        pass


PositionCallback = Callable[[Optional[PositionBatch], Optional[Exception]], None]
PassCallback = Callable[[Optional[List[PassPrediction]], Optional[Exception]], None]
TransmitterCallback = Callable[[Optional[List[Transmitter]], Optional[Exception]], None]


class PositionProvider(ABC):
    # largest `seconds` a single request may ask for
    max_seconds: int = 300
    requires_api_key: bool = True
    # a request not answered within this long is treated as failed by the tracker
    request_timeout_ms: int = 15_000

    @abstractmethod
    def request_positions(
        self,
        norad_id: int,
        observer: Observer,
        seconds: int,
        api_key: Optional[str],
        callback: PositionCallback,
    ) -> PendingRequest:
        """Fetch `seconds` of observer-relative samples starting now."""


class PassPredictionProvider(ABC):
    @abstractmethod
    def request_passes(
        self,
        norad_id: int,
        observer: Observer,
        days: int,
        min_elevation: float,
        api_key: Optional[str],
        callback: PassCallback,
    ) -> PendingRequest:
        """Predict passes above `min_elevation` over the next `days`."""


class TransmitterDirectory(ABC):
    @abstractmethod
    def request_transmitters(self, norad_id: int, callback: TransmitterCallback) -> PendingRequest:
        """Known transmitters of a satellite."""
