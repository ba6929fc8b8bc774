"""Real-time position tracking for one satellite during a pass.

Two QTimers run per session on the Qt event loop: a slow refresh timer that asks the
position provider for the next forecast window and merges it into the buffer, and a
60 Hz animation timer that only reads the buffer to interpolate the current position.
The provider request is the only asynchronous step. It is bounded by a single-shot
fetch timer, and its result is dropped if the session that issued it has been
stopped or has timed out in the meantime.
"""
import logging
import time
from enum import Enum
from typing import Callable, List, Optional

from PyQt6 import QtCore

from sattrack.models import Observer, Position, PositionBatch, TrackingSession
from sattrack.providers.base import PendingRequest, PositionProvider, ProviderError

from .buffer import PositionBuffer

logger = logging.getLogger(__name__)


HORIZON_S = 300  # largest window the position API serves per request
SAFETY_MARGIN_S = 30
ANIMATION_HZ = 60
HISTORY_S = 300
FETCH_TIMEOUT_MS = 15_000
# the HTTP Date header has one-second resolution
MIN_CLOCK_OFFSET_MS = 1000


class TrackingState(str, Enum):
    IDLE = "idle"
    FETCHING = "fetching"
    TRACKING = "tracking"
    REFRESHING = "refreshing"


def system_clock_ms() -> float:
    return time.time() * 1000.0


class TrackingController(QtCore.QObject):
    """Owns the position buffer and the timers of a tracking session."""

    state_changed = QtCore.pyqtSignal(str)
    buffer_changed = QtCore.pyqtSignal()
    position_updated = QtCore.pyqtSignal(object)
    fetch_failed = QtCore.pyqtSignal(str)

    def __init__(
        self,
        provider: PositionProvider,
        parent: Optional[QtCore.QObject] = None,
        clock: Optional[Callable[[], float]] = None,
        horizon_s: int = HORIZON_S,
        safety_margin_s: int = SAFETY_MARGIN_S,
        fetch_timeout_ms: Optional[int] = None,
    ):
        super().__init__(parent)
        self.provider = provider
        self.horizon_s = min(int(horizon_s), int(getattr(provider, "max_seconds", horizon_s)))
        self.refresh_interval_s = max(1, self.horizon_s - int(safety_margin_s))
        if fetch_timeout_ms is None:
            fetch_timeout_ms = getattr(provider, "request_timeout_ms", FETCH_TIMEOUT_MS)
        self.fetch_timeout_ms = int(fetch_timeout_ms)
        self._clock = clock or system_clock_ms

        self._refresh_timer = QtCore.QTimer(self)
        self._refresh_timer.setInterval(self.refresh_interval_s * 1000)
        self._refresh_timer.timeout.connect(self._on_refresh_timer)

        self._animation_timer = QtCore.QTimer(self)
        self._animation_timer.setTimerType(QtCore.Qt.TimerType.PreciseTimer)
        self._animation_timer.setInterval(int(round(1000 / ANIMATION_HZ)))
        self._animation_timer.timeout.connect(self._on_animation_tick)

        self._fetch_timer = QtCore.QTimer(self)
        self._fetch_timer.setSingleShot(True)
        self._fetch_timer.setInterval(self.fetch_timeout_ms)
        self._fetch_timer.timeout.connect(self._on_fetch_timeout)

        self._buffer = PositionBuffer()
        self._session: Optional[TrackingSession] = None
        self._state = TrackingState.IDLE
        # bumped on every start/stop/timeout; results carrying an older value are stale
        self._generation = 0
        self._pending: Optional[PendingRequest] = None
        self._in_flight = False
        self._clock_offset_ms = 0.0
        self._current: Optional[Position] = None
        self._radial_velocity_km_s: Optional[float] = None
        # reason the last start_tracking() call was refused, if it was
        self.start_error: Optional[str] = None

    # ---------------- queryable state ----------------

    @property
    def state(self) -> TrackingState:
        return self._state

    @property
    def is_tracking(self) -> bool:
        return self._state != TrackingState.IDLE

    @property
    def session(self) -> Optional[TrackingSession]:
        return self._session

    @property
    def current_position(self) -> Optional[Position]:
        return self._current

    @property
    def radial_velocity_km_s(self) -> Optional[float]:
        if not self.is_tracking:
            return None
        return self._radial_velocity_km_s

    @property
    def samples(self):
        return self._buffer.samples

    def now_ms(self) -> float:
        """Local clock corrected by the offset to the server's reference time.

        The server time comes from the HTTP Date header, which has one-second
        resolution and arrives after the network latency, so "now" is only good
        to about a second. Offsets below that are treated as zero.
        """
        return self._clock() + self._clock_offset_ms

    def past_positions(self) -> List[Position]:
        return self._buffer.past(self.now_ms())

    def future_positions(self) -> List[Position]:
        return self._buffer.future(self.now_ms())

    def timers_active(self) -> bool:
        return (
            self._refresh_timer.isActive()
            or self._animation_timer.isActive()
            or self._fetch_timer.isActive()
        )

    # ---------------- lifecycle ----------------

    def start_tracking(
        self,
        norad_id: int,
        observer_lat: float,
        observer_lng: float,
        observer_alt: float,
        api_key: Optional[str],
    ) -> bool:
        if self.is_tracking:
            logger.warning("Already tracking NORAD %s; ignoring start for NORAD %s", self._session.norad_id, norad_id)
            self.start_error = f"already tracking NORAD {self._session.norad_id}"
            return False

        if self.provider.requires_api_key and not api_key:
            logger.warning("Cannot start tracking NORAD %s: API key is missing", norad_id)
            self.start_error = "API key is missing"
            return False

        self.start_error = None
        observer = Observer(float(observer_lat), float(observer_lng), float(observer_alt))
        logger.info(
            "Starting real-time tracking for NORAD %s from %.4f, %.4f (refresh every %ss)",
            norad_id, observer.lat, observer.lng, self.refresh_interval_s,
        )

        self._generation += 1
        self._buffer.clear()
        self._current = None
        self._radial_velocity_km_s = None
        self._clock_offset_ms = 0.0
        self._session = TrackingSession(norad_id=norad_id, observer=observer, api_key=api_key, is_active=True)
        self._set_state(TrackingState.FETCHING)

        self._fetch()
        # the provider may already have answered, or the session may have been stopped from a slot
        if self._session is not None and self._session.is_active:
            self._refresh_timer.start()
            self._animation_timer.start()
        return True

    def stop_tracking(self) -> None:
        """Cancel all timers, drop the buffer and return to idle. Safe to call repeatedly."""
        if self._state == TrackingState.IDLE and self._session is None:
            return

        self._generation += 1
        self._refresh_timer.stop()
        self._animation_timer.stop()
        self._fetch_timer.stop()
        self._abort_pending()

        norad_id = self._session.norad_id if self._session else None
        if self._session is not None:
            self._session.is_active = False
        self._session = None
        self._buffer.clear()
        self._current = None
        self._radial_velocity_km_s = None
        self._clock_offset_ms = 0.0
        logger.info("Stopped real-time tracking for NORAD %s", norad_id)
        self._set_state(TrackingState.IDLE)

    def _abort_pending(self) -> None:
        pending, self._pending = self._pending, None
        self._in_flight = False
        if pending is not None:
            try:
                pending.abort()
            except Exception as e:
                logger.debug("Aborting position request failed: %s", e)

    # ---------------- fetch / merge ----------------

    def refresh(self) -> bool:
        """Fetch the next forecast window now. Returns False if nothing was requested."""
        if not self.is_tracking or self._in_flight:
            return False
        if self._state == TrackingState.TRACKING:
            self._set_state(TrackingState.REFRESHING)
        self._fetch()
        return True

    def _fetch(self) -> None:
        session = self._session
        generation = self._generation
        self._in_flight = True
        logger.debug("Requesting %ss of positions for NORAD %s", self.horizon_s, session.norad_id)

        def done(batch, error):
            self._on_fetch_finished(generation, batch, error)

        self._fetch_timer.start()
        try:
            handle = self.provider.request_positions(
                session.norad_id, session.observer, self.horizon_s, session.api_key, done
            )
        except Exception as e:
            self._on_fetch_finished(generation, None, e)
            return
        if self._in_flight and generation == self._generation:
            self._pending = handle

    def _on_fetch_timeout(self) -> None:
        if not self._in_flight or self._session is None:
            return
        # whatever the provider delivers later belongs to an older generation
        self._generation += 1
        self._abort_pending()
        self._in_flight = True
        self._on_fetch_finished(
            self._generation, None, ProviderError(f"timeout: no positions within {self.fetch_timeout_ms} ms")
        )

    def _on_fetch_finished(self, generation: int, batch: Optional[PositionBatch], error: Optional[Exception]) -> None:
        if generation != self._generation or self._session is None or not self._session.is_active:
            logger.debug("Discarding stale position result")
            return

        self._fetch_timer.stop()
        self._in_flight = False
        self._pending = None

        if error is not None or batch is None:
            msg = str(error) if error is not None else "empty response"
            logger.warning("Position fetch for NORAD %s failed: %s; keeping buffer", self._session.norad_id, msg)
            if self._state == TrackingState.REFRESHING:
                self._set_state(TrackingState.TRACKING)
            self.fetch_failed.emit(msg)
            return

        self.merge(batch)

    def merge(self, batch: PositionBatch) -> int:
        """Merge a provider batch into the buffer within the current event-loop turn.

        Returns the number of samples added; nothing is merged once tracking has stopped.
        """
        if self._session is None or not self._session.is_active:
            return 0

        if batch.server_timestamp:
            offset = float(batch.server_timestamp) - self._clock()
            self._clock_offset_ms = offset if abs(offset) >= MIN_CLOCK_OFFSET_MS else 0.0

        now = self.now_ms()
        before = len(self._buffer)
        added = self._buffer.merge(batch.positions)
        pruned = self._buffer.prune(now - HISTORY_S * 1000)
        self._session.last_fetch_time = now
        logger.debug("Buffer: %d existing + %d new - %d expired = %d", before, added, pruned, len(self._buffer))

        self._set_state(TrackingState.TRACKING)
        self.buffer_changed.emit()
        self.update_current_position()
        return added

    # ---------------- animation ----------------

    def update_current_position(self) -> Optional[Position]:
        now = self.now_ms()
        self._current = self._buffer.interpolate(now)
        self._radial_velocity_km_s = self._buffer.radial_velocity_km_s(now)
        if self._current is not None:
            self.position_updated.emit(self._current)
        return self._current

    def _on_animation_tick(self) -> None:
        if not self.is_tracking:
            return
        try:
            self.update_current_position()
        except Exception:
            logger.exception("Animation tick failed")

    def _on_refresh_timer(self) -> None:
        if not self.refresh():
            logger.debug("Refresh skipped: request still in flight")

    def _set_state(self, state: TrackingState) -> None:
        if state == self._state:
            return
        logger.debug("Tracking state %s -> %s", self._state.value, state.value)
        self._state = state
        self.state_changed.emit(state.value)
