"""Starts and stops tracking as a pass is expanded, collapsed, begins or ends."""
import logging
from typing import Optional, Tuple

from PyQt6 import QtCore

from sattrack.models import Observer, PassPrediction

from .controller import TrackingController
from .status import PassStatus, pass_status

logger = logging.getLogger(__name__)


class TrackingCoordinator(QtCore.QObject):
    """UI-level glue between one displayed pass and its TrackingController.

    Tracking runs only while the pass is expanded and currently passing, so no
    position quota is spent on passes nobody is looking at. A refused start is
    reported once through start_failed and not retried until the pass, the
    expanded state or the API key changes.
    """

    start_failed = QtCore.pyqtSignal(str)

    def __init__(
        self,
        controller: TrackingController,
        observer: Observer,
        api_key: Optional[str],
        parent: Optional[QtCore.QObject] = None,
    ):
        super().__init__(parent)
        self.controller = controller
        self.observer = observer
        self.api_key = api_key
        self.pass_: Optional[PassPrediction] = None
        self.expanded = False
        self._failed: Optional[Tuple[int, Optional[str]]] = None

    def set_pass(self, pass_: Optional[PassPrediction], now_ms: float) -> None:
        if self.pass_ is not None and pass_ is not None and pass_.norad_id != self.pass_.norad_id:
            self.controller.stop_tracking()
        if pass_ != self.pass_:
            self._failed = None
        self.pass_ = pass_
        self.update(now_ms)

    def set_expanded(self, expanded: bool, now_ms: float) -> None:
        if bool(expanded) != self.expanded:
            self._failed = None
        self.expanded = bool(expanded)
        self.update(now_ms)

    def set_api_key(self, api_key: Optional[str], now_ms: float) -> None:
        if api_key != self.api_key:
            self._failed = None
        self.api_key = api_key
        self.update(now_ms)

    def should_track(self, now_ms: float) -> bool:
        if self.pass_ is None or not self.expanded:
            return False
        return pass_status(self.pass_, now_ms) == PassStatus.PASSING

    def update(self, now_ms: float) -> None:
        """Reconcile the controller with the current expand/pass state."""
        wanted = self.should_track(now_ms)
        if wanted and not self.controller.is_tracking:
            attempt = (self.pass_.norad_id, self.api_key)
            if attempt == self._failed:
                return
            started = self.controller.start_tracking(
                self.pass_.norad_id, self.observer.lat, self.observer.lng, self.observer.alt, self.api_key
            )
            if not started:
                self._failed = attempt
                self.start_failed.emit(self.controller.start_error or "tracking could not start")
        elif not wanted and self.controller.is_tracking:
            logger.debug("Pass collapsed or no longer passing; stopping tracking")
            self.controller.stop_tracking()
