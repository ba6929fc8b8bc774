from datetime import datetime, timezone
from typing import List, Optional

from PyQt6 import QtWidgets, QtCore

from sattrack.doppler import DopplerController, format_frequency
from sattrack.models import Observer, PassPrediction, Transmitter
from sattrack.render.scene import RenderModel
from sattrack.tracking.controller import TrackingController, system_clock_ms
from sattrack.tracking.coordinator import TrackingCoordinator
from sattrack.tracking.status import format_time_until_pass, is_stationary, remove_expired_passes

from .sky_plot import SkyPlotWidget


def _fmt_time(ms: float) -> str:
    return datetime.fromtimestamp(ms / 1000.0, tz=timezone.utc).strftime("%Y-%m-%d %H:%M:%S")


def _fmt_az(v: Optional[float]) -> str:
    return "--" if v is None else f"{v:.0f}"


class PassPanel(QtWidgets.QWidget):
    """Upcoming passes; the selected (expanded) pass is drawn on a sky plot and tracked live while passing."""

    def __init__(self, parent=None, clock=None):
        super().__init__(parent)
        self._clock = clock or system_clock_ms
        layout = QtWidgets.QVBoxLayout(self)

        self.table = QtWidgets.QTableWidget(0, 6)
        self.table.setHorizontalHeaderLabels(["AOS (UTC)", "LOS (UTC)", "Max EL (°)", "Start AZ", "End AZ", "Status"])
        self.table.horizontalHeader().setStretchLastSection(True)
        self.table.setSelectionBehavior(QtWidgets.QAbstractItemView.SelectionBehavior.SelectRows)
        self.table.setSelectionMode(QtWidgets.QAbstractItemView.SelectionMode.SingleSelection)
        self.table.setEditTriggers(QtWidgets.QAbstractItemView.EditTrigger.NoEditTriggers)
        self.table.itemSelectionChanged.connect(self._on_selection_changed)
        layout.addWidget(self.table)

        self.collapse_btn = QtWidgets.QPushButton("Collapse")
        self.collapse_btn.clicked.connect(self.collapse)
        layout.addWidget(self.collapse_btn)

        detail = QtWidgets.QHBoxLayout()
        self.plot = SkyPlotWidget()
        detail.addWidget(self.plot, 1)

        info = QtWidgets.QVBoxLayout()
        self.el_label = QtWidgets.QLabel("EL: --")
        self.az_label = QtWidgets.QLabel("AZ: --")
        self.range_label = QtWidgets.QLabel("Range: --")
        self.state_label = QtWidgets.QLabel("Tracking: idle")
        for w in (self.el_label, self.az_label, self.range_label, self.state_label):
            info.addWidget(w)

        self.tx_table = QtWidgets.QTableWidget(0, 4)
        self.tx_table.setHorizontalHeaderLabels(["Downlink", "Corrected", "Mode", "Description"])
        self.tx_table.horizontalHeader().setStretchLastSection(True)
        self.tx_table.setEditTriggers(QtWidgets.QAbstractItemView.EditTrigger.NoEditTriggers)
        info.addWidget(self.tx_table, 1)
        detail.addLayout(info, 1)
        layout.addLayout(detail, 1)

        # runtime
        self.passes: List[PassPrediction] = []
        self.transmitters: List[Transmitter] = []
        self.render_model = RenderModel()
        self.tracker: Optional[TrackingController] = None
        self.coordinator: Optional[TrackingCoordinator] = None
        self.doppler = DopplerController()

        # pass status / start-stop reconciliation
        self._status_timer = QtCore.QTimer(self)
        self._status_timer.setInterval(1000)
        self._status_timer.timeout.connect(self._on_status_tick)
        self._status_timer.start()

    # ---------------- context ----------------

    def set_context(self, provider, observer: Observer, api_key: Optional[str], distance_units: str = "km"):
        """Bind the position provider used for live tracking. Stops any running session."""
        if self.tracker is not None:
            self.tracker.stop_tracking()
            self.tracker.deleteLater()

        self.render_model = RenderModel(distance_units=distance_units)
        self.tracker = TrackingController(provider, parent=self, clock=self._clock)
        self.tracker.position_updated.connect(lambda _pos: self.redraw())
        self.tracker.buffer_changed.connect(self.redraw)
        self.tracker.state_changed.connect(self._on_tracking_state)
        if self.coordinator is not None:
            self.coordinator.deleteLater()
        self.coordinator = TrackingCoordinator(self.tracker, observer, api_key, parent=self)
        self.coordinator.start_failed.connect(self._on_start_failed)
        self.doppler = DopplerController(self.tracker)

    def update_passes(self, passes: List[PassPrediction]):
        self.passes = remove_expired_passes(passes, self._clock())
        self.table.setRowCount(0)
        for p in self.passes:
            row = self.table.rowCount()
            self.table.insertRow(row)
            self.table.setItem(row, 0, QtWidgets.QTableWidgetItem(_fmt_time(p.start_time)))
            self.table.setItem(row, 1, QtWidgets.QTableWidgetItem(_fmt_time(p.end_time)))
            el = "--" if p.max_elevation is None else f"{p.max_elevation:.1f}"
            self.table.setItem(row, 2, QtWidgets.QTableWidgetItem(el))
            self.table.setItem(row, 3, QtWidgets.QTableWidgetItem(_fmt_az(p.start_azimuth)))
            self.table.setItem(row, 4, QtWidgets.QTableWidgetItem(_fmt_az(p.end_azimuth)))
            self.table.setItem(row, 5, QtWidgets.QTableWidgetItem(format_time_until_pass(p, self._clock())))
        self.collapse()

    def set_transmitters(self, transmitters: List[Transmitter]):
        self.transmitters = list(transmitters)
        self._update_transmitters()

    # ---------------- expand / collapse ----------------

    def selected_pass(self) -> Optional[PassPrediction]:
        rows = self.table.selectionModel().selectedRows() if self.table.selectionModel() else []
        if not rows:
            return None
        idx = rows[0].row()
        return self.passes[idx] if 0 <= idx < len(self.passes) else None

    def collapse(self):
        self.table.clearSelection()
        if self.coordinator is not None:
            self.coordinator.set_expanded(False, self._clock())
        self.redraw()

    def _on_selection_changed(self):
        pass_ = self.selected_pass()
        if self.coordinator is not None:
            now = self._clock()
            self.coordinator.set_pass(pass_, now)
            self.coordinator.set_expanded(pass_ is not None, now)
        self.doppler.geostationary = pass_ is not None and is_stationary(pass_)
        self.redraw()

    def _on_tracking_state(self, state: str):
        self.state_label.setText(f"Tracking: {state}")
        self._update_transmitters()

    def _on_start_failed(self, reason: str):
        self.state_label.setText(f"Tracking unavailable: {reason}")

    def _on_status_tick(self):
        now = self._clock()
        for row, p in enumerate(self.passes):
            item = self.table.item(row, 5)
            if item is not None:
                item.setText(format_time_until_pass(p, now))
        if self.coordinator is not None:
            self.coordinator.update(now)
        self._update_transmitters()

    # ---------------- drawing ----------------

    def redraw(self):
        scene = self.render_model.from_controller(self.selected_pass(), self.tracker)
        self.plot.set_scene(scene)
        self.el_label.setText(f"EL: {scene.telemetry.elevation}")
        self.az_label.setText(f"AZ: {scene.telemetry.azimuth}")
        self.range_label.setText(f"Range: {scene.telemetry.distance}")

    def _update_transmitters(self):
        readings = self.doppler.readings(self.transmitters)
        self.tx_table.setRowCount(len(readings))
        for row, r in enumerate(readings):
            self.tx_table.setItem(row, 0, QtWidgets.QTableWidgetItem(format_frequency(r.nominal_hz)))
            corrected = r.label() if r.applicable else "--"
            self.tx_table.setItem(row, 1, QtWidgets.QTableWidgetItem(corrected))
            self.tx_table.setItem(row, 2, QtWidgets.QTableWidgetItem(r.transmitter.mode))
            self.tx_table.setItem(row, 3, QtWidgets.QTableWidgetItem(r.transmitter.description))

    def shutdown(self):
        self._status_timer.stop()
        if self.tracker is not None:
            self.tracker.stop_tracking()
