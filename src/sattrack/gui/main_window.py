import logging

from PyQt6 import QtWidgets, QtCore

from sattrack.config import load_config, save_config
from sattrack.models import Observer
from sattrack.providers.local import SkyfieldProvider
from sattrack.providers.n2yo import N2YOClient
from sattrack.providers.satnogs import SatnogsTransmitterDirectory

from .observer_panel import ObserverPanel
from .pass_panel import PassPanel

logger = logging.getLogger(__name__)


class MainWindow(QtWidgets.QMainWindow):
    """
    Pass prediction and live sky-plot tracking:
      - Observer panel (left) chooses the satellite, location and data source.
      - Pass panel (right) lists passes; expanding a pass that is in progress
        starts real-time tracking for it.
      - Positions and passes come from N2YO, or from skyfield when a TLE is given.
      - Transmitters come from SatNOGS and are shown Doppler-corrected while tracking.
    """

    def __init__(self, config_path=None):
        super().__init__()
        self._config_path = config_path

        self.setWindowTitle("SatTrack")
        self.resize(1200, 800)

        splitter = QtWidgets.QSplitter(QtCore.Qt.Orientation.Horizontal)

        self.observer_panel = ObserverPanel()
        left_scroll = QtWidgets.QScrollArea()
        left_scroll.setWidgetResizable(True)
        left_scroll.setWidget(self.observer_panel)
        left_scroll.setMinimumWidth(260)
        splitter.addWidget(left_scroll)

        self.pass_panel = PassPanel()
        splitter.addWidget(self.pass_panel)
        splitter.setStretchFactor(1, 1)
        self.setCentralWidget(splitter)

        # collaborators
        self.n2yo = N2YOClient()
        self.satnogs = SatnogsTransmitterDirectory()
        self._pending_passes = None
        self._pending_transmitters = None

        self.observer_panel.passes_requested.connect(self.on_predict)

        self.observer_panel.apply_config(load_config(self._config_path))

        self.statusBar().showMessage("Ready")

    # ------------------------------------------------------------------

    def on_predict(self, opts: dict):
        observer = Observer(opts["observer_lat"], opts["observer_lng"], opts["observer_alt"])
        api_key = opts["n2yo_api_key"] or None

        if opts["tle"] is not None:
            provider = SkyfieldProvider(opts["tle"])
            source = "TLE (offline)"
        else:
            provider = self.n2yo
            source = "N2YO"

        self.pass_panel.set_context(provider, observer, api_key, opts["distance_units"])
        self._save(opts)

        if self._pending_passes is not None:
            self._pending_passes.abort()
        if self._pending_transmitters is not None:
            self._pending_transmitters.abort()

        norad_id = opts["norad_id"]
        self.statusBar().showMessage(f"Predicting passes for NORAD {norad_id} via {source}…")
        self._pending_passes = provider.request_passes(
            norad_id, observer, opts["prediction_days"], opts["min_elevation"], api_key, self._on_passes
        )
        self._pending_transmitters = self.satnogs.request_transmitters(norad_id, self._on_transmitters)

    def _on_passes(self, passes, error):
        self._pending_passes = None
        if error is not None:
            logger.warning("Pass prediction failed: %s", error)
            self.statusBar().showMessage(f"Pass prediction failed: {error}")
            return
        self.pass_panel.update_passes(passes)
        self.statusBar().showMessage(f"{len(passes)} passes predicted")

    def _on_transmitters(self, transmitters, error):
        self._pending_transmitters = None
        if error is not None:
            logger.warning("Transmitter lookup failed: %s", error)
            self.pass_panel.set_transmitters([])
            return
        self.pass_panel.set_transmitters(transmitters)

    def _save(self, opts: dict):
        cfg = load_config(self._config_path)
        for key in ("observer_lat", "observer_lng", "observer_alt", "n2yo_api_key",
                    "distance_units", "min_elevation", "prediction_days", "norad_id"):
            cfg[key] = opts[key]
        try:
            save_config(cfg, self._config_path)
        except OSError as e:
            logger.warning("Could not save config: %s", e)

    def closeEvent(self, event):
        self.pass_panel.shutdown()
        super().closeEvent(event)
