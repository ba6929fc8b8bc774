from PyQt6 import QtWidgets, QtCore
from typing import Dict, Optional
from pathlib import Path


class ObserverPanel(QtWidgets.QWidget):
    """
    Side panel for the observer location, the satellite to predict and the data source.

    The N2YO API key is used for pass prediction and real-time positions. When a TLE is
    pasted, passes and positions are computed locally instead and no key is needed.
    """

    passes_requested = QtCore.pyqtSignal(dict)

    def __init__(self, parent: Optional[QtWidgets.QWidget] = None):
        super().__init__(parent)

        # Force English digits inside this panel
        en_loc = QtCore.QLocale(QtCore.QLocale.Language.English, QtCore.QLocale.Country.UnitedStates)
        self.setLocale(en_loc)

        layout = QtWidgets.QFormLayout()

        # ---------- Satellite ----------
        self.norad_id = QtWidgets.QSpinBox()
        self.norad_id.setRange(1, 999_999)
        self.norad_id.setValue(25544)

        self.tle_text = QtWidgets.QPlainTextEdit()
        self.tle_text.setPlaceholderText("Optional: name + 2 lines for offline prediction")
        self.load_button = QtWidgets.QPushButton("Load TLE file…")
        self.load_button.clicked.connect(self._on_load_file)

        # ---------- Observer ----------
        self.obs_lat = QtWidgets.QDoubleSpinBox()
        self.obs_lat.setRange(-90.0, 90.0)
        self.obs_lat.setDecimals(6)

        self.obs_lng = QtWidgets.QDoubleSpinBox()
        self.obs_lng.setRange(-180.0, 180.0)
        self.obs_lng.setDecimals(6)

        self.obs_alt = QtWidgets.QDoubleSpinBox()
        self.obs_alt.setRange(-500.0, 10000.0)
        self.obs_alt.setDecimals(1)
        self.obs_alt.setSuffix(" m")

        # ---------- Prediction ----------
        self.days = QtWidgets.QSpinBox()
        self.days.setRange(1, 10)
        self.days.setValue(3)

        self.min_elevation = QtWidgets.QSpinBox()
        self.min_elevation.setRange(0, 90)
        self.min_elevation.setValue(10)
        self.min_elevation.setSuffix("°")

        self.api_key = QtWidgets.QLineEdit()
        self.api_key.setEchoMode(QtWidgets.QLineEdit.EchoMode.Password)

        self.units = QtWidgets.QComboBox()
        self.units.addItems(["km", "miles"])

        self.predict_btn = QtWidgets.QPushButton("Predict Passes")
        self.predict_btn.clicked.connect(self._on_predict)

        # ---------- Layout ----------
        layout.addRow("NORAD ID:", self.norad_id)
        layout.addRow(self.load_button)
        layout.addRow("TLE:", self.tle_text)
        layout.addRow("Latitude (deg):", self.obs_lat)
        layout.addRow("Longitude (deg):", self.obs_lng)
        layout.addRow("Altitude:", self.obs_alt)
        layout.addRow("Days:", self.days)
        layout.addRow("Min elevation:", self.min_elevation)
        layout.addRow("N2YO API key:", self.api_key)
        layout.addRow("Distance units:", self.units)
        layout.addRow(self.predict_btn)

        self.setLayout(layout)

    # ------------------------------------------------------------------

    def apply_config(self, cfg: Dict) -> None:
        self.obs_lat.setValue(float(cfg.get("observer_lat", 0.0)))
        self.obs_lng.setValue(float(cfg.get("observer_lng", 0.0)))
        self.obs_alt.setValue(float(cfg.get("observer_alt", 0.0)))
        self.norad_id.setValue(int(cfg.get("norad_id", 25544)))
        self.days.setValue(int(cfg.get("prediction_days", 3)))
        self.min_elevation.setValue(int(cfg.get("min_elevation", 10)))
        self.api_key.setText(cfg.get("n2yo_api_key", "") or "")
        idx = self.units.findText(cfg.get("distance_units", "km"))
        if idx >= 0:
            self.units.setCurrentIndex(idx)

    def tle(self):
        text = self.tle_text.toPlainText().strip().splitlines()
        if not text:
            return None
        if len(text) < 3:
            raise ValueError("Please provide a TLE with 3 lines:\nSatellite name\nLine 1\nLine 2")
        return [text[0].strip(), text[1].strip(), text[2].strip()]

    def options(self) -> Dict:
        return {
            "norad_id": int(self.norad_id.value()),
            "tle": self.tle(),
            "observer_lat": float(self.obs_lat.value()),
            "observer_lng": float(self.obs_lng.value()),
            "observer_alt": float(self.obs_alt.value()),
            "prediction_days": int(self.days.value()),
            "min_elevation": int(self.min_elevation.value()),
            "n2yo_api_key": self.api_key.text().strip(),
            "distance_units": self.units.currentText(),
        }

    # ------------------------------------------------------------------

    def _on_load_file(self):
        fn, _ = QtWidgets.QFileDialog.getOpenFileName(
            self,
            "Open TLE file",
            str(Path.cwd()),
            "TLE Files (*.tle *.txt);;All Files (*)",
        )
        if fn:
            with open(fn, "r", encoding="utf-8") as f:
                text = f.read().strip()
            self.tle_text.setPlainText(text)

    def _on_predict(self):
        try:
            opts = self.options()
        except ValueError as e:
            QtWidgets.QMessageBox.warning(self, "Invalid TLE", str(e))
            return
        if opts["tle"] is None and not opts["n2yo_api_key"]:
            QtWidgets.QMessageBox.warning(
                self,
                "No data source",
                "Enter an N2YO API key, or paste a TLE to predict passes offline.",
            )
            return
        self.passes_requested.emit(opts)
