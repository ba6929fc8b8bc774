"""GUI package for SatTrack.

Note: widgets are not imported at package import time so that the non-GUI
modules stay importable without a display. Import them explicitly, e.g.:

	from sattrack.gui.main_window import MainWindow

"""

__all__ = []
