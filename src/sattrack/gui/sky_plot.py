from typing import Optional

from PyQt6 import QtCore, QtGui, QtSvg, QtWidgets

from sattrack.render.scene import RenderModel, Scene


class SkyPlotWidget(QtWidgets.QWidget):
    """Paints a render Scene (polar sky plot) scaled to the widget, keeping it square."""

    def __init__(self, parent: Optional[QtWidgets.QWidget] = None):
        super().__init__(parent)
        self._renderer = QtSvg.QSvgRenderer(self)
        self._scene: Optional[Scene] = None
        self.setMinimumSize(240, 240)
        self.setSizePolicy(QtWidgets.QSizePolicy.Policy.Expanding, QtWidgets.QSizePolicy.Policy.Expanding)
        self.set_scene(RenderModel().build())

    def scene(self) -> Optional[Scene]:
        return self._scene

    def set_scene(self, scene: Scene) -> None:
        self._scene = scene
        self._renderer.load(QtCore.QByteArray(scene.to_svg().encode("utf-8")))
        self.update()

    def sizeHint(self) -> QtCore.QSize:
        return QtCore.QSize(400, 400)

    def paintEvent(self, event):
        painter = QtGui.QPainter(self)
        painter.setRenderHint(QtGui.QPainter.RenderHint.Antialiasing)
        side = min(self.width(), self.height())
        target = QtCore.QRectF((self.width() - side) / 2.0, (self.height() - side) / 2.0, side, side)
        if self._renderer.isValid():
            self._renderer.render(painter, target)
        painter.end()
