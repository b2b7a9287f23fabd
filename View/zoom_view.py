# zoom_view.py
from PyQt6.QtWidgets import QGraphicsView, QGraphicsScene, QGraphicsPixmapItem
from PyQt6.QtGui import QPainter, QPixmap, QImage, QWheelEvent
from PyQt6.QtCore import Qt

class ZoomView(QGraphicsView):
    # Read-only image preview (restored image): fit to the view, wheel to zoom, drag to pan
    def __init__(self, parent=None):
        self._scene = QGraphicsScene()
        super().__init__(self._scene, parent)
        self.setRenderHint(QPainter.RenderHint.SmoothPixmapTransform, True)
        self.setDragMode(QGraphicsView.DragMode.ScrollHandDrag)
        self.setTransformationAnchor(QGraphicsView.ViewportAnchor.AnchorUnderMouse)
        self.setResizeAnchor(QGraphicsView.ViewportAnchor.AnchorViewCenter)
        self.setMinimumHeight(240)
        self._item: QGraphicsPixmapItem | None = None
        self._user_zoomed = False
        self._scale_min = 0.05
        self._scale_max = 20.0

    def set_image(self, qimg: QImage):
        self.clear_image()
        if qimg is None or qimg.isNull():
            return
        self._item = self._scene.addPixmap(QPixmap.fromImage(qimg))
        self._scene.setSceneRect(self._item.boundingRect())
        self._user_zoomed = False
        self._fit()

    def clear_image(self):
        self._scene.clear()
        self._item = None
        self.resetTransform()

    def wheelEvent(self, e: QWheelEvent):
        if self._item is None:
            return
        angle = e.angleDelta().y()
        if angle == 0:
            return
        self._user_zoomed = True
        factor = 1.0015 ** angle
        m = self.transform()
        current = (m.m11() + m.m22()) * 0.5
        new = max(self._scale_min, min(self._scale_max, current * factor))
        factor = new / current
        self.scale(factor, factor)

    def mouseDoubleClickEvent(self, e):
        # Back to "fit"
        self._user_zoomed = False
        self._fit()
        super().mouseDoubleClickEvent(e)

    def resizeEvent(self, ev):
        super().resizeEvent(ev)
        # Only as long as the user has not zoomed, the image is kept "fit"
        if not self._user_zoomed:
            self._fit()

    def _fit(self):
        if self._item is None:
            return
        self.resetTransform()
        self.fitInView(self._item, Qt.AspectRatioMode.KeepAspectRatio)
