from PyQt6.QtWidgets import QLabel, QWidget, QVBoxLayout, QHBoxLayout, QPushButton, QSizePolicy
from PyQt6.QtCore import Qt, pyqtSignal, QPointF, QRectF
from PyQt6.QtGui import QPainter, QPen, QColor, QImage, QBrush, QPolygonF, QKeySequence, QShortcut

from Controller.enums import MouseStatus
from Model.geometry import CanvasScale, DisplayRect, compute_canvas_scale, fit_rect, pointer_to_image, image_to_display
from Model.polygon_session import DrawPhase, PolygonSession, SessionState
from Model import render_style as rs


def _qcolor(rgba) -> QColor:
    r, g, b, a = rgba
    return QColor(r, g, b, a)


class PolygonCanvas(QLabel):
    # Shows the image and turns left clicks into image-pixel coordinates.
    # Holds no polygon state itself - it paints whatever snapshot it was given last.
    pointClicked = pyqtSignal(float, float)
    undoRequested = pyqtSignal()

    def __init__(self, placeholder: str = "No image loaded"):
        super().__init__(placeholder)
        self.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self.setMinimumSize(320, 240)
        self.setSizePolicy(QSizePolicy.Policy.Expanding, QSizePolicy.Policy.Expanding)
        self.setFocusPolicy(Qt.FocusPolicy.StrongFocus)

        self._image: QImage | None = None
        self._status: MouseStatus = MouseStatus.IDLE
        self._snapshot: SessionState = SessionState()
        self._scale: CanvasScale = CanvasScale()

        # Internal resolution = natural resolution of the loaded image
        self._internal_w = 0
        self._internal_h = 0

    # ---- Image / scale ----
    def set_image(self, qimg: QImage):
        # The equivalent of the image "load" event
        if qimg is None or qimg.isNull():
            self.clear_image()
            return
        self._image = qimg
        self._internal_w, self._internal_h = qimg.width(), qimg.height()
        self._recompute_scale()
        self.setText("")
        self.set_mouse_status(MouseStatus.DRAW_POLY)
        self.update()

    def clear_image(self):
        self._image = None
        self._internal_w = self._internal_h = 0
        self._scale = CanvasScale()
        self._snapshot = SessionState()
        self.set_mouse_status(MouseStatus.IDLE)
        self.setText("No image loaded")
        self.update()

    @property
    def canvas_scale(self) -> CanvasScale:
        return self._scale

    @property
    def internal_size(self) -> tuple[int, int]:
        return self._internal_w, self._internal_h

    def display_rect(self) -> DisplayRect:
        return fit_rect(self._internal_w, self._internal_h, self.width(), self.height())

    def _recompute_scale(self):
        r = self.display_rect()
        self._scale = compute_canvas_scale(self._internal_w, self._internal_h, r.width, r.height)

    def resizeEvent(self, event):
        super().resizeEvent(event)
        if self._image is not None:
            self._recompute_scale()
        self.update()

    # ---- State from the session ----
    def set_snapshot(self, state: SessionState):
        self._snapshot = state
        drawable = self._image is not None and state.phase is not DrawPhase.LOCKED
        self.set_mouse_status(MouseStatus.DRAW_POLY if drawable else MouseStatus.IDLE)
        self.update()

    def set_mouse_status(self, status: MouseStatus):
        self._status = status
        self.setCursor(Qt.CursorShape.CrossCursor if status == MouseStatus.DRAW_POLY else Qt.CursorShape.ArrowCursor)

    # ---- Mouse / keyboard ----
    def mousePressEvent(self, e):
        if self._status == MouseStatus.DRAW_POLY and self._image is not None and e.button() == Qt.MouseButton.LeftButton:
            self.setFocus()
            rect = self.display_rect()  # fresh for every click
            pos = e.position()
            if rect.width > 0 and rect.contains(pos.x(), pos.y()):
                x, y = pointer_to_image(pos.x(), pos.y(), rect, self._internal_w, self._internal_h)
                self.pointClicked.emit(x, y)
                e.accept()
                return
        super().mousePressEvent(e)

    def keyPressEvent(self, e):
        if e.key() == Qt.Key.Key_Backspace:
            self.undoRequested.emit()
            e.accept()
            return
        super().keyPressEvent(e)

    # ---- Paint ----
    def paintEvent(self, e):
        if self._image is None:
            super().paintEvent(e)
            return

        p = QPainter(self)
        p.setRenderHint(QPainter.RenderHint.Antialiasing, True)
        p.setRenderHint(QPainter.RenderHint.SmoothPixmapTransform, True)

        # Redrawn from scratch on every call: base image, completed polygons, current polygon
        rect = self.display_rect()
        target = QRectF(rect.left, rect.top, rect.width, rect.height)
        p.drawImage(target, self._image)

        for idx, poly in enumerate(self._snapshot.completed):
            stroke, fill = rs.polygon_colors(idx)
            self._paint_polygon(p, rect, poly, _qcolor(stroke), _qcolor(fill), closed=True)

        if self._snapshot.current:
            self._paint_polygon(p, rect, self._snapshot.current, _qcolor(rs.CURRENT_COLOR), None, closed=False)

        p.end()

    def _paint_polygon(self, p: QPainter, rect: DisplayRect, poly, stroke: QColor, fill: QColor | None, *, closed: bool):
        # Coordinates are converted to widget space here, so the line width and the point radius stay
        # the same no matter how large the image is displayed
        pts = [QPointF(*image_to_display(pt, rect, self._internal_w, self._internal_h)) for pt in poly]

        pen = QPen(stroke, rs.LINE_WIDTH)
        if not closed:
            # Qt measures dashes in pen widths
            pen.setDashPattern([v / rs.LINE_WIDTH for v in rs.DASH_PATTERN])
        p.setPen(pen)

        if closed and len(pts) > 2:
            p.setBrush(QBrush(fill) if fill is not None else Qt.BrushStyle.NoBrush)
            p.drawPolygon(QPolygonF(pts))
        else:
            p.setBrush(Qt.BrushStyle.NoBrush)
            p.drawPolyline(QPolygonF(pts))

        # The vertices; the first one always gets the start marker color
        p.setPen(Qt.PenStyle.NoPen)
        r = rs.POINT_RADIUS
        for i, wpt in enumerate(pts):
            color = _qcolor(rs.START_POINT_COLOR) if i == 0 else stroke
            p.setBrush(QBrush(color))
            p.drawEllipse(wpt, r, r)


class RegionSelector(QWidget):
    """
    Canvas + polygon session + the undo / complete / reset controls.
    polygonsChanged carries the complete list of finished polygons (image pixels) every time that
    collection changes - receivers replace their copy, they never merge.
    """
    polygonsChanged = pyqtSignal(list)

    HINT = "Click to add points → Enter to complete a polygon → several polygons can be drawn"

    def __init__(self, multi: bool = True, parent=None):
        super().__init__(parent)
        self.session = PolygonSession(multi=multi)
        self.session.subscribe(self.polygonsChanged.emit)

        self.canvas = PolygonCanvas()
        self.hintLabel = QLabel(self.HINT if multi else "Click to add points → Enter to complete the polygon")
        self.hintLabel.setWordWrap(True)
        self.btnUndo = QPushButton("Undo last point")
        self.btnComplete = QPushButton("Complete polygon")
        self.btnReset = QPushButton("Reset all")
        for b in (self.btnUndo, self.btnComplete, self.btnReset):
            b.setFocusPolicy(Qt.FocusPolicy.NoFocus)  # clicks leave the keyboard focus on the canvas
        self.completedLabel = QLabel()
        self.completedLabel.setObjectName("CompletedInfo")
        self.completedLabel.setStyleSheet("QLabel#CompletedInfo { color:#15803d; }")
        self.currentLabel = QLabel()
        self.currentLabel.setObjectName("CurrentInfo")
        self.currentLabel.setStyleSheet("QLabel#CurrentInfo { color:#1d4ed8; }")

        controls = QHBoxLayout()
        controls.addWidget(self.hintLabel, 1)
        controls.addWidget(self.btnUndo)
        controls.addWidget(self.btnComplete)
        controls.addWidget(self.btnReset)

        v = QVBoxLayout(self)
        v.setContentsMargins(8, 8, 8, 8)
        v.addWidget(self.canvas, 1)
        v.addLayout(controls)
        v.addWidget(self.completedLabel)
        v.addWidget(self.currentLabel)

        self.canvas.pointClicked.connect(self._on_point)
        self.canvas.undoRequested.connect(self.undo_last_point)
        self.btnUndo.clicked.connect(self.undo_last_point)
        self.btnComplete.clicked.connect(self.complete_polygon)
        self.btnReset.clicked.connect(self.reset)

        # Active while the focus is anywhere inside the selector
        self._shortcuts = []
        for keys, slot in ((QKeySequence(QKeySequence.StandardKey.Undo), self.undo_last_point),
                           (QKeySequence("Return"), self.complete_polygon),
                           (QKeySequence("Enter"), self.complete_polygon)):
            sc = QShortcut(keys, self)
            sc.setContext(Qt.ShortcutContext.WidgetWithChildrenShortcut)
            sc.activated.connect(slot)
            self._shortcuts.append(sc)

        self._refresh()

    # ---- Public API ----
    def set_image(self, qimg: QImage):
        # A new image means new geometry - old polygons are meaningless for it
        self.session.reset()
        self.canvas.set_image(qimg)
        self._refresh()

    def clear(self):
        self.session.reset()
        self.canvas.clear_image()
        self._refresh()

    def completed_polygons(self):
        return self.session.completed_polygons

    def undo_last_point(self):
        if self.session.undo_last_point():
            self._refresh()

    def complete_polygon(self):
        if self.session.complete_polygon():
            self._refresh()

    def reset(self):
        self.session.reset()
        self._refresh()

    # ---- Internals ----
    def _on_point(self, x: float, y: float):
        if self.session.add_point(x, y):
            self._refresh()

    def _refresh(self):
        st = self.session.state
        self.canvas.set_snapshot(st)

        n_cur = len(st.current)
        self.btnUndo.setVisible(st.phase is DrawPhase.DRAWING)
        self.btnComplete.setVisible(st.can_complete)
        self.btnReset.setVisible(not st.is_empty)

        if st.completed:
            lines = [f"Completed polygons: {len(st.completed)}"]
            lines += [f"  Polygon {i + 1}: {len(poly)} points" for i, poly in enumerate(st.completed)]
            self.completedLabel.setText("\n".join(lines))
            self.completedLabel.show()
        else:
            self.completedLabel.hide()

        if n_cur:
            extra = " (press Enter to complete)" if st.can_complete else ""
            self.currentLabel.setText(f"Currently drawing: {n_cur} points{extra}")
            self.currentLabel.show()
        else:
            self.currentLabel.hide()
