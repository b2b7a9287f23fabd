from PyQt6.QtWidgets import (
    QWidget, QVBoxLayout, QHBoxLayout, QLabel, QPushButton, QStackedWidget,
    QGraphicsBlurEffect, QSizePolicy, QScrollArea, QFrame
)
from PyQt6.QtCore import Qt, QEvent
from PyQt6.QtGui import QPixmap

from Model.config import AppConfig
from .dropArea import FileDropArea
from .panel import Panel
from .polygon_canvas import RegionSelector
from .zoom_view import ZoomView

# Blur radius of the landing background: compress "blurs", restore "sharpens"
BLUR_DEFAULT = 4
BLUR_DOWNSCALE_HOVER = 12
BLUR_RESTORE_HOVER = 0

_ERROR_STYLE = ("QLabel { background:#fef2f2; border:1px solid #fecaca; border-radius:6px; "
                "color:#b91c1c; padding:8px; }")
_OK_STYLE = ("QLabel { background:#f0fdf4; border:1px solid #bbf7d0; border-radius:6px; "
             "color:#15803d; padding:8px; }")


def _btn(text: str) -> QPushButton:
    btn = QPushButton(text)
    btn.setMinimumHeight(32)
    return btn


def _message_label(style: str) -> QLabel:
    lbl = QLabel()
    lbl.setWordWrap(True)
    lbl.setStyleSheet(style)
    lbl.hide()
    return lbl


def _header(title: str):
    # "back to home" button + page title
    row = QHBoxLayout()
    back = _btn("← Back to home")
    lbl = QLabel(title)
    font = lbl.font()
    font.setPointSizeF(font.pointSizeF() * 1.8)
    font.setBold(True)
    lbl.setFont(font)
    row.addWidget(back)
    row.addSpacing(12)
    row.addWidget(lbl)
    row.addStretch(1)
    return row, back


class _Page(QWidget):
    # Common frame of the two work pages: header, scrollable column of panels, error line
    def __init__(self, title: str):
        super().__init__()
        header, self.btnBack = _header(title)

        self._column = QWidget()
        self._columnLayout = QVBoxLayout(self._column)
        self._columnLayout.setContentsMargins(0, 0, 0, 0)
        self._columnLayout.setSpacing(12)

        scroll = QScrollArea()
        scroll.setWidgetResizable(True)
        scroll.setFrameShape(QFrame.Shape.NoFrame)
        scroll.setWidget(self._column)

        self.errorLabel = _message_label(_ERROR_STYLE)

        v = QVBoxLayout(self)
        v.setContentsMargins(24, 16, 24, 16)
        v.setSpacing(12)
        v.addLayout(header)
        v.addWidget(scroll, 1)

    def _add(self, widget: QWidget, stretch: int = 0):
        self._columnLayout.addWidget(widget, stretch)

    def show_error(self, message: str | None):
        if message:
            self.errorLabel.setText(message)
            self.errorLabel.show()
        else:
            self.errorLabel.clear()
            self.errorLabel.hide()


class LandingPage(QWidget):
    def __init__(self, config: AppConfig):
        super().__init__()
        self.background = QLabel()
        self.background.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self.background.setSizePolicy(QSizePolicy.Policy.Ignored, QSizePolicy.Policy.Ignored)
        self._bg_pixmap: QPixmap | None = None
        self.blur = QGraphicsBlurEffect()
        self.blur.setBlurRadius(BLUR_DEFAULT)
        self.background.setGraphicsEffect(self.blur)
        if config.background_image:
            pm = QPixmap(config.background_image)
            if not pm.isNull():
                self._bg_pixmap = pm

        title = QLabel("MRS3")
        font = title.font()
        font.setPointSizeF(font.pointSizeF() * 4)
        font.setBold(True)
        title.setFont(font)
        title.setAlignment(Qt.AlignmentFlag.AlignCenter)
        subtitle = QLabel("Keep the regions that matter at full resolution, shrink the rest.\n"
                          "Compress an image into a package, restore it later with AI upscaling.")
        subtitle.setAlignment(Qt.AlignmentFlag.AlignCenter)
        subtitle.setWordWrap(True)

        self.btnDownscale = _btn("Compress image")
        self.btnRestore = _btn("Restore image")
        for b in (self.btnDownscale, self.btnRestore):
            b.setMinimumSize(180, 44)
            b.installEventFilter(self)

        buttons = QHBoxLayout()
        buttons.addStretch(1)
        buttons.addWidget(self.btnDownscale)
        buttons.addSpacing(16)
        buttons.addWidget(self.btnRestore)
        buttons.addStretch(1)

        fg = QWidget(self)
        fv = QVBoxLayout(fg)
        fv.addStretch(1)
        fv.addWidget(title)
        fv.addWidget(subtitle)
        fv.addSpacing(24)
        fv.addLayout(buttons)
        fv.addStretch(1)
        self._foreground = fg

        self.background.setParent(self)
        self.background.lower()

    def set_blur(self, radius: int):
        self.blur.setBlurRadius(radius)

    def reset_blur(self):
        self.set_blur(BLUR_DEFAULT)

    def eventFilter(self, obj, event):
        # Hover over the buttons changes the background blur
        if event.type() == QEvent.Type.Enter:
            if obj is self.btnDownscale:
                self.set_blur(BLUR_DOWNSCALE_HOVER)
            elif obj is self.btnRestore:
                self.set_blur(BLUR_RESTORE_HOVER)
        elif event.type() == QEvent.Type.Leave and obj in (self.btnDownscale, self.btnRestore):
            self.set_blur(BLUR_DEFAULT)
        return super().eventFilter(obj, event)

    def resizeEvent(self, e):
        super().resizeEvent(e)
        self.background.setGeometry(self.rect())
        self._foreground.setGeometry(self.rect())
        if self._bg_pixmap is not None:
            self.background.setPixmap(self._bg_pixmap.scaled(
                self.size(), Qt.AspectRatioMode.KeepAspectRatioByExpanding,
                Qt.TransformationMode.SmoothTransformation))


class DownscalePage(_Page):
    def __init__(self, config: AppConfig):
        super().__init__("Image compression")

        # 1) Image: drop area until an image is accepted, then the region selector
        self.imagePanel = Panel("Select polygon regions")
        self.imagePanel.add_toolbar_buttons({"Change Image": _btn("Change image")})
        self.imagePanel.get_button("Change Image").hide()
        self.dropArea = FileDropArea(config.image_policy)
        self.regionSelector = RegionSelector(multi=True)
        self.regionSelector.setMinimumHeight(480)
        self._imageStack = QStackedWidget()
        self._imageStack.addWidget(self.dropArea)
        self._imageStack.addWidget(self.regionSelector)
        self.imagePanel.set_content(self._imageStack)

        # 2) Settings, only visible once a polygon exists
        self.settingsPanel = Panel("Compression settings")
        self.scalerCombo = self.settingsPanel.add_option_selector(
            "scaler", "Downscale factor", config.scaler_options, config.default_scaler)
        self.btnCompress = _btn("Compress image")
        self.btnCompress.setMinimumWidth(180)
        self.settingsPanel.add_toolbar_buttons({"Compress": self.btnCompress})
        self.settingsPanel.set_content(QWidget())

        # 3) Result
        self.resultPanel = Panel("Compression result")
        self.resultInfo = _message_label(_OK_STYLE)
        self.btnDownload = _btn("Download compressed file (.pkg)")
        self.resultPanel.add_toolbar_buttons({"Download": self.btnDownload})
        self.resultPanel.set_content(self.resultInfo)

        self._add(self.imagePanel, 1)
        self._add(self.settingsPanel)
        self._add(self.errorLabel)
        self._add(self.resultPanel)
        self._columnLayout.addStretch(0)

        self.imagePanel.get_button("Change Image").clicked.connect(self.dropArea.browse)
        self.show_upload()

    def show_upload(self):
        self._imageStack.setCurrentWidget(self.dropArea)
        self.imagePanel.get_button("Change Image").hide()
        self.regionSelector.clear()
        self.settingsPanel.hide()
        self.show_result(None)

    def show_selector(self):
        self._imageStack.setCurrentWidget(self.regionSelector)
        self.imagePanel.get_button("Change Image").show()
        self.regionSelector.canvas.setFocus()

    def set_processing(self, on: bool):
        self.btnCompress.setEnabled(not on)
        self.btnCompress.setText("Compressing..." if on else "Compress image")

    def show_settings(self, visible: bool):
        self.settingsPanel.setVisible(visible)

    def show_result(self, info: str | None):
        if info:
            self.resultInfo.setText(info)
            self.resultInfo.show()
            self.resultPanel.show()
        else:
            self.resultInfo.hide()
            self.resultPanel.hide()


class RestorePage(_Page):
    def __init__(self, config: AppConfig):
        super().__init__("Image restoration")

        # 1) Package upload
        self.uploadPanel = Panel("Upload PKG file")
        self.dropArea = FileDropArea(config.package_policy)
        self.selectedLabel = _message_label(_OK_STYLE)
        box = QWidget()
        bv = QVBoxLayout(box)
        bv.setContentsMargins(8, 8, 8, 8)
        bv.addWidget(self.dropArea)
        bv.addWidget(self.selectedLabel)
        self.uploadPanel.set_content(box)

        # 2) Settings
        self.settingsPanel = Panel("Restoration settings")
        self.modeCombo = self.settingsPanel.add_option_selector(
            "mode", "Upscaling method", config.restore_modes, config.default_restore_mode, min_width=260)
        self.btnRestore = _btn("Restore image")
        self.btnRestore.setMinimumWidth(180)
        self.settingsPanel.add_toolbar_buttons({"Restore": self.btnRestore})
        note = QLabel("EDSR is AI-based high quality upscaling, but processing can take a long time.")
        note.setContentsMargins(8, 0, 8, 4)
        note.setStyleSheet("QLabel { color:#6b7280; }")
        self.settingsPanel.set_content(note)

        # 3) Result
        self.resultPanel = Panel("Restoration result")
        self.preview = ZoomView()
        self.preview.setMinimumHeight(400)
        self.resultInfo = QLabel()
        self.resultInfo.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self.btnDownload = _btn("Download restored image")
        self.resultPanel.add_toolbar_buttons({"Download": self.btnDownload})
        res = QWidget()
        rv = QVBoxLayout(res)
        rv.setContentsMargins(8, 8, 8, 8)
        rv.addWidget(self.preview, 1)
        rv.addWidget(self.resultInfo)
        self.resultPanel.set_content(res)

        self._add(self.uploadPanel)
        self._add(self.errorLabel)
        self._add(self.settingsPanel)
        self._add(self.resultPanel, 1)
        self.reset_view()

    def reset_view(self):
        self.show_selected(None)
        self.show_result(None)
        self.show_error(None)

    def show_selected(self, name: str | None):
        if name:
            self.selectedLabel.setText(f"Selected file: {name}")
            self.selectedLabel.show()
            self.settingsPanel.show()
        else:
            self.selectedLabel.hide()
            self.settingsPanel.hide()

    def set_processing(self, on: bool):
        self.btnRestore.setEnabled(not on)
        self.btnRestore.setText("Restoring..." if on else "Restore image")

    def show_result(self, qimg, caption: str = ""):
        if qimg is None and not caption:
            self.preview.clear_image()
            self.resultPanel.hide()
            return
        if qimg is None:
            self.preview.clear_image()
        else:
            self.preview.set_image(qimg)
        self.preview.setVisible(qimg is not None)
        self.resultInfo.setText(caption)
        self.resultPanel.show()
