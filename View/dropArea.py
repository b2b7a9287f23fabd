import logging

from PyQt6.QtWidgets import QLabel, QFileDialog
from PyQt6.QtCore import Qt, pyqtSignal

from Model.upload_policy import UploadFile, UploadPolicy

log = logging.getLogger(__name__)


class FileDropArea(QLabel):
    # Drag&Drop or click-to-browse surface for one file.
    # Every picked file is checked against the policy before anybody else gets to see it.
    fileAccepted = pyqtSignal(object)   # UploadFile
    fileRejected = pyqtSignal(str)      # the validation message

    _BASE_STYLE = ("QLabel#DropArea {{ border: 2px dashed {border}; border-radius: 8px; "
                   "background: {bg}; padding: 24px; color: #374151; }}")

    def __init__(self, policy: UploadPolicy):
        super().__init__()
        self.setObjectName("DropArea")
        self.setAcceptDrops(True)  # activate Drag- and Drop
        self.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self.setWordWrap(True)
        self.setMinimumHeight(160)
        self.setCursor(Qt.CursorShape.PointingHandCursor)

        self._policy = policy
        self._set_drag_active(False)
        self._update_text()

    # ---- Public API ----
    @property
    def policy(self) -> UploadPolicy:
        return self._policy

    def browse(self):
        title, _ = self._policy.describe()
        path, _ = QFileDialog.getOpenFileName(self, title, "", self._policy.file_dialog_filter())
        if path:
            self._handle_path(path)

    # ---- Mouse ----
    def mouseReleaseEvent(self, e):
        if e.button() == Qt.MouseButton.LeftButton:
            self.browse()
            e.accept()
            return
        super().mouseReleaseEvent(e)

    # ---- Drag&Drop ----
    def dragEnterEvent(self, event):
        if self._has_local_file(event):
            event.acceptProposedAction()
            self._set_drag_active(True)
        else:
            event.ignore()

    def dragMoveEvent(self, event):
        if self._has_local_file(event):
            event.acceptProposedAction()
        else:
            event.ignore()

    def dragLeaveEvent(self, event):
        self._set_drag_active(False)

    def dropEvent(self, event):
        self._set_drag_active(False)
        # only the first file is handled
        url = next((u for u in event.mimeData().urls() if u.isLocalFile()), None)
        if not url:
            event.ignore()
            return
        event.acceptProposedAction()
        self._handle_path(url.toLocalFile())

    # ---- Helpers ----
    def _handle_path(self, path: str):
        try:
            upload = UploadFile.from_path(path)
        except OSError as e:
            log.warning("[UPLOAD] cannot read %s: %s", path, e)
            self._reject(f"Cannot read file: {e.strerror or e}")
            return

        err = self._policy.validate(upload)
        if err is not None:
            log.info("[UPLOAD] rejected %s (%d bytes): %s", upload.name, upload.size, err.reason.name)
            self._reject(err.message)
            return

        log.info("[UPLOAD] accepted %s (%d bytes, %s)", upload.name, upload.size, upload.mime_type or "?")
        self.fileAccepted.emit(upload)

    def _reject(self, message: str):
        # shown by the page, next to its other errors
        self.fileRejected.emit(message)

    def _update_text(self):
        title, subtitle = self._policy.describe()
        text = f"<p style='font-size:14pt; font-weight:600'>{title}</p><p style='color:#6b7280'>{subtitle}</p>"
        self.setText(text)

    def _set_drag_active(self, on: bool):
        if on:
            self.setStyleSheet(self._BASE_STYLE.format(border="#3b82f6", bg="#eff6ff"))
        else:
            self.setStyleSheet(self._BASE_STYLE.format(border="#d1d5db", bg="transparent"))

    @staticmethod
    def _has_local_file(event) -> bool:
        md = event.mimeData()
        return md.hasUrls() and any(u.isLocalFile() for u in md.urls())
