from __future__ import annotations
import functools
import logging
from typing import Callable, Optional

from PyQt6.QtCore import QObject, pyqtSignal, QThreadPool, QRunnable
from PyQt6.QtWidgets import QFileDialog

from Controller.enums import Page
from Model.config import AppConfig
from Model.image_ops import load_qimage, qimage_from_bytes
from Model.mrs3_client import MODE_EDSR, COMPRESS_FALLBACK, RESTORE_FALLBACK, MRS3Client, ProcessingResult
from Model.page_state import DownscaleState, RequestOutcome, RestoreState, run_request
from Model.upload_policy import UploadFile

log = logging.getLogger(__name__)

# Worker infrastructure: the HTTP request runs on the global QThreadPool so the GUI thread never blocks.
# The worker never touches page state. It only hands a RequestOutcome back to the controller through a
# queued signal, and all state changes happen on the GUI thread.

class _RequestSignal(QObject):
    # page id, version of the page state when the request started, RequestOutcome
    finished = pyqtSignal(str, int, object)


class _RequestTask(QRunnable):
    def __init__(self, page_id: str, version: int, call: Callable[[], ProcessingResult], fallback: str,
                 sig: _RequestSignal):
        super().__init__()
        self.page_id = page_id
        self.version = version
        self.call = call
        self.fallback = fallback
        self.sig = sig

    def run(self):
        # run_request never raises, so the signal is always emitted and the processing flag always cleared
        outcome = run_request(self.call, self.fallback)
        self.sig.finished.emit(self.page_id, self.version, outcome)


def _save_result(parent, result: ProcessingResult, title: str, file_filter: str):
    path, _ = QFileDialog.getSaveFileName(parent, title, result.filename, file_filter)
    if not path:
        return None
    try:
        result.save(path)
    except OSError as e:
        log.error("[SAVE] writing %s failed: %s", path, e)
        parent.show_error(f"Could not save the file: {e.strerror or e}")
        return None
    log.info("[SAVE] %d bytes -> %s", result.size, path)
    return path


class DownscaleController(QObject):
    PAGE_ID = "downscale"

    def __init__(self, page, config: AppConfig, client: MRS3Client, pool: QThreadPool, sig: _RequestSignal):
        super().__init__()
        self.page = page
        self.config = config
        self.client = client
        self.pool = pool
        self.sig = sig
        self.state = DownscaleState(scaler=config.default_scaler)
        self._submitted = (0, self.state.scaler)  # (polygon count, scaler) of the last request
        self._wire()

    def _wire(self):
        p = self.page
        p.dropArea.fileAccepted.connect(self.on_file_accepted)
        p.dropArea.fileRejected.connect(self.on_file_rejected)
        p.regionSelector.polygonsChanged.connect(self.on_polygons_changed)
        p.scalerCombo.currentIndexChanged.connect(lambda _i: self.on_scaler(p.scalerCombo.currentData()))
        p.btnCompress.clicked.connect(self.submit)
        p.btnDownload.clicked.connect(self.download)

    # ---- Upload ----
    def on_file_accepted(self, upload: UploadFile):
        qimg = load_qimage(upload.path)
        if qimg is None:
            self.state.reject_file(f"Could not read {upload.name} as an image.")
            self.page.show_upload()
            self._render()
            return
        self.state.select_file(upload)
        log.info("[LOAD] %s: %dx%d", upload.name, qimg.width(), qimg.height())
        # set_image resets the selector's session, which announces an empty polygon set
        self.page.regionSelector.set_image(qimg)
        self.page.show_selector()
        self._render()

    def on_file_rejected(self, message: str):
        self.state.reject_file(message)
        self.page.show_upload()
        self._render()

    # ---- Polygons / options ----
    def on_polygons_changed(self, polygons: list):
        self.state.set_polygons(polygons)
        log.debug("[POLY] %d completed polygon(s)", len(polygons))
        self._render()

    def on_scaler(self, value):
        if value is not None:
            self.state.scaler = int(value)

    # ---- Submit ----
    def submit(self):
        st = self.state
        if not st.begin_processing():
            log.debug("[REQUEST] compress ignored (status=%s)", st.status.name)
            return
        self._submitted = (len(st.polygons), st.scaler)
        call = functools.partial(self.client.compress, st.upload, [list(p) for p in st.polygons], st.scaler)
        self.pool.start(_RequestTask(self.PAGE_ID, st.version, call, COMPRESS_FALLBACK, self.sig))
        self._render()

    def on_finished(self, version: int, outcome: RequestOutcome):
        # Ignore answers that belong to an image that was replaced or a page that was left
        if version != self.state.version:
            log.info("[REQUEST] dropping stale compress result (v%d, now v%d)", version, self.state.version)
            return
        self.state.settle(outcome)
        self._render()

    def download(self):
        if self.state.result is None:
            return
        _save_result(self.page, self.state.result, "Save compressed package", "Package files (*.pkg)")

    # ---- Lifecycle ----
    def release(self):
        self.state.release()
        self.state.scaler = self.config.default_scaler
        self.page.settingsPanel.select_value("scaler", self.config.default_scaler)
        self.page.show_upload()
        self._render()

    def _render(self):
        st = self.state
        p = self.page
        p.show_settings(st.upload is not None and len(st.polygons) > 0)
        p.set_processing(st.processing)
        p.show_error(st.error)
        if st.result is not None:
            n, scaler = self._submitted
            p.show_result(f"Compression finished! {n} polygon region{'s' if n != 1 else ''} "
                          f"compressed with {scaler}x downscale.")
        else:
            p.show_result(None)


class RestoreController(QObject):
    PAGE_ID = "restore"

    def __init__(self, page, config: AppConfig, client: MRS3Client, pool: QThreadPool, sig: _RequestSignal):
        super().__init__()
        self.page = page
        self.config = config
        self.client = client
        self.pool = pool
        self.sig = sig
        self.state = RestoreState(mrs3_mode=config.default_restore_mode)
        self._preview = None  # QImage of the restored result
        self._submitted_mode = self.state.mrs3_mode
        self._wire()

    def _wire(self):
        p = self.page
        p.dropArea.fileAccepted.connect(self.on_file_accepted)
        p.dropArea.fileRejected.connect(self.on_file_rejected)
        p.modeCombo.currentIndexChanged.connect(lambda _i: self.on_mode(p.modeCombo.currentData()))
        p.btnRestore.clicked.connect(self.submit)
        p.btnDownload.clicked.connect(self.download)

    def on_file_accepted(self, upload: UploadFile):
        self.state.select_file(upload)
        self._preview = None
        self._render()

    def on_file_rejected(self, message: str):
        self.state.reject_file(message)
        self._preview = None
        self._render()

    def on_mode(self, value):
        if value is not None:
            self.state.mrs3_mode = int(value)

    def submit(self):
        st = self.state
        if not st.begin_processing():
            log.debug("[REQUEST] restore ignored (status=%s)", st.status.name)
            return
        self._preview = None
        self._submitted_mode = st.mrs3_mode
        call = functools.partial(self.client.restore, st.upload, st.mrs3_mode)
        self.pool.start(_RequestTask(self.PAGE_ID, st.version, call, RESTORE_FALLBACK, self.sig))
        self._render()

    def on_finished(self, version: int, outcome: RequestOutcome):
        if version != self.state.version:
            log.info("[REQUEST] dropping stale restore result (v%d, now v%d)", version, self.state.version)
            return
        self.state.settle(outcome)
        if outcome.result is not None:
            self._preview = qimage_from_bytes(outcome.result.data)
            if self._preview is None:
                log.warning("[LOAD] restored result (%s, %d bytes) is not a decodable image",
                            outcome.result.media_type, outcome.result.size)
        self._render()

    def download(self):
        if self.state.result is None:
            return
        _save_result(self.page, self.state.result, "Save restored image", "Images (*.png);;All files (*)")

    def release(self):
        self.state.release()
        self._preview = None
        self.state.mrs3_mode = self.config.default_restore_mode
        self.page.settingsPanel.select_value("mode", self.config.default_restore_mode)
        self._render()

    def _caption(self) -> str:
        mode = self._submitted_mode
        method = "EDSR AI upscaling" if mode == MODE_EDSR else f"OpenCV (mode {mode})"
        if self._preview is None:
            return f"Restored with {method}. No preview available, use the download button."
        return f"Image restored with {method}."

    def _render(self):
        st = self.state
        p = self.page
        p.show_selected(st.upload.name if st.upload is not None else None)
        p.set_processing(st.processing)
        p.show_error(st.error)
        if st.result is not None:
            p.show_result(self._preview, self._caption())
        else:
            p.show_result(None)


# --- Controller ---
class AppController(QObject):
    def __init__(self, view, config: AppConfig, client: Optional[MRS3Client] = None):
        super().__init__()
        self.view = view
        self.config = config
        self.client = client or MRS3Client(config.api_base_url, timeout=config.request_timeout)
        self.pool = QThreadPool.globalInstance()  # Global threadPool for background jobs

        self.sig = _RequestSignal()
        self.sig.finished.connect(self._on_request_finished)  # "Bridge" from the worker back to the GUI thread

        self.downscale = DownscaleController(view.downscalePage, config, self.client, self.pool, self.sig)
        self.restore = RestoreController(view.restorePage, config, self.client, self.pool, self.sig)
        self._pages = {
            DownscaleController.PAGE_ID: self.downscale,
            RestoreController.PAGE_ID: self.restore,
        }

        self._wire_view()
        log.info("[APP] backend at %s (timeout=%s)", config.api_base_url, config.request_timeout)
        self.navigate(Page.LANDING)

    def _wire_view(self):
        v = self.view
        v.landingPage.btnDownscale.clicked.connect(lambda: self.navigate(Page.DOWNSCALE))
        v.landingPage.btnRestore.clicked.connect(lambda: self.navigate(Page.RESTORE))
        v.downscalePage.btnBack.clicked.connect(lambda: self.navigate(Page.LANDING))
        v.restorePage.btnBack.clicked.connect(lambda: self.navigate(Page.LANDING))

    def navigate(self, page: Page):
        # Leaving a page drops its file, polygons and result - every visit starts fresh
        self.downscale.release()
        self.restore.release()
        self.view.landingPage.reset_blur()
        self.view.show_page(page)
        log.info("[NAV] -> %s", page.name.lower())

    def _on_request_finished(self, page_id: str, version: int, outcome: RequestOutcome):
        ctrl = self._pages.get(page_id)
        if ctrl is not None:
            ctrl.on_finished(version, outcome)
