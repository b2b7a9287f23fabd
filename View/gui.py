from PyQt6.QtWidgets import QWidget, QVBoxLayout, QStackedWidget

from Controller.enums import Page
from Controller.MRS3Controller import AppController
from Model.config import AppConfig
from .pages import LandingPage, DownscalePage, RestorePage


class MRS3GUI(QWidget):
    # Main window: one stack with the landing, compression and restoration pages.
    def __init__(self, config: AppConfig, client=None):
        super().__init__()
        self.setWindowTitle("MRS3")
        self.config = config
        self._init_ui()
        self.controller = AppController(self, config, client=client)

    def _init_ui(self):
        self.setMinimumSize(900, 640)

        self.landingPage = LandingPage(self.config)
        self.downscalePage = DownscalePage(self.config)
        self.restorePage = RestorePage(self.config)

        # The order has to match the values of the Page enum
        self.stack = QStackedWidget()
        self.stack.insertWidget(Page.LANDING.value, self.landingPage)
        self.stack.insertWidget(Page.DOWNSCALE.value, self.downscalePage)
        self.stack.insertWidget(Page.RESTORE.value, self.restorePage)

        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.addWidget(self.stack)

    def show_page(self, page: Page):
        self.stack.setCurrentIndex(page.value)
