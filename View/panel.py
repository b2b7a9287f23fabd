from PyQt6.QtWidgets import (
    QFrame, QWidget, QVBoxLayout, QHBoxLayout,
    QLabel, QSizePolicy, QPushButton, QToolButton, QComboBox
)
from PyQt6.QtCore import Qt

class Panel(QFrame):
    # A titled card: title line, toolbar row (buttons / option selectors), content widget
    def __init__(self, title: str):
        super().__init__()
        self.setFrameShape(QFrame.Shape.StyledPanel)
        self.setFrameShadow(QFrame.Shadow.Raised)

        # Title
        self.titleLabel = QLabel(title)
        self.titleLabel.setContentsMargins(8, 6, 8, 2)
        self.titleLabel.setAlignment(Qt.AlignmentFlag.AlignVCenter | Qt.AlignmentFlag.AlignLeft)
        font = self.titleLabel.font()
        font.setPointSizeF(font.pointSizeF() * 1.25)
        font.setBold(True)
        self.titleLabel.setFont(font)

        # Toolbar
        self.toolbar = QWidget()
        self._tbLayout = QHBoxLayout(self.toolbar)
        self._tbLayout.setContentsMargins(8, 4, 8, 4)
        self._tbLayout.setSpacing(8)
        self._tbLayout.addStretch(1)
        self.toolbar.hide()  # only shown once something is added

        # Content
        self.contentArea = QWidget()
        self.contentArea.setSizePolicy(QSizePolicy.Policy.Expanding, QSizePolicy.Policy.Expanding)

        v = QVBoxLayout(self)
        v.setContentsMargins(0, 0, 0, 4)
        v.setSpacing(0)
        v.addWidget(self.titleLabel)
        v.addWidget(self.toolbar)
        v.addWidget(self.contentArea)

        # Buttons and selectors are kept by key so the controller can wire them
        self.toolbarButtons: dict[str, QPushButton | QToolButton] = {}
        self.selectors: dict[str, QComboBox] = {}

    # ---------- Public API ---------
    def add_toolbar_buttons(self, buttons: dict[str, QPushButton | QToolButton]):
        # The last item of the layout is the stretch - take it away and re-add it behind the buttons
        stretch_item = self._tbLayout.takeAt(self._tbLayout.count() - 1)
        for key, btn in buttons.items():
            if btn.minimumHeight() < 32:
                btn.setMinimumHeight(32)
            self._tbLayout.addWidget(btn)
            self.toolbarButtons[key] = btn
        self._tbLayout.addItem(stretch_item)
        self.toolbar.show()

    def add_option_selector(self, key: str, label: str, options, default: int, min_width: int = 160) -> QComboBox:
        # options: iterable of (text, value); value is kept as item data
        stretch_item = self._tbLayout.takeAt(self._tbLayout.count() - 1)

        lbl = QLabel(label)
        lbl.setAlignment(Qt.AlignmentFlag.AlignVCenter | Qt.AlignmentFlag.AlignLeft)
        self._tbLayout.addWidget(lbl)

        combo = QComboBox()
        combo.setMinimumHeight(32)
        combo.setMinimumWidth(min_width)
        for text, value in options:
            combo.addItem(text, value)
        idx = combo.findData(default)
        combo.setCurrentIndex(max(0, idx))
        self._tbLayout.addWidget(combo)
        self.selectors[key] = combo

        self._tbLayout.addItem(stretch_item)
        self.toolbar.show()
        return combo

    def set_content(self, widget: QWidget):
        # Replaces the placeholder content through own widget
        layout = self.layout()
        layout.removeWidget(self.contentArea)
        self.contentArea.deleteLater()
        self.contentArea = widget
        layout.addWidget(self.contentArea)

    def get_button(self, key: str):
        return self.toolbarButtons.get(key)

    def select_value(self, key: str, value):
        combo = self.selectors.get(key)
        if combo is None:
            return
        combo.blockSignals(True)
        combo.setCurrentIndex(max(0, combo.findData(value)))
        combo.blockSignals(False)
