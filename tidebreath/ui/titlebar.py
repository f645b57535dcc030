from PySide6.QtWidgets import QWidget, QHBoxLayout, QLabel, QPushButton
from PySide6.QtCore import Qt, QPoint


class TitleBar(QWidget):
    """
    Frameless window title bar:
    - Drag to move the window
    - History / Settings shortcuts (hidden during a session)
    - Minimize, Maximize/Restore, Close
    """
    def __init__(self, window, title: str = "Tidebreath", on_history=None, on_settings=None):
        super().__init__()
        self._window = window
        self._drag_pos: QPoint | None = None

        self.setFixedHeight(44)

        layout = QHBoxLayout(self)
        layout.setContentsMargins(14, 8, 12, 8)
        layout.setSpacing(10)

        self.title = QLabel(title)
        self.title.setStyleSheet("font-size: 14px; font-weight: 750;")

        self.streak_lbl = QLabel("")
        self.streak_lbl.setObjectName("muted")

        self.history_btn = self._btn("History", wide=True)
        self.settings_btn = self._btn("Settings", wide=True)
        if on_history:
            self.history_btn.clicked.connect(on_history)
        if on_settings:
            self.settings_btn.clicked.connect(on_settings)

        self.min_btn = self._btn("—")
        self.max_btn = self._btn("⬜")
        self.close_btn = self._btn("✕", danger=True)

        self.min_btn.clicked.connect(self._window.showMinimized)
        self.max_btn.clicked.connect(self._toggle_max_restore)
        self.close_btn.clicked.connect(self._window.close)

        layout.addWidget(self.title)
        layout.addWidget(self.streak_lbl)
        layout.addStretch(1)
        layout.addWidget(self.history_btn)
        layout.addWidget(self.settings_btn)
        layout.addSpacing(6)
        layout.addWidget(self.min_btn)
        layout.addWidget(self.max_btn)
        layout.addWidget(self.close_btn)

        self.setStyleSheet("""
            QWidget {
                background: rgba(255,255,255,0.03);
                border-bottom: 1px solid rgba(255,255,255,0.06);
                border-top-left-radius: 16px;
                border-top-right-radius: 16px;
            }
        """)

    def set_streak(self, days: int):
        self.streak_lbl.setText(f"· {days}-day streak" if days > 0 else "")

    def set_nav_enabled(self, enabled: bool):
        self.history_btn.setVisible(enabled)
        self.settings_btn.setVisible(enabled)

    def _btn(self, text: str, danger: bool = False, wide: bool = False) -> QPushButton:
        b = QPushButton(text)
        if wide:
            b.setFixedHeight(30)
        else:
            b.setFixedSize(36, 30)
        b.setCursor(Qt.PointingHandCursor)
        hover = "rgba(239,68,68,0.25)" if danger else "rgba(255,255,255,0.10)"
        pressed = "rgba(239,68,68,0.35)" if danger else "rgba(255,255,255,0.14)"
        b.setStyleSheet(f"""
            QPushButton {{
                background: rgba(255,255,255,0.06);
                border: 1px solid rgba(255,255,255,0.10);
                border-radius: 10px;
                padding: 0px 10px;
                font-weight: 800;
            }}
            QPushButton:hover {{ background: {hover}; }}
            QPushButton:pressed {{ background: {pressed}; }}
        """)
        return b

    def _toggle_max_restore(self):
        if self._window.isMaximized():
            self._window.showNormal()
        else:
            self._window.showMaximized()

    def mousePressEvent(self, event):
        if event.button() == Qt.LeftButton:
            self._drag_pos = event.globalPosition().toPoint() - self._window.frameGeometry().topLeft()
            event.accept()

    def mouseMoveEvent(self, event):
        if self._window.isMaximized():
            return

        if self._drag_pos is not None and event.buttons() & Qt.LeftButton:
            self._window.move(event.globalPosition().toPoint() - self._drag_pos)
            event.accept()

    def mouseReleaseEvent(self, event):
        self._drag_pos = None
        event.accept()
