from PySide6.QtWidgets import QWidget, QVBoxLayout, QLabel, QPushButton, QFrame
from PySide6.QtCore import Qt
from PySide6.QtGui import QGuiApplication


class SafetyPopup(QWidget):
    """
    Shown when the kernel locks a session:
    - Stays above other windows
    - Does not steal focus
    - Stays until the user clicks "Understood"
    """
    def __init__(self, title="Session stopped", message="The session was stopped as a precaution."):
        super().__init__()

        self.setWindowFlags(
            Qt.ToolTip |
            Qt.FramelessWindowHint |
            Qt.WindowStaysOnTopHint
        )
        self.setAttribute(Qt.WA_TranslucentBackground, True)
        self.setFocusPolicy(Qt.NoFocus)

        outer = QVBoxLayout(self)
        outer.setContentsMargins(0, 0, 0, 0)

        card = QFrame()
        card.setStyleSheet("""
            QFrame {
                background: rgba(11,15,20,0.97);
                border: 1px solid rgba(245,158,11,0.35);
                border-radius: 18px;
            }
        """)
        lay = QVBoxLayout(card)
        lay.setContentsMargins(22, 18, 22, 18)
        lay.setSpacing(10)

        title_lbl = QLabel(title)
        title_lbl.setStyleSheet("font-size: 19px; font-weight: 900; color: #fbbf24;")

        msg_lbl = QLabel(message)
        msg_lbl.setWordWrap(True)
        msg_lbl.setStyleSheet("font-size: 14px; color: rgba(231,238,247,0.82); font-weight: 600;")

        btn = QPushButton("Understood")
        btn.clicked.connect(self.close)
        btn.setCursor(Qt.PointingHandCursor)

        lay.addWidget(title_lbl)
        lay.addWidget(msg_lbl)
        lay.addSpacing(6)
        lay.addWidget(btn, alignment=Qt.AlignRight)

        outer.addWidget(card)
        self.setFixedSize(440, 200)

    def showEvent(self, event):
        super().showEvent(event)
        screen = QGuiApplication.primaryScreen()
        if not screen:
            return
        g = screen.availableGeometry()
        self.move(
            g.x() + (g.width() - self.width()) // 2,
            g.y() + (g.height() - self.height()) // 2,
        )
