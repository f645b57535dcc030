from PySide6.QtWidgets import QWidget, QVBoxLayout, QLabel, QPushButton
from PySide6.QtCore import Qt


class SplashDisclaimer(QWidget):
    """First-run notice; the caller records that it was acknowledged."""

    def __init__(self, on_continue):
        super().__init__()
        self.on_continue = on_continue

        layout = QVBoxLayout(self)
        layout.setContentsMargins(40, 40, 40, 40)
        layout.setSpacing(20)
        layout.setAlignment(Qt.AlignCenter)

        title = QLabel("Tidebreath")
        title.setAlignment(Qt.AlignCenter)
        title.setStyleSheet("font-size: 32px; font-weight: 700;")

        text = QLabel(
            "Tidebreath guides paced breathing. It is not a medical device. "
            "Advanced rhythms unlock as you practise, and a session stops itself "
            "if your breathing looks strained. If you feel dizzy, stop and breathe normally."
        )
        text.setAlignment(Qt.AlignCenter)
        text.setWordWrap(True)
        text.setStyleSheet("font-size: 15px; color: rgba(231,238,247,0.75);")

        self.continue_btn = QPushButton("Continue")
        self.continue_btn.setFixedWidth(200)
        self.continue_btn.setCursor(Qt.PointingHandCursor)
        self.continue_btn.clicked.connect(self.on_continue)

        layout.addWidget(title)
        layout.addWidget(text)
        layout.addSpacing(10)
        layout.addWidget(self.continue_btn, alignment=Qt.AlignCenter)
