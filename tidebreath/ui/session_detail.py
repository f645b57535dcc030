from datetime import datetime
from typing import Any, Dict

from PySide6.QtWidgets import QWidget, QVBoxLayout, QLabel, QPushButton, QFrame, QHBoxLayout
from PySide6.QtCore import Qt

from tidebreath.core.patterns import PATTERNS
from tidebreath.ui.style import card_qss, fmt_duration


def _fmt_dt(ts: str) -> str:
    try:
        dt = datetime.fromisoformat(ts)
        if dt.tzinfo:
            dt = dt.astimezone()
        return dt.strftime("%A, %b %d %Y, %I:%M %p")
    except (TypeError, ValueError):
        return "—"


class SessionDetailScreen(QWidget):
    def __init__(self, on_back):
        super().__init__()
        self.on_back = on_back

        root = QVBoxLayout(self)
        root.setContentsMargins(40, 30, 40, 30)
        root.setSpacing(16)

        header = QHBoxLayout()
        title = QLabel("Session Detail")
        title.setStyleSheet("font-size: 24px; font-weight: 850;")

        back_btn = QPushButton("Back")
        back_btn.clicked.connect(self.on_back)
        back_btn.setCursor(Qt.PointingHandCursor)

        header.addWidget(title, 1)
        header.addWidget(back_btn)

        self.when_lbl = QLabel("—")
        self.when_lbl.setObjectName("muted")

        self.card = QFrame()
        self.card.setStyleSheet(card_qss(radius=18, alpha=0.04))
        lay = QVBoxLayout(self.card)
        lay.setContentsMargins(22, 18, 22, 18)
        lay.setSpacing(10)

        self.pattern_lbl = QLabel("Rhythm: —")
        self.duration_lbl = QLabel("Duration: —")
        self.cycles_lbl = QLabel("Cycles: —")
        self.entropy_lbl = QLabel("Final tension: —")
        self.belief_lbl = QLabel("Arousal —  •  Attention —  •  Rhythm —")
        self.ended_lbl = QLabel("Ended by: —")

        for lbl in (
            self.pattern_lbl,
            self.duration_lbl,
            self.cycles_lbl,
            self.entropy_lbl,
            self.belief_lbl,
            self.ended_lbl,
        ):
            lbl.setStyleSheet("font-size: 16px; font-weight: 700;")
            lay.addWidget(lbl)

        root.addLayout(header)
        root.addWidget(self.when_lbl)
        root.addWidget(self.card)
        root.addStretch(1)

    def set_record(self, record: Dict[str, Any]):
        pid = str(record.get("pattern_id", ""))
        p = PATTERNS.get(pid)
        belief = record.get("final_belief") or {}

        self.when_lbl.setText(_fmt_dt(str(record.get("timestamp_utc", ""))))
        self.pattern_lbl.setText(f"Rhythm: {p.label if p else pid or '—'}")
        self.duration_lbl.setText(f"Duration: {fmt_duration(int(record.get('duration_s', 0)))}")
        self.cycles_lbl.setText(f"Cycles: {int(record.get('cycles', 0))}")
        self.entropy_lbl.setText(f"Final tension: {int(float(record.get('final_entropy', 0.0)) * 100)}%")

        def pct(key: str) -> str:
            v = belief.get(key)
            return f"{int(float(v) * 100)}%" if v is not None else "—"

        self.belief_lbl.setText(
            f"Arousal {pct('arousal')}  •  Attention {pct('attention')}  •  Rhythm {pct('rhythm_alignment')}"
        )
        ended = record.get("ended_by", "user")
        self.ended_lbl.setText("Ended by: safety check" if ended == "safety" else "Ended by: you")
