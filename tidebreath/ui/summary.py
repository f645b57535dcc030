from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from PySide6.QtWidgets import QWidget, QVBoxLayout, QLabel, QPushButton, QFrame
from PySide6.QtCore import Qt

from tidebreath.core.patterns import PATTERNS
from tidebreath.core.safety_alert import message_for
from tidebreath.core.storage import MIN_RECORDED_DURATION_S, SessionStore
from tidebreath.ui.style import card_qss, fmt_duration


def _card() -> QFrame:
    f = QFrame()
    f.setStyleSheet(card_qss(radius=18, alpha=0.04))
    return f


def _parse_iso(ts: str) -> Optional[datetime]:
    try:
        dt = datetime.fromisoformat(ts)
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=timezone.utc)
        return dt.astimezone(timezone.utc)
    except (TypeError, ValueError):
        return None


def _relative_day_label(dt_utc: datetime) -> str:
    now = datetime.now(timezone.utc).date()
    d = dt_utc.date()
    if d == now:
        return "Today"
    if (now.toordinal() - d.toordinal()) == 1:
        return "Yesterday"
    return dt_utc.strftime("%b %d, %Y")


def _pattern_label(pattern_id: str) -> str:
    p = PATTERNS.get(pattern_id)
    return p.label if p else (pattern_id or "—")


class SummaryScreen(QWidget):
    def __init__(self, on_done):
        super().__init__()
        self.on_done = on_done
        self.store = SessionStore()

        root = QVBoxLayout(self)
        root.setContentsMargins(40, 40, 40, 40)
        root.setSpacing(18)
        root.setAlignment(Qt.AlignCenter)

        title = QLabel("Session Complete")
        title.setAlignment(Qt.AlignCenter)
        title.setStyleSheet("font-size: 28px; font-weight: 800;")

        # ---- Safety note (only after a lock)
        self.safety_lbl = QLabel("")
        self.safety_lbl.setWordWrap(True)
        self.safety_lbl.setAlignment(Qt.AlignCenter)
        self.safety_lbl.setStyleSheet("""
            QLabel {
                background: rgba(239,68,68,0.10);
                border: 1px solid rgba(239,68,68,0.25);
                border-radius: 14px;
                padding: 10px 14px;
                font-weight: 650;
            }
        """)
        self.safety_lbl.hide()

        # ---- Current session card
        self.current_card = _card()
        cur_layout = QVBoxLayout(self.current_card)
        cur_layout.setContentsMargins(22, 18, 22, 18)
        cur_layout.setSpacing(10)

        self.pattern_lbl = QLabel("Rhythm: —")
        self.duration_lbl = QLabel("Duration: —")
        self.cycles_lbl = QLabel("Cycles: —")
        self.tension_lbl = QLabel("Final tension: —")
        self.streak_lbl = QLabel("Streak: —")

        for lbl in (
            self.pattern_lbl, self.duration_lbl, self.cycles_lbl,
            self.tension_lbl, self.streak_lbl
        ):
            lbl.setAlignment(Qt.AlignLeft)
            lbl.setStyleSheet("font-size: 16px; font-weight: 650;")
            cur_layout.addWidget(lbl)

        # ---- Previous session card (optional)
        self.prev_card = _card()
        prev_layout = QVBoxLayout(self.prev_card)
        prev_layout.setContentsMargins(22, 16, 22, 16)
        prev_layout.setSpacing(6)

        self.prev_title = QLabel("Previous session")
        self.prev_title.setObjectName("muted")

        self.prev_value = QLabel("—")
        self.prev_value.setStyleSheet("font-size: 16px; font-weight: 750;")

        self.prev_meta = QLabel("")
        self.prev_meta.setObjectName("muted")

        prev_layout.addWidget(self.prev_title)
        prev_layout.addWidget(self.prev_value)
        prev_layout.addWidget(self.prev_meta)

        self.prev_card.hide()

        # ---- Done button
        self.done_btn = QPushButton("Done")
        self.done_btn.setFixedWidth(200)
        self.done_btn.setCursor(Qt.PointingHandCursor)
        self.done_btn.clicked.connect(self.on_done)

        root.addWidget(title)
        root.addWidget(self.safety_lbl)
        root.addWidget(self.current_card)
        root.addWidget(self.prev_card)
        root.addSpacing(8)
        root.addWidget(self.done_btn, alignment=Qt.AlignCenter)

    def set_summary(self, summary: dict, streak: int = 0):
        dur = int(summary.get("duration_s", 0))
        cycles = int(summary.get("cycles", 0))
        entropy = float(summary.get("final_entropy", 0.0))

        self.pattern_lbl.setText(f"Rhythm: {summary.get('pattern_label') or _pattern_label(summary.get('pattern_id', ''))}")
        self.duration_lbl.setText(f"Duration: {fmt_duration(dur)}")
        self.cycles_lbl.setText(f"Cycles: {cycles}")
        self.tension_lbl.setText(f"Final tension: {int(entropy * 100)}%")
        self.streak_lbl.setText(f"Streak: {streak} day{'s' if streak != 1 else ''}")

        if summary.get("ended_by") == "safety":
            self.safety_lbl.setText(message_for(str(summary.get("safety_action", ""))))
            self.safety_lbl.show()
        else:
            self.safety_lbl.hide()

        # ---- Previous session (from disk); the current one may not be saved
        items: List[Dict[str, Any]] = self.store.load()
        saved_current = dur > MIN_RECORDED_DURATION_S and len(items) >= 1
        prev_idx = -2 if saved_current else -1
        if len(items) < abs(prev_idx):
            self.prev_card.hide()
            return

        prev = items[prev_idx]
        p_dur = int(prev.get("duration_s", 0))
        p_cycles = int(prev.get("cycles", 0))
        p_entropy = float(prev.get("final_entropy", 0.0))
        ts = str(prev.get("timestamp_utc", ""))

        dt_utc = _parse_iso(ts)
        when = _relative_day_label(dt_utc) if dt_utc else "Recent"

        self.prev_value.setText(
            f"{_pattern_label(str(prev.get('pattern_id', '')))}  •  {fmt_duration(p_dur)}  •  {p_cycles} cycles"
        )
        self.prev_meta.setText(
            f"{when}  •  Final tension {int(p_entropy * 100)}%"
        )
        self.prev_card.show()
