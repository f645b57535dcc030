from datetime import datetime
from typing import Any, Dict, List

from PySide6.QtWidgets import (
    QWidget,
    QVBoxLayout,
    QLabel,
    QPushButton,
    QHBoxLayout,
    QTableWidget,
    QTableWidgetItem,
    QHeaderView,
)
from PySide6.QtCore import Qt

from tidebreath.core.patterns import PATTERNS
from tidebreath.core.storage import SessionStore
from tidebreath.ui.style import fmt_duration

COLUMNS = ["Date / Time", "Rhythm", "Duration", "Cycles", "Final Tension"]


def _fmt_dt(ts: str) -> str:
    try:
        dt = datetime.fromisoformat(ts)
        if dt.tzinfo:
            dt = dt.astimezone()
        return dt.strftime("%Y-%m-%d %I:%M %p")
    except (TypeError, ValueError):
        return "—"


def history_row(it: Dict[str, Any]) -> List[str]:
    pid = str(it.get("pattern_id", ""))
    p = PATTERNS.get(pid)
    ended = " ⚠" if it.get("ended_by") == "safety" else ""
    return [
        _fmt_dt(str(it.get("timestamp_utc", ""))),
        (p.label if p else pid or "—") + ended,
        fmt_duration(int(it.get("duration_s", 0))),
        str(int(it.get("cycles", 0))),
        f"{int(float(it.get('final_entropy', 0.0)) * 100)}%",
    ]


class SessionHistoryScreen(QWidget):
    def __init__(self, on_back, on_new_session, on_open_detail):
        super().__init__()

        self.on_back = on_back
        self.on_new_session = on_new_session
        self.on_open_detail = on_open_detail
        self.store = SessionStore()
        self._items: List[Dict[str, Any]] = []

        root = QVBoxLayout(self)
        root.setContentsMargins(28, 22, 28, 22)
        root.setSpacing(12)

        # --------------------------------------------------
        # Header
        # --------------------------------------------------
        header = QHBoxLayout()

        title = QLabel("Session History")
        title.setStyleSheet("font-size: 24px; font-weight: 800;")

        back_btn = QPushButton("Back")
        back_btn.clicked.connect(self.on_back)
        back_btn.setCursor(Qt.PointingHandCursor)

        new_btn = QPushButton("New Session")
        new_btn.clicked.connect(self.on_new_session)
        new_btn.setCursor(Qt.PointingHandCursor)

        header.addWidget(title, 1)
        header.addWidget(back_btn)
        header.addWidget(new_btn)

        root.addLayout(header)

        self.empty_lbl = QLabel("No sessions yet. Sessions longer than ten seconds show up here.")
        self.empty_lbl.setObjectName("muted")
        root.addWidget(self.empty_lbl)

        # --------------------------------------------------
        # Table
        # --------------------------------------------------
        self.table = QTableWidget(0, len(COLUMNS))
        self.table.setHorizontalHeaderLabels(COLUMNS)

        self.table.verticalHeader().setVisible(False)
        self.table.setSelectionBehavior(QTableWidget.SelectRows)
        self.table.setSelectionMode(QTableWidget.SingleSelection)
        self.table.setEditTriggers(QTableWidget.NoEditTriggers)
        self.table.setShowGrid(False)

        hh = self.table.horizontalHeader()
        hh.setSectionResizeMode(0, QHeaderView.Stretch)
        for i in range(1, len(COLUMNS)):
            hh.setSectionResizeMode(i, QHeaderView.ResizeToContents)

        hh.setStyleSheet("""
            QHeaderView::section {
                padding-left: 12px;
                padding-right: 12px;
                text-align: left;
                background: rgba(255,255,255,0.02);
                border: none;
                font-weight: 750;
            }
        """)

        self.table.cellDoubleClicked.connect(self._open_row)

        root.addWidget(self.table)

        self.refresh()

    # --------------------------------------------------
    # Lifecycle
    # --------------------------------------------------
    def showEvent(self, event):
        super().showEvent(event)
        self.refresh()

    def refresh(self):
        self._items = list(self.store.load())[::-1]  # newest first
        self.table.setRowCount(len(self._items))
        self.empty_lbl.setVisible(not self._items)

        for row, it in enumerate(self._items):
            for col, value in enumerate(history_row(it)):
                item = QTableWidgetItem(value)
                item.setTextAlignment(
                    Qt.AlignVCenter | (Qt.AlignLeft if col < 2 else Qt.AlignCenter)
                )
                self.table.setItem(row, col, item)

    # --------------------------------------------------
    # Navigation
    # --------------------------------------------------
    def _open_row(self, row: int, col: int):
        if 0 <= row < len(self._items):
            self.on_open_detail(self._items[row])
