# tidebreath/ui/presession.py

from PySide6.QtWidgets import (
    QWidget, QVBoxLayout, QLabel, QPushButton, QFrame, QGridLayout
)
from PySide6.QtCore import Qt

from tidebreath.core.patterns import PATTERNS, DEFAULT_PATTERN_ID, TIER_UNLOCK_SESSIONS, is_pattern_locked
from tidebreath.kernel.types import Pattern
from tidebreath.ui.style import THEME_ACCENTS, card_qss

GRID_COLUMNS = 3


def timings_text(p: Pattern) -> str:
    parts = [p.timings["inhale"], p.timings["hold_in"], p.timings["exhale"], p.timings["hold_out"]]
    return "-".join(f"{v:g}" for v in parts)


class PatternTile(QPushButton):
    def __init__(self, pattern: Pattern):
        super().__init__()
        self.pattern = pattern
        self.setCheckable(True)
        self.setCursor(Qt.PointingHandCursor)
        self.setMinimumHeight(72)
        self.set_locked(False, 0)

    def set_locked(self, locked: bool, needed: int):
        p = self.pattern
        if locked:
            self.setText(f"🔒 {p.label}\n{needed} sessions to unlock")
        else:
            self.setText(f"{p.label}\n{p.tag} · {timings_text(p)}")
        self.setEnabled(not locked)

        accent = THEME_ACCENTS.get(p.color_theme, "#a5b4fc")
        self.setStyleSheet(f"""
            QPushButton {{
                background: rgba(255,255,255,0.04);
                border: 1px solid rgba(255,255,255,0.08);
                border-radius: 14px;
                padding: 10px 12px;
                text-align: left;
                font-weight: 700;
            }}
            QPushButton:hover {{ background: rgba(255,255,255,0.09); }}
            QPushButton:checked {{ border: 1px solid {accent}; background: rgba(255,255,255,0.10); }}
        """)


class PatternPickerScreen(QWidget):
    """Select a rhythm and begin. Tier 2/3 rhythms unlock with practice."""

    def __init__(self, on_start, completed_sessions, initial_pattern_id: str = DEFAULT_PATTERN_ID):
        super().__init__()
        self.on_start = on_start
        self.completed_sessions = completed_sessions   # () -> int
        self.selected_id = initial_pattern_id if initial_pattern_id in PATTERNS else DEFAULT_PATTERN_ID

        root = QVBoxLayout(self)
        root.setContentsMargins(36, 28, 36, 28)
        root.setSpacing(14)
        root.setAlignment(Qt.AlignTop)

        title = QLabel("Choose a rhythm")
        title.setStyleSheet("font-size: 26px; font-weight: 850;")

        # ---- Hero card (selected pattern)
        hero = QFrame()
        hero.setStyleSheet(card_qss(radius=18, alpha=0.04))
        hlay = QVBoxLayout(hero)
        hlay.setContentsMargins(22, 18, 22, 18)
        hlay.setSpacing(6)

        self.hero_label = QLabel("—")
        self.hero_label.setStyleSheet("font-size: 30px; font-weight: 800;")
        self.hero_desc = QLabel("")
        self.hero_desc.setWordWrap(True)
        self.hero_desc.setObjectName("muted")
        self.hero_meta = QLabel("")
        self.hero_meta.setObjectName("muted")

        self.start_btn = QPushButton("Begin")
        self.start_btn.setCursor(Qt.PointingHandCursor)
        self.start_btn.clicked.connect(self._start)
        self.start_btn.setStyleSheet("""
            QPushButton {
                background: rgba(34,197,94,0.14);
                border: 1px solid rgba(34,197,94,0.28);
                border-radius: 14px;
                padding: 12px 18px;
                font-weight: 850;
                min-width: 200px;
            }
            QPushButton:hover { background: rgba(34,197,94,0.20); }
            QPushButton:pressed { background: rgba(34,197,94,0.26); }
        """)

        hlay.addWidget(self.hero_label)
        hlay.addWidget(self.hero_desc)
        hlay.addWidget(self.hero_meta)
        hlay.addSpacing(6)
        hlay.addWidget(self.start_btn, alignment=Qt.AlignLeft)

        # ---- Grid of rhythms
        grid_wrap = QWidget()
        grid = QGridLayout(grid_wrap)
        grid.setContentsMargins(0, 0, 0, 0)
        grid.setHorizontalSpacing(10)
        grid.setVerticalSpacing(10)

        self.tiles = {}
        for i, p in enumerate(PATTERNS.values()):
            tile = PatternTile(p)
            tile.clicked.connect(lambda _=False, pid=p.id: self.select(pid))
            grid.addWidget(tile, i // GRID_COLUMNS, i % GRID_COLUMNS)
            self.tiles[p.id] = tile

        root.addWidget(title)
        root.addWidget(hero)
        sub = QLabel("Select rhythm")
        sub.setObjectName("muted")
        root.addWidget(sub)
        root.addWidget(grid_wrap)

        self.refresh()

    def showEvent(self, event):
        super().showEvent(event)
        self.refresh()

    def refresh(self):
        done = int(self.completed_sessions())
        for pid, tile in self.tiles.items():
            p = tile.pattern
            locked = is_pattern_locked(p, done)
            needed = max(0, TIER_UNLOCK_SESSIONS.get(p.tier, 0) - done)
            tile.set_locked(locked, needed)

        if is_pattern_locked(PATTERNS[self.selected_id], done):
            self.selected_id = DEFAULT_PATTERN_ID
        self.select(self.selected_id)

    def select(self, pattern_id: str):
        p = PATTERNS.get(pattern_id)
        if p is None:
            return
        self.selected_id = pattern_id
        for pid, tile in self.tiles.items():
            tile.setChecked(pid == pattern_id)

        self.hero_label.setText(p.label)
        self.hero_desc.setText(p.description)
        self.hero_meta.setText(
            f"{p.tag}  •  {timings_text(p)}  •  {p.recommended_cycles} cycles suggested"
        )

    def _start(self):
        self.on_start(self.selected_id)
