from collections import deque

from PySide6.QtWidgets import (
    QWidget, QVBoxLayout, QLabel, QHBoxLayout, QProgressBar, QFrame, QPushButton
)
from PySide6.QtCore import Qt, QTimer
from PySide6.QtGui import QFont

import pyqtgraph as pg

from tidebreath.core.safety_alert import show_safety_popup
from tidebreath.core.storage import SessionStore
from tidebreath.ui.style import THEME_ACCENTS, card_qss, fmt_duration, phase_label

TREND_POINTS = 60
PHASE_FONT_PX = 40


def entropy_color(value: float) -> str:
    if value < 0.35:
        return "#22c55e"   # settled
    if value < 0.65:
        return "#facc15"
    return "#ef4444"       # strained


def card() -> QFrame:
    f = QFrame()
    f.setStyleSheet(card_qss())
    return f


class SessionScreen(QWidget):
    """
    Live breathing session
    - Phase label breathes with the kernel's scale parameter
    - Phase progress + tension (entropy) bars
    - Belief cards (arousal / attention / rhythm)
    - Tension trend, sampled once a second
    - Pause / Resume and End buttons
    - Ends itself when the kernel locks for safety
    """
    def __init__(self, engine, pattern, settings, on_end):
        super().__init__()
        self.engine = engine
        self.pattern = pattern
        self.settings = settings   # snapshot for this session
        self.on_end = on_end
        self.store = SessionStore()

        self._ended = False
        self._paused = False

        accent = THEME_ACCENTS.get(pattern.color_theme, "#a5b4fc")

        # --- Header
        header = QHBoxLayout()
        header.setSpacing(12)

        title = QLabel(pattern.label)
        title.setStyleSheet("font-size: 24px; font-weight: 750;")

        self.pause_btn = QPushButton("Pause")
        self.pause_btn.setCursor(Qt.PointingHandCursor)
        self.pause_btn.clicked.connect(self.toggle_pause)

        self.end_btn = QPushButton("End Session")
        self.end_btn.setCursor(Qt.PointingHandCursor)
        self.end_btn.clicked.connect(self.end_session)
        self.end_btn.setStyleSheet("""
            QPushButton {
                background: rgba(239,68,68,0.12);
                border: 1px solid rgba(239,68,68,0.22);
                border-radius: 14px;
                padding: 10px 14px;
                font-weight: 700;
            }
            QPushButton:hover { background: rgba(239,68,68,0.18); }
            QPushButton:pressed { background: rgba(239,68,68,0.26); }
        """)

        header.addWidget(title, 1)
        header.addWidget(self.pause_btn, 0, Qt.AlignRight)
        header.addWidget(self.end_btn, 0, Qt.AlignRight)

        # --- Breath card
        breath_card = card()
        breath_card.setMinimumHeight(170)
        bl = QVBoxLayout(breath_card)
        bl.setContentsMargins(16, 18, 16, 18)
        bl.setSpacing(8)

        self.phase_lbl = QLabel(phase_label("inhale"))
        self.phase_lbl.setAlignment(Qt.AlignCenter)
        self.phase_lbl.setStyleSheet(f"font-weight: 300; letter-spacing: 3px; color: {accent};")
        self._set_phase_scale(1.0)

        self.cycle_lbl = QLabel("")
        self.cycle_lbl.setAlignment(Qt.AlignCenter)
        self.cycle_lbl.setObjectName("muted")

        self.paused_lbl = QLabel("PAUSED")
        self.paused_lbl.setAlignment(Qt.AlignCenter)
        self.paused_lbl.setStyleSheet("font-size: 11px; font-weight: 800; letter-spacing: 4px;")
        self.paused_lbl.hide()

        self.phase_bar = QProgressBar()
        self.phase_bar.setRange(0, 1000)
        self.phase_bar.setTextVisible(False)
        self.phase_bar.setStyleSheet(f"QProgressBar::chunk {{ background: {accent}; }}")

        bl.addWidget(self.phase_lbl)
        bl.addWidget(self.cycle_lbl)
        bl.addWidget(self.paused_lbl)
        bl.addWidget(self.phase_bar)

        if not getattr(self.settings, "show_timer", True):
            self.cycle_lbl.hide()
            self.phase_bar.hide()

        # --- Tension + belief row
        self.entropy_bar = QProgressBar()
        self.entropy_bar.setRange(0, 100)
        self.entropy_bar.setFormat("Tension: %p%")

        belief_row = QHBoxLayout()
        belief_row.setSpacing(12)
        self.belief_values = {}
        for key, name in (("arousal", "Arousal"), ("attention", "Attention"), ("rhythm_alignment", "Rhythm")):
            c = card()
            lay = QVBoxLayout(c)
            lay.setContentsMargins(16, 12, 16, 12)
            lay.setSpacing(4)
            t = QLabel(name)
            t.setObjectName("muted")
            v = QLabel("—")
            v.setStyleSheet("font-size: 20px; font-weight: 750;")
            lay.addWidget(t)
            lay.addWidget(v)
            belief_row.addWidget(c)
            self.belief_values[key] = v

        self.elapsed_lbl = QLabel("00:00")
        self.elapsed_lbl.setObjectName("muted")

        # --- Trend chart
        pg.setConfigOptions(antialias=True)
        self.trend_hist = deque([0.0] * TREND_POINTS, maxlen=TREND_POINTS)
        self.x_hist = list(range(-TREND_POINTS + 1, 1))

        self.trend_plot = pg.PlotWidget()
        self.trend_plot.setMinimumHeight(160)
        self.trend_plot.setBackground(None)
        self.trend_plot.showGrid(x=True, y=True, alpha=0.2)
        self.trend_plot.setTitle("Tension trend (last ~60s)")
        self.trend_plot.setYRange(0.0, 1.0)
        self.trend_curve = self.trend_plot.plot(self.x_hist, list(self.trend_hist))

        # --- Page layout
        root = QVBoxLayout(self)
        root.setContentsMargins(22, 20, 22, 20)
        root.setSpacing(12)
        root.addLayout(header)
        root.addWidget(breath_card)
        root.addWidget(self.entropy_bar)
        root.addLayout(belief_row)
        root.addWidget(self.elapsed_lbl)
        root.addWidget(self.trend_plot)

        # --- Engine wiring
        self.engine.phase_changed.connect(self._on_phase)
        self.engine.frame_changed.connect(self._on_frame)
        self.engine.safety_locked.connect(self._on_safety_locked)

        # --- Slow UI refresh (cards, chart)
        self.timer = QTimer(self)
        self.timer.timeout.connect(self.update_metrics)
        self.timer.start(1000)

    # -----------------------
    # Engine -> UI
    # -----------------------

    def _set_phase_scale(self, scale: float):
        f = QFont(self.phase_lbl.font())
        f.setPixelSize(max(8, int(PHASE_FONT_PX * scale)))
        self.phase_lbl.setFont(f)

    def _on_phase(self, phase: str, cycle_count: int):
        self.phase_lbl.setText(phase_label(phase))
        target = self.pattern.recommended_cycles
        self.cycle_lbl.setText(f"Cycle {cycle_count + 1} of {target}")

    def _on_frame(self, progress: float, entropy: float, scale: float):
        self.phase_bar.setValue(int(progress * 1000))
        self._set_phase_scale(scale)
        self.entropy_bar.setValue(int(max(0.0, min(1.0, entropy)) * 100))

    def update_metrics(self):
        try:
            st = self.engine.kernel.get_state()
            b = st.belief
            self.belief_values["arousal"].setText(f"{int(b.arousal * 100)}%")
            self.belief_values["attention"].setText(f"{int(b.attention * 100)}%")
            self.belief_values["rhythm_alignment"].setText(f"{int(b.rhythm_alignment * 100)}%")
            self.elapsed_lbl.setText(f"Elapsed {fmt_duration(st.session_duration)}")

            self.entropy_bar.setStyleSheet(
                f"QProgressBar::chunk {{ background: {entropy_color(st.entropy)}; }}"
            )

            self.trend_hist.append(float(st.entropy))
            self.trend_curve.setData(self.x_hist, list(self.trend_hist))
        except Exception as e:
            print("[Tidebreath] Session update error:", repr(e))

    # -----------------------
    # Commands
    # -----------------------

    def toggle_pause(self):
        if self._ended:
            return
        if self._paused:
            self.engine.resume()
            self._paused = False
            self.pause_btn.setText("Pause")
            self.paused_lbl.hide()
        else:
            self.engine.pause()
            self._paused = True
            self.pause_btn.setText("Resume")
            self.paused_lbl.show()

    def _on_safety_locked(self, action: str):
        if self._ended:
            return
        show_safety_popup(action)
        self.end_session(ended_by="safety", action=action)

    def end_session(self, ended_by: str = "user", action: str = ""):
        if self._ended:
            return
        self._ended = True

        if self.timer.isActive():
            self.timer.stop()

        final = self.engine.stop(reason="safety" if ended_by == "safety" else "user")
        self._disconnect_engine()

        summary = {
            "duration_s": int(final.session_duration),
            "pattern_id": self.pattern.id,
            "pattern_label": self.pattern.label,
            "cycles": int(final.cycle_count),
            "final_belief": final.belief.as_dict(),
            "final_entropy": float(final.entropy),
            "ended_by": ended_by,
            "safety_action": action,
        }

        try:
            self.store.append_from_summary(summary)
        except Exception as e:
            print("[Tidebreath] Could not save session:", repr(e))

        self.on_end(summary, final)

    def _disconnect_engine(self):
        # the engine outlives this screen; one screen per session
        try:
            self.engine.phase_changed.disconnect(self._on_phase)
            self.engine.frame_changed.disconnect(self._on_frame)
            self.engine.safety_locked.disconnect(self._on_safety_locked)
        except (RuntimeError, TypeError) as e:
            print("[Tidebreath] Signal disconnect:", repr(e))

    def closeEvent(self, event):
        try:
            if self.timer.isActive():
                self.timer.stop()
            if not self._ended:
                self._ended = True
                if self.engine.is_active:
                    self.engine.stop(reason="closed")
                self._disconnect_engine()
        finally:
            super().closeEvent(event)
