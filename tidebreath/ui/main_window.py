# tidebreath/ui/main_window.py
import sys
import time
from datetime import date
from pathlib import Path

from PySide6.QtWidgets import (
    QApplication,
    QMainWindow,
    QStackedWidget,
    QWidget,
    QVBoxLayout,
    QGraphicsDropShadowEffect,
)
from PySide6.QtCore import Qt, QRectF, QStandardPaths
from PySide6.QtGui import QPainterPath, QRegion, QGuiApplication

from tidebreath.core.patterns import get_pattern, is_pattern_locked
from tidebreath.core.settings_store import SettingsStore, UserSettings
from tidebreath.core.storage import SessionStore
from tidebreath.core.trust import register_session_complete
from tidebreath.engine.audio_out import QtCuePlayer
from tidebreath.engine.heartbeat import BreathEngine, UnknownPattern
from tidebreath.kernel.kernel import BreathKernel
from tidebreath.kernel.types import RuntimeState

from tidebreath.ui.style import APP_QSS
from tidebreath.ui.titlebar import TitleBar
from tidebreath.ui.splash import SplashDisclaimer
from tidebreath.ui.presession import PatternPickerScreen
from tidebreath.ui.session import SessionScreen
from tidebreath.ui.settings import SettingsScreen
from tidebreath.ui.summary import SummaryScreen
from tidebreath.ui.history import SessionHistoryScreen
from tidebreath.ui.session_detail import SessionDetailScreen
from tidebreath.ui.prefs import has_seen_onboarding, mark_onboarding_seen


def _log_dir() -> str:
    base = Path(QStandardPaths.writableLocation(QStandardPaths.AppDataLocation))
    return str(base / "logs")


# ==================================================
# Main Window
# ==================================================
class MainWindow(QMainWindow):
    def __init__(self):
        super().__init__()

        self.setWindowTitle("Tidebreath")
        self.resize(980, 700)

        self.setWindowFlag(Qt.FramelessWindowHint, True)
        self.setAttribute(Qt.WA_TranslucentBackground, True)

        self._radius = 18
        self._shadow_margin = 22

        outer = QWidget()
        outer.setAttribute(Qt.WA_TranslucentBackground, True)

        outer_layout = QVBoxLayout(outer)
        outer_layout.setContentsMargins(
            self._shadow_margin,
            self._shadow_margin,
            self._shadow_margin,
            self._shadow_margin,
        )
        outer_layout.setSpacing(0)

        self.container = QWidget()
        self.container.setObjectName("appContainer")
        self.container.setStyleSheet(f"""
            QWidget#appContainer {{
                background: rgba(10, 13, 18, 0.96);
                border-radius: {self._radius}px;
            }}
        """)

        shadow = QGraphicsDropShadowEffect(self)
        shadow.setBlurRadius(42)
        shadow.setOffset(0, 10)
        shadow.setColor(Qt.black)
        self.container.setGraphicsEffect(shadow)

        container_layout = QVBoxLayout(self.container)
        container_layout.setContentsMargins(12, 12, 12, 12)
        container_layout.setSpacing(10)

        self.stack = QStackedWidget()
        self.stack.setStyleSheet("""
            QStackedWidget {
                background: rgba(255,255,255,0.02);
                border: 1px solid rgba(255,255,255,0.06);
                border-radius: 14px;
            }
        """)

        # --- Persistence
        self.settings_store = SettingsStore()
        self.user_settings: UserSettings = self.settings_store.load()
        self.session_store = SessionStore()

        # --- Kernel + engine (one per app)
        self.kernel = BreathKernel(visibility=self._visibility)
        self.kernel.set_safety_registry(self.user_settings.trust_registry)

        self.cue_player = QtCuePlayer(lambda: self.user_settings.audio_quality)
        self.engine = BreathEngine(
            self.kernel,
            settings_provider=lambda: self.user_settings,
            cue_player=self.cue_player,
            log_dir=_log_dir(),
        )

        self.titlebar = TitleBar(
            self,
            "Tidebreath",
            on_history=self.go_history,
            on_settings=self.go_settings,
        )
        self.titlebar.set_streak(self.user_settings.streak)

        container_layout.addWidget(self.titlebar)
        container_layout.addWidget(self.stack)
        outer_layout.addWidget(self.container)
        self.setCentralWidget(outer)

        # Screens
        self.splash = SplashDisclaimer(on_continue=self.finish_onboarding)
        self.picker = PatternPickerScreen(
            on_start=self.go_session,
            completed_sessions=self.session_store.count,
            initial_pattern_id=self.user_settings.last_used_pattern,
        )

        self.settings = SettingsScreen(
            on_back=self.go_picker,
            get_settings=lambda: self.user_settings,
            on_save=self.apply_settings,
            haptics_available=self.engine.has_haptics,
        )
        self.summary = SummaryScreen(on_done=self.go_picker)

        self.history = SessionHistoryScreen(
            on_back=self.go_picker,
            on_new_session=self.go_picker,
            on_open_detail=self.open_session_detail,
        )

        self.detail = SessionDetailScreen(on_back=self.go_history)
        self.session = None

        for w in (
            self.splash,
            self.picker,
            self.settings,
            self.summary,
            self.history,
            self.detail,
        ):
            self.stack.addWidget(w)

        if has_seen_onboarding():
            self.go_picker()
        else:
            self.stack.setCurrentWidget(self.splash)
            self.titlebar.set_nav_enabled(False)

        self._place_safely()

    # -----------------------
    # Kernel ports
    # -----------------------
    def _visibility(self) -> str:
        if self.isMinimized() or not self.isVisible():
            return "hidden"
        return "visible"

    def apply_settings(self, settings: UserSettings):
        self.user_settings = settings
        try:
            self.settings_store.save(settings)
        except OSError as e:
            print("[Tidebreath] Could not save settings:", repr(e))

    # -----------------------
    # Navigation
    # -----------------------
    def finish_onboarding(self):
        mark_onboarding_seen()
        self.go_picker()

    def go_picker(self, *_):
        self.titlebar.set_nav_enabled(True)
        self.stack.setCurrentWidget(self.picker)

    def go_session(self, pattern_id: str):
        pattern = get_pattern(pattern_id)
        if pattern is None or is_pattern_locked(pattern, self.session_store.count()):
            print(f"[Tidebreath] Pattern not available: {pattern_id}")
            return

        self.titlebar.set_nav_enabled(False)

        if self.session:
            self.stack.removeWidget(self.session)
            self.session.deleteLater()

        self.session = SessionScreen(
            engine=self.engine,
            pattern=pattern,
            settings=self.user_settings,
            on_end=self.go_summary,
        )

        self.stack.addWidget(self.session)
        self.stack.setCurrentWidget(self.session)

        try:
            self.engine.start(pattern_id)
        except UnknownPattern as e:
            print("[Tidebreath] Could not start session:", repr(e))
            self.go_picker()

    def go_summary(self, summary: dict, final_state: RuntimeState):
        updated = register_session_complete(
            self.user_settings,
            summary["pattern_id"],
            float(final_state.session_duration),
            final_state,
            today=date.today(),
            now=time.time(),
        )
        self.apply_settings(updated)
        self.kernel.set_safety_registry(updated.trust_registry)
        self.titlebar.set_streak(updated.streak)

        self.summary.set_summary(summary, streak=updated.streak)
        self.titlebar.set_nav_enabled(True)
        self.stack.setCurrentWidget(self.summary)

    def go_history(self, *_):
        if self.engine.is_active:
            return
        self.history.refresh()
        self.stack.setCurrentWidget(self.history)

    def open_session_detail(self, item: dict):
        self.detail.set_record(item)
        self.stack.setCurrentWidget(self.detail)

    def go_settings(self):
        if self.engine.is_active:
            return
        self.stack.setCurrentWidget(self.settings)

    # Window shape & shutdown
    def _place_safely(self):
        screen = QGuiApplication.primaryScreen()
        if screen:
            g = screen.availableGeometry()
            self.move(g.x() + 80, g.y() + 80)

    def _apply_rounded_mask(self):
        w, h = self.width(), self.height()
        m, r = self._shadow_margin, self._radius
        rect = QRectF(m, m, w - 2 * m, h - 2 * m)
        path = QPainterPath()
        path.addRoundedRect(rect, r, r)
        self.setMask(QRegion(path.toFillPolygon().toPolygon()))

    def showEvent(self, event):
        super().showEvent(event)
        self._apply_rounded_mask()

    def resizeEvent(self, event):
        super().resizeEvent(event)
        self._apply_rounded_mask()

    def closeEvent(self, event):
        try:
            if self.session is not None and self.engine.is_active:
                self.session.end_session()
        except Exception as e:
            print("[Tidebreath] Could not end session on close:", repr(e))

        self.engine.shutdown()
        self.kernel.close()
        super().closeEvent(event)


def launch_app():
    app = QApplication(sys.argv)
    app.setOrganizationName("Tidebreath")
    app.setApplicationName("Tidebreath")
    app.setStyleSheet(APP_QSS)
    window = MainWindow()
    window.show()
    sys.exit(app.exec())
