# tidebreath/ui/settings.py

from dataclasses import replace

from PySide6.QtWidgets import (
    QWidget, QVBoxLayout, QLabel, QFrame, QHBoxLayout, QPushButton,
    QFormLayout, QCheckBox, QComboBox
)
from PySide6.QtCore import Qt

from tidebreath.core.settings_store import (
    AUDIO_QUALITIES, HAPTIC_STRENGTHS, SOUND_PACKS, UserSettings
)
from tidebreath.core.storage import SessionStore
from tidebreath.engine.cues import CUE_PACKS
from tidebreath.ui.prefs import reset_onboarding
from tidebreath.ui.style import card_qss


def card() -> QFrame:
    f = QFrame()
    f.setStyleSheet(card_qss())
    return f


def _combo(values, current: str, labels=None) -> QComboBox:
    cb = QComboBox()
    for v in values:
        cb.addItem((labels or {}).get(v, v.capitalize()), v)
    idx = cb.findData(current)
    cb.setCurrentIndex(max(0, idx))
    return cb


class SettingsScreen(QWidget):
    """
    Preferences only. Streak and trust history live in the same file but
    are never edited here; save keeps them as they are.
    """

    def __init__(self, on_back, get_settings, on_save, haptics_available: bool = True):
        super().__init__()
        self.on_back = on_back
        self.get_settings = get_settings   # () -> UserSettings
        self.on_save = on_save             # (UserSettings) -> None

        root = QVBoxLayout(self)
        root.setContentsMargins(22, 20, 22, 20)
        root.setSpacing(12)

        header = QHBoxLayout()
        title = QLabel("Settings")
        title.setStyleSheet("font-size: 24px; font-weight: 800;")
        header.addWidget(title, 1)

        back = QPushButton("Back")
        back.setCursor(Qt.PointingHandCursor)
        back.clicked.connect(self.on_back)
        header.addWidget(back, 0, Qt.AlignRight)
        root.addLayout(header)

        subtitle = QLabel("Cues and display. Changes apply from the next phase of a running session.")
        subtitle.setObjectName("muted")
        subtitle.setWordWrap(True)
        root.addWidget(subtitle)

        # ---- Preferences form
        c = card()
        root.addWidget(c)

        wrap = QVBoxLayout(c)
        wrap.setContentsMargins(16, 14, 16, 14)

        form = QFormLayout()
        form.setHorizontalSpacing(18)
        form.setVerticalSpacing(12)
        wrap.addLayout(form)

        s = self.get_settings()
        self.sound_enabled = QCheckBox()
        self.sound_pack = _combo(SOUND_PACKS, s.sound_pack, CUE_PACKS)
        self.audio_quality = _combo(AUDIO_QUALITIES, s.audio_quality)
        self.haptic_enabled = QCheckBox()
        self.haptic_strength = _combo(HAPTIC_STRENGTHS, s.haptic_strength)
        self.show_timer = QCheckBox()

        form.addRow("Sound cues", self.sound_enabled)
        form.addRow("Sound pack", self.sound_pack)
        form.addRow("Audio quality", self.audio_quality)
        form.addRow("Haptic cues", self.haptic_enabled)
        form.addRow("Haptic strength", self.haptic_strength)
        form.addRow("Show cycle counter and progress", self.show_timer)

        if not haptics_available:
            form.setRowVisible(self.haptic_enabled, False)
            form.setRowVisible(self.haptic_strength, False)
            note = QLabel("Haptic cues need a device that can vibrate. None is connected.")
            note.setObjectName("muted")
            note.setWordWrap(True)
            wrap.addWidget(note)

        btns = QHBoxLayout()
        btns.addStretch(1)

        reset = QPushButton("Reset defaults")
        reset.setCursor(Qt.PointingHandCursor)
        reset.clicked.connect(self._reset)

        save = QPushButton("Save")
        save.setCursor(Qt.PointingHandCursor)
        save.clicked.connect(self._save)

        btns.addWidget(reset)
        btns.addWidget(save)
        wrap.addSpacing(10)
        wrap.addLayout(btns)

        # ---- Data
        data = card()
        root.addWidget(data)
        dwrap = QVBoxLayout(data)
        dwrap.setContentsMargins(16, 14, 16, 14)
        dwrap.setSpacing(10)

        dtitle = QLabel("Data")
        dtitle.setStyleSheet("font-size: 16px; font-weight: 850;")
        dwrap.addWidget(dtitle)

        self.data_status = QLabel("")
        self.data_status.setObjectName("muted")

        drow = QHBoxLayout()
        onboarding = QPushButton("Show disclaimer again")
        onboarding.setCursor(Qt.PointingHandCursor)
        onboarding.clicked.connect(self._reset_onboarding)

        clear = QPushButton("Clear session history")
        clear.setCursor(Qt.PointingHandCursor)
        clear.clicked.connect(self._clear_history)
        clear.setStyleSheet("""
            QPushButton {
                background: rgba(239,68,68,0.14);
                border: 1px solid rgba(239,68,68,0.28);
                border-radius: 12px;
                padding: 10px 14px;
                font-weight: 850;
            }
            QPushButton:hover { background: rgba(239,68,68,0.20); }
            QPushButton:pressed { background: rgba(239,68,68,0.26); }
        """)

        drow.addWidget(onboarding)
        drow.addWidget(clear)
        drow.addStretch(1)
        dwrap.addLayout(drow)
        dwrap.addWidget(self.data_status)

        root.addStretch(1)

        self._load_into_ui(s)

    def showEvent(self, event):
        super().showEvent(event)
        self.data_status.setText("")
        self._load_into_ui(self.get_settings())

    def _load_into_ui(self, s: UserSettings):
        self.sound_enabled.setChecked(bool(s.sound_enabled))
        self.sound_pack.setCurrentIndex(max(0, self.sound_pack.findData(s.sound_pack)))
        self.audio_quality.setCurrentIndex(max(0, self.audio_quality.findData(s.audio_quality)))
        self.haptic_enabled.setChecked(bool(s.haptic_enabled))
        self.haptic_strength.setCurrentIndex(max(0, self.haptic_strength.findData(s.haptic_strength)))
        self.show_timer.setChecked(bool(s.show_timer))

    def _read_from_ui(self, base: UserSettings) -> UserSettings:
        return replace(
            base,
            sound_enabled=self.sound_enabled.isChecked(),
            sound_pack=str(self.sound_pack.currentData()),
            audio_quality=str(self.audio_quality.currentData()),
            haptic_enabled=self.haptic_enabled.isChecked(),
            haptic_strength=str(self.haptic_strength.currentData()),
            show_timer=self.show_timer.isChecked(),
        )

    def _save(self):
        self.on_save(self._read_from_ui(self.get_settings()))
        self.on_back()

    def _reset(self):
        current = self.get_settings()
        defaults = replace(
            UserSettings(),
            streak=current.streak,
            last_breath_date=current.last_breath_date,
            last_used_pattern=current.last_used_pattern,
            trust_registry=current.trust_registry,
        )
        self._load_into_ui(defaults)
        self.on_save(defaults)

    def _reset_onboarding(self):
        reset_onboarding()
        self.data_status.setText("The disclaimer will show on next launch.")

    def _clear_history(self):
        try:
            SessionStore().clear()
            self.data_status.setText("Session history cleared.")
        except OSError as e:
            print("[Tidebreath] Could not clear history:", repr(e))
            self.data_status.setText("Could not clear history.")
