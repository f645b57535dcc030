# tidebreath/ui/prefs.py

from PySide6.QtCore import QSettings

ORG = "Tidebreath"
APP = "Tidebreath"
KEY_ONBOARDING_SEEN = "ui/onboarding_seen"


def _s() -> QSettings:
    return QSettings(ORG, APP)


def has_seen_onboarding() -> bool:
    v = _s().value(KEY_ONBOARDING_SEEN, False)
    return str(v).lower() in ("1", "true")


def mark_onboarding_seen() -> None:
    _s().setValue(KEY_ONBOARDING_SEEN, True)


def reset_onboarding() -> None:
    _s().remove(KEY_ONBOARDING_SEEN)
