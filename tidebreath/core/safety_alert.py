from PySide6.QtCore import QObject, QTimer

from tidebreath.ui.safety_popup import SafetyPopup

ACTION_MESSAGES = {
    "HALT_PREVENTATIVE": (
        "This rhythm has been hard for you before and your breathing looks unsettled. "
        "The session was stopped. Breathe normally for a minute before trying again."
    ),
    "COOLDOWN_FORCED": (
        "You have been breathing fast for a long time. The session was stopped. "
        "Rest and let your breath return to normal."
    ),
}

DEFAULT_MESSAGE = "The session was stopped as a precaution. Breathe normally and rest."


def message_for(action: str) -> str:
    return ACTION_MESSAGES.get(action, DEFAULT_MESSAGE)


class SafetyAlerter(QObject):
    def __init__(self):
        super().__init__()
        self._popup = None  # keep reference alive

    def show_alert(self, title: str, message: str):
        if self._popup is not None and self._popup.isVisible():
            return

        def _do():
            self._popup = SafetyPopup(title=title, message=message)
            self._popup.show()
            self._popup.raise_()
        QTimer.singleShot(0, _do)


_alerter = None


def show_safety_popup(action: str):
    global _alerter
    if _alerter is None:
        _alerter = SafetyAlerter()
    try:
        _alerter.show_alert("Session stopped for your safety", message_for(action))
    except Exception as e:
        print("[Tidebreath] Safety popup error:", repr(e))
