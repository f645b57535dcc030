# tidebreath/engine/heartbeat.py
from __future__ import annotations

import time
from typing import Callable, Optional

from PySide6.QtCore import QObject, QTimer, Signal

from tidebreath.core.logger import SessionLogger
from tidebreath.core.settings_store import UserSettings
from tidebreath.engine.bridge import CueSink, HapticSink, KernelBridge
from tidebreath.kernel.events import (
    Halt,
    LoadProtocol,
    ResumeSession,
    SafetyIntervention,
    StartSession,
    Tick,
    UserInterruption,
)
from tidebreath.kernel.kernel import BreathKernel
from tidebreath.kernel.types import RuntimeState

HEARTBEAT_MS = 16       # ~one tick per frame
MAX_TICK_DT = 1.0       # longer gaps (sleep, suspend) are dropped, not integrated
TELEMETRY_EVERY_S = 1.0


class UnknownPattern(ValueError):
    pass


class BreathEngine(QObject):
    """
    Drives the kernel from the GUI thread.

    Commands: start / pause / resume / stop.
    Signals are the low-frequency UI surface; frame_changed is per tick.
    """

    phase_changed = Signal(str, int)               # phase, cycle_count
    frame_changed = Signal(float, float, float)    # progress, entropy, scale
    safety_locked = Signal(str)                    # intervention action

    def __init__(
        self,
        kernel: BreathKernel,
        settings_provider: Callable[[], UserSettings],
        cue_player: Optional[CueSink] = None,
        haptics: Optional[HapticSink] = None,
        log_dir: str = "logs",
    ):
        super().__init__()
        self.kernel = kernel
        self.cue_player = cue_player
        self.log_dir = log_dir

        self.bridge = KernelBridge(
            settings_provider,
            cue_sink=cue_player,
            haptic_sink=haptics,
            on_sync=self._on_sync,
            on_safety_lock=self._on_safety_lock,
        )

        self.timer = QTimer(self)
        self.timer.setInterval(HEARTBEAT_MS)
        self.timer.timeout.connect(self._beat)

        self._last_beat = 0.0
        self._since_log = 0.0
        self.logger: Optional[SessionLogger] = None

        self._unsubscribe = kernel.subscribe(self._on_state)

    # -----------------------
    # Commands
    # -----------------------

    def start(self, pattern_id: str) -> None:
        if pattern_id not in self.kernel.catalog:
            raise UnknownPattern(f"Unknown breathing pattern: {pattern_id!r}")

        self.bridge.reset()
        self.kernel.dispatch(LoadProtocol(pattern_id=pattern_id))
        self.kernel.dispatch(StartSession())

        try:
            self.logger = SessionLogger(self.log_dir)
        except Exception as e:
            self.logger = None
            print("[Tidebreath] Session log unavailable:", repr(e))

        self._since_log = 0.0
        self._last_beat = time.monotonic()
        self.timer.start()

    def pause(self) -> None:
        self.kernel.dispatch(UserInterruption(kind="pause"))

    def resume(self) -> None:
        self.kernel.dispatch(ResumeSession())

    def stop(self, reason: str = "user") -> RuntimeState:
        """Halts the session; returns the state just before the halt."""
        final = self.kernel.get_state()

        if self.timer.isActive():
            self.timer.stop()

        if self.logger is not None:
            try:
                self.logger.log(final)
            except Exception as e:
                print("[Tidebreath] Session log error:", repr(e))
            self.logger.close()
            self.logger = None

        if self.cue_player is not None and hasattr(self.cue_player, "stop"):
            self.cue_player.stop()

        self.kernel.dispatch(Halt(reason=reason))
        self.bridge.reset()
        return final

    def shutdown(self) -> None:
        if self.timer.isActive():
            self.stop("shutdown")
        self._unsubscribe()

    @property
    def is_active(self) -> bool:
        return self.timer.isActive()

    @property
    def has_haptics(self) -> bool:
        return self.bridge.haptic_sink is not None

    # -----------------------
    # Heartbeat
    # -----------------------

    def _beat(self) -> None:
        now = time.monotonic()
        dt = now - self._last_beat
        self._last_beat = now

        if not (0.0 < dt < MAX_TICK_DT):
            return

        self.kernel.dispatch(Tick(dt=dt))

        self._since_log += dt
        if self._since_log >= TELEMETRY_EVERY_S and self.logger is not None:
            self._since_log = 0.0
            try:
                self.logger.log(self.kernel.get_state())
            except Exception as e:
                print("[Tidebreath] Session log error:", repr(e))

    # -----------------------
    # Kernel -> Qt
    # -----------------------

    def _on_state(self, state: RuntimeState) -> None:
        self.bridge.on_state(state)
        f = self.bridge.frame
        self.frame_changed.emit(f.progress, f.entropy, f.scale)

    def _on_sync(self, phase: str, cycle_count: int) -> None:
        self.phase_changed.emit(phase, cycle_count)

    def _on_safety_lock(self, state: RuntimeState) -> None:
        action = ""
        for event in reversed(self.kernel.event_log):
            if isinstance(event, SafetyIntervention):
                action = event.action
                break
        print(f"[Tidebreath] Safety intervention: {action or 'unknown'}")
        # leave the dispatch before the UI tears the session down
        QTimer.singleShot(0, lambda: self.safety_locked.emit(action))
