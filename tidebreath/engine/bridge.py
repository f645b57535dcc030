# tidebreath/engine/bridge.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, List, Optional, Protocol

from tidebreath.core.settings_store import UserSettings
from tidebreath.engine.cues import CueType, haptic_pattern, phase_to_cue
from tidebreath.kernel.types import Phase, RuntimeState, clamp01


class CueSink(Protocol):
    def play(self, cue: CueType, pack: str, duration: float) -> None: ...


HapticSink = Callable[[List[int]], None]


@dataclass(frozen=True)
class Frame:
    """Visual parameters for one kernel state."""
    progress: float = 0.0   # 0..1 through the current phase
    entropy: float = 0.0
    scale: float = 1.0      # breathing scale for the phase label


def breath_scale(phase: Phase, progress: float) -> float:
    if phase == "inhale":
        return 1.0 + progress * 0.05
    if phase == "exhale":
        return 1.05 - progress * 0.05
    if phase == "hold_in":
        return 1.05
    return 1.0


class KernelBridge:
    """
    Kernel subscriber that turns states into effects:
    - Safety lock -> on_safety_lock (once per lock), nothing else
    - Frame (progress / entropy / scale) on every state
    - on_sync(phase, cycle) only when one of them actually changed
    - Audio + haptic cue when a running session enters a new phase

    Sink failures are printed and swallowed; they never reach the kernel.
    """

    def __init__(
        self,
        settings_provider: Callable[[], UserSettings],
        cue_sink: Optional[CueSink] = None,
        haptic_sink: Optional[HapticSink] = None,
        on_sync: Optional[Callable[[str, int], None]] = None,
        on_safety_lock: Optional[Callable[[RuntimeState], None]] = None,
    ):
        self.settings_provider = settings_provider
        self.cue_sink = cue_sink
        self.haptic_sink = haptic_sink
        self.on_sync = on_sync
        self.on_safety_lock = on_safety_lock

        self.frame = Frame()
        self._cued_phase: Optional[Phase] = None
        self._synced: Optional[tuple] = None
        self._locked = False

    def __call__(self, state: RuntimeState) -> None:
        self.on_state(state)

    def reset(self) -> None:
        self.frame = Frame()
        self._cued_phase = None
        self._synced = None
        self._locked = False

    def on_state(self, state: RuntimeState) -> None:
        if state.status == "SAFETY_LOCK":
            if not self._locked:
                self._locked = True
                if self.on_safety_lock is not None:
                    self.on_safety_lock(state)
            return
        self._locked = False

        denom = max(state.phase_duration, 1e-6)
        progress = clamp01(state.phase_elapsed / denom)
        self.frame = Frame(
            progress=progress,
            entropy=state.entropy,
            scale=breath_scale(state.phase, progress),
        )

        key = (state.phase, state.cycle_count)
        if key != self._synced:
            self._synced = key
            if self.on_sync is not None:
                self.on_sync(state.phase, state.cycle_count)

        if state.status == "RUNNING" and state.phase != self._cued_phase:
            self._cued_phase = state.phase
            self._fire_cues(state)

    def _fire_cues(self, state: RuntimeState) -> None:
        st = self.settings_provider()
        cue = phase_to_cue(state.phase)

        if st.haptic_enabled and self.haptic_sink is not None:
            try:
                self.haptic_sink(haptic_pattern(st.haptic_strength, cue))
            except Exception as e:
                print("[Tidebreath] Haptic error:", repr(e))

        if st.sound_enabled and self.cue_sink is not None:
            try:
                self.cue_sink.play(cue, st.sound_pack, state.phase_duration)
            except Exception as e:
                print("[Tidebreath] Cue error:", repr(e))
