# tidebreath/kernel/kernel.py
from __future__ import annotations

import math
import time
from dataclasses import replace
from typing import Callable, Dict, List, Mapping, Optional, Tuple, assert_never

from tidebreath.core.patterns import PATTERNS
from tidebreath.kernel import inference, safety
from tidebreath.kernel.events import (
    Boot,
    CycleComplete,
    Halt,
    KernelEvent,
    LoadProtocol,
    PhaseTransition,
    ResumeSession,
    SafetyIntervention,
    StartSession,
    Tick,
    UserInterruption,
)
from tidebreath.kernel.phase_machine import is_cycle_boundary, next_phase
from tidebreath.kernel.types import Observation, Pattern, RuntimeState, TrustRecord, Visibility

Subscriber = Callable[[RuntimeState], None]

# One external TICK fans out to at most three follow-ups; anything deeper
# is a subscriber re-dispatching on every notification.
MAX_DISPATCH_DEPTH = 16

# Immediate belief penalty on pause
PAUSE_ATTENTION_FACTOR = 0.8
PAUSE_RHYTHM_FACTOR = 0.5


class DispatchDepthExceeded(RuntimeError):
    pass


class BreathKernel:
    """
    Breathing session kernel.

    - Event log: every dispatched event, append-only, in causal order
    - Reducer: folds each event into a new frozen RuntimeState
    - Inference model + safety guard run inside TICK reduction
    - Subscribers get the new state after every dispatch

    One instance per app, built by whoever composes the app and passed
    around explicitly. close() on shutdown.
    """

    def __init__(
        self,
        catalog: Optional[Mapping[str, Pattern]] = None,
        visibility: Optional[Callable[[], Visibility]] = None,
        clock: Optional[Callable[[], float]] = None,
    ):
        self._catalog: Mapping[str, Pattern] = PATTERNS if catalog is None else catalog
        self._visibility = visibility or (lambda: "visible")
        self._clock = clock or time.time

        self._state = RuntimeState()
        self._log: List[KernelEvent] = []
        self._subscribers: Dict[int, Subscriber] = {}
        self._next_token = 0
        self._depth = 0

        self._registry: Mapping[str, TrustRecord] = {}

        self.dispatch(Boot(timestamp=self._clock()))

    # -----------------------
    # IO ports
    # -----------------------

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        token = self._next_token
        self._next_token += 1
        self._subscribers[token] = callback
        callback(self._state)

        def unsubscribe() -> None:
            self._subscribers.pop(token, None)

        return unsubscribe

    def set_safety_registry(self, registry: Mapping[str, TrustRecord]) -> None:
        # replaced whole, never patched here
        self._registry = dict(registry)

    def get_state(self) -> RuntimeState:
        return self._state

    @property
    def event_log(self) -> Tuple[KernelEvent, ...]:
        return tuple(self._log)

    @property
    def catalog(self) -> Mapping[str, Pattern]:
        return self._catalog

    def close(self) -> None:
        self._subscribers.clear()

    # -----------------------
    # Event bus
    # -----------------------

    def dispatch(self, event: KernelEvent) -> None:
        if self._depth >= MAX_DISPATCH_DEPTH:
            raise DispatchDepthExceeded(
                f"dispatch nested {self._depth} deep while handling {event.tag}"
            )

        self._depth += 1
        try:
            self._log.append(event)
            self._reduce(event)
            self._notify()
        finally:
            self._depth -= 1

    def _notify(self) -> None:
        snapshot = self._state
        for cb in list(self._subscribers.values()):
            cb(snapshot)

    # -----------------------
    # Reducer
    # -----------------------

    def _reduce(self, event: KernelEvent) -> None:
        s = self._state

        if isinstance(event, Boot):
            return

        elif isinstance(event, LoadProtocol):
            pattern = self._catalog.get(event.pattern_id)
            if pattern is None:
                # unknown id: logged, otherwise ignored
                return
            # new protocol resets alignment but keeps arousal/attention
            self._state = replace(
                s,
                status="IDLE",
                pattern=pattern,
                phase="inhale",
                phase_elapsed=0.0,
                phase_duration=pattern.duration("inhale"),
                cycle_count=0,
                session_duration=0.0,
                belief=replace(s.belief, rhythm_alignment=0.0),
            )

        elif isinstance(event, StartSession):
            if s.pattern is not None:
                self._state = replace(s, status="RUNNING")

        elif isinstance(event, UserInterruption):
            if s.status == "RUNNING":
                self._state = replace(
                    s,
                    status="PAUSED",
                    belief=replace(
                        s.belief,
                        attention=s.belief.attention * PAUSE_ATTENTION_FACTOR,
                        rhythm_alignment=s.belief.rhythm_alignment * PAUSE_RHYTHM_FACTOR,
                    ),
                )

        elif isinstance(event, ResumeSession):
            if s.status == "PAUSED":
                self._state = replace(s, status="RUNNING")

        elif isinstance(event, Halt):
            self._state = replace(s, status="IDLE")

        elif isinstance(event, SafetyIntervention):
            self._state = replace(s, status="SAFETY_LOCK")

        elif isinstance(event, PhaseTransition):
            duration = s.pattern.duration(event.to_phase) if s.pattern else 0.0
            self._state = replace(
                s,
                phase=event.to_phase,
                phase_elapsed=0.0,
                phase_duration=duration,
            )

        elif isinstance(event, CycleComplete):
            self._state = replace(s, cycle_count=event.count)

        elif isinstance(event, Tick):
            self._handle_tick(event.dt)

        else:
            assert_never(event)

    def _handle_tick(self, dt: float) -> None:
        dt = float(dt)
        if not math.isfinite(dt) or dt < 0:
            dt = 0.0

        s = self._state
        running = s.status == "RUNNING"

        # 1) observe + infer
        obs = Observation(
            timestamp=self._clock(),
            delta_time=dt,
            visibility=self._visibility(),
            user_interaction="pause" if s.status == "PAUSED" else None,
        )
        belief = inference.update(s.belief, obs, running)
        self._state = replace(s, belief=belief)

        if not running or s.pattern is None:
            return

        # 2) advance clocks
        s = self._state
        self._state = replace(
            s,
            phase_elapsed=s.phase_elapsed + dt,
            session_duration=s.session_duration + dt,
        )

        # 3) phase logic
        if self._state.phase_elapsed >= self._state.phase_duration:
            self._transition_phase()

        # 4) safety (a subscriber may have halted us during the transition)
        if self._state.status != "RUNNING":
            return
        hazard = safety.check(self._state, self._registry, now=self._clock())
        if hazard is not None:
            self.dispatch(hazard)

    def _transition_phase(self) -> None:
        s = self._state
        if s.pattern is None:
            return

        to_phase = next_phase(s.phase, s.pattern)
        self.dispatch(PhaseTransition(from_phase=s.phase, to_phase=to_phase, timestamp=self._clock()))

        if is_cycle_boundary(to_phase):
            self.dispatch(CycleComplete(count=self._state.cycle_count + 1, timestamp=self._clock()))
