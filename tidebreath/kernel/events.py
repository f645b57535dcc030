# tidebreath/kernel/events.py
from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import ClassVar, Literal, Union

from tidebreath.kernel.types import Phase


def _now() -> float:
    return time.time()


@dataclass(frozen=True)
class Boot:
    tag: ClassVar[str] = "BOOT"
    timestamp: float = field(default_factory=_now)


@dataclass(frozen=True)
class LoadProtocol:
    tag: ClassVar[str] = "LOAD_PROTOCOL"
    pattern_id: str
    timestamp: float = field(default_factory=_now)


@dataclass(frozen=True)
class StartSession:
    tag: ClassVar[str] = "START_SESSION"
    timestamp: float = field(default_factory=_now)


@dataclass(frozen=True)
class Tick:
    """Heartbeat. dt is seconds since the previous tick."""
    tag: ClassVar[str] = "TICK"
    dt: float
    timestamp: float = field(default_factory=_now)


@dataclass(frozen=True)
class PhaseTransition:
    tag: ClassVar[str] = "PHASE_TRANSITION"
    from_phase: Phase
    to_phase: Phase
    timestamp: float = field(default_factory=_now)


@dataclass(frozen=True)
class CycleComplete:
    tag: ClassVar[str] = "CYCLE_COMPLETE"
    count: int
    timestamp: float = field(default_factory=_now)


@dataclass(frozen=True)
class UserInterruption:
    tag: ClassVar[str] = "USER_INTERRUPTION"
    kind: Literal["pause", "background"] = "pause"
    timestamp: float = field(default_factory=_now)


@dataclass(frozen=True)
class ResumeSession:
    tag: ClassVar[str] = "RESUME_SESSION"
    timestamp: float = field(default_factory=_now)


@dataclass(frozen=True)
class Halt:
    tag: ClassVar[str] = "HALT"
    reason: str = ""
    timestamp: float = field(default_factory=_now)


@dataclass(frozen=True)
class SafetyIntervention:
    tag: ClassVar[str] = "SAFETY_INTERVENTION"
    risk_level: float
    action: str
    timestamp: float = field(default_factory=_now)


KernelEvent = Union[
    Boot,
    LoadProtocol,
    StartSession,
    Tick,
    PhaseTransition,
    CycleComplete,
    UserInterruption,
    ResumeSession,
    Halt,
    SafetyIntervention,
]
