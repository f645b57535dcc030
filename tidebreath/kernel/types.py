# tidebreath/kernel/types.py
from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Literal, Mapping, Optional

Phase = Literal["inhale", "hold_in", "exhale", "hold_out"]
Status = Literal["IDLE", "RUNNING", "PAUSED", "HALTED", "SAFETY_LOCK"]
Visibility = Literal["visible", "hidden"]
Interaction = Literal["pause", "resume", "touch"]


def clamp01(x: float) -> float:
    return float(max(0.0, min(1.0, x)))


@dataclass(frozen=True)
class Pattern:
    id: str
    label: str
    tag: str
    description: str
    timings: Mapping[str, float]   # inhale / hold_in / exhale / hold_out, 0 = skip
    color_theme: str
    recommended_cycles: int     # advisory only
    tier: int                   # 1 safe, 2 intermediate, 3 advanced

    def __post_init__(self):
        # snapshots share the catalog entry, so timings must not be writable
        object.__setattr__(self, "timings", MappingProxyType(dict(self.timings)))

    def duration(self, phase: Phase) -> float:
        return float(self.timings.get(phase, 0.0))


@dataclass(frozen=True)
class Belief:
    arousal: float = 0.2            # 0 sleep .. 1 panic
    attention: float = 0.5          # 0 distracted .. 1 focused
    rhythm_alignment: float = 0.0   # 0 chaos .. 1 resonance

    def as_dict(self) -> Dict[str, float]:
        return {
            "arousal": self.arousal,
            "attention": self.attention,
            "rhythm_alignment": self.rhythm_alignment,
        }


@dataclass(frozen=True)
class Observation:
    timestamp: float
    delta_time: float
    visibility: Visibility = "visible"
    user_interaction: Optional[Interaction] = None


@dataclass(frozen=True)
class TrustRecord:
    """
    Per-pattern outcome history. Owned by the settings layer; the kernel
    only reads it during safety checks.
    """
    pattern_id: str
    total_exposure_s: float = 0.0
    adverse_events: int = 0
    resonance_score: float = 0.5
    last_updated: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "pattern_id": self.pattern_id,
            "total_exposure_s": self.total_exposure_s,
            "adverse_events": self.adverse_events,
            "resonance_score": self.resonance_score,
            "last_updated": self.last_updated,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TrustRecord":
        return cls(
            pattern_id=str(data.get("pattern_id", "")),
            total_exposure_s=float(data.get("total_exposure_s", 0.0)),
            adverse_events=int(data.get("adverse_events", 0)),
            resonance_score=clamp01(float(data.get("resonance_score", 0.5))),
            last_updated=float(data.get("last_updated", 0.0)),
        )


@dataclass(frozen=True)
class RuntimeState:
    """
    Authoritative session state. Frozen: the kernel replaces it on every
    reduction, so the object handed to subscribers is already a snapshot.
    """
    status: Status = "IDLE"
    pattern: Optional[Pattern] = None
    phase: Phase = "inhale"
    phase_elapsed: float = 0.0
    phase_duration: float = 0.0
    cycle_count: int = 0
    session_duration: float = 0.0
    belief: Belief = field(default_factory=Belief)

    @property
    def entropy(self) -> float:
        # derived only from belief
        from tidebreath.kernel.inference import entropy
        return entropy(self.belief)
