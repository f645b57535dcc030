# tidebreath/kernel/inference.py
from __future__ import annotations

from tidebreath.kernel.types import Belief, Observation, clamp01

# per-second rates
IDLE_DECAY = (0.10, 0.20, 0.10)           # arousal, attention, rhythm -> 0
INTERRUPTED = (+0.30, -0.50, -0.40)
FLOW = (-0.05, +0.10, +0.20)

RHYTHM_SUPPRESSION = 0.8


def is_interrupted(obs: Observation) -> bool:
    return obs.visibility == "hidden" or obs.user_interaction == "pause"


def update(belief: Belief, obs: Observation, is_running: bool) -> Belief:
    """
    Next belief from the current one and a point-in-time observation.

    Pure and deterministic: identical inputs always give identical output,
    so a recorded tick stream can be replayed exactly.
    """
    dt = max(0.0, float(obs.delta_time))

    if not is_running:
        da, dn, dr = IDLE_DECAY
        return Belief(
            arousal=clamp01(belief.arousal - da * dt),
            attention=clamp01(belief.attention - dn * dt),
            rhythm_alignment=clamp01(belief.rhythm_alignment - dr * dt),
        )

    da, dn, dr = INTERRUPTED if is_interrupted(obs) else FLOW
    return Belief(
        arousal=clamp01(belief.arousal + da * dt),
        attention=clamp01(belief.attention + dn * dt),
        rhythm_alignment=clamp01(belief.rhythm_alignment + dr * dt),
    )


def entropy(belief: Belief) -> float:
    # Alignment suppresses at most 80% of arousal; an aligned but aroused
    # user keeps some residual entropy.
    return clamp01(belief.arousal * (1.0 - belief.rhythm_alignment * RHYTHM_SUPPRESSION))
