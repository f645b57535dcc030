# tidebreath/core/patterns.py
from __future__ import annotations

from typing import Dict, Optional

from tidebreath.kernel.types import Pattern

# completed sessions needed before a tier unlocks
TIER_UNLOCK_SESSIONS = {1: 0, 2: 3, 3: 10}


def _timings(inhale: float, hold_in: float, exhale: float, hold_out: float) -> Dict[str, float]:
    return {"inhale": inhale, "hold_in": hold_in, "exhale": exhale, "hold_out": hold_out}


_CATALOG = [
    Pattern(
        id="4-7-8",
        label="Tranquility",
        tag="Sleep & Anxiety",
        description="A natural tranquilizer for the nervous system.",
        timings=_timings(4, 7, 8, 0),
        color_theme="warm",
        recommended_cycles=4,
        tier=1,
    ),
    Pattern(
        id="box",
        label="Focus",
        tag="Concentration",
        description="Equal four-count sides to steady attention under pressure.",
        timings=_timings(4, 4, 4, 4),
        color_theme="neutral",
        recommended_cycles=6,
        tier=1,
    ),
    Pattern(
        id="calm",
        label="Balance",
        tag="Coherence",
        description="A longer exhale to settle heart rate variability.",
        timings=_timings(4, 0, 6, 0),
        color_theme="cool",
        recommended_cycles=8,
        tier=1,
    ),
    Pattern(
        id="coherence",
        label="Coherence",
        tag="Heart Health",
        description="Six-second inhale and exhale, about five breaths a minute.",
        timings=_timings(6, 0, 6, 0),
        color_theme="cool",
        recommended_cycles=10,
        tier=2,
    ),
    Pattern(
        id="deep-relax",
        label="Deep Rest",
        tag="Stress Relief",
        description="Doubled exhalation to switch on the parasympathetic system.",
        timings=_timings(4, 0, 8, 0),
        color_theme="warm",
        recommended_cycles=6,
        tier=1,
    ),
    Pattern(
        id="7-11",
        label="7-11",
        tag="Deep Calm",
        description="Long, slow breaths for panic and deep anxiety.",
        timings=_timings(7, 0, 11, 0),
        color_theme="warm",
        recommended_cycles=4,
        tier=2,
    ),
    Pattern(
        id="awake",
        label="Energize",
        tag="Wake Up",
        description="Fast rhythm to lift alertness.",
        timings=_timings(4, 0, 2, 0),
        color_theme="cool",
        recommended_cycles=15,
        tier=2,
    ),
    Pattern(
        id="triangle",
        label="Triangle",
        tag="Yoga",
        description="Three equal sides for emotional stability.",
        timings=_timings(4, 4, 4, 0),
        color_theme="neutral",
        recommended_cycles=8,
        tier=1,
    ),
    Pattern(
        id="tactical",
        label="Tactical",
        tag="Advanced Focus",
        description="Extended box breathing for high-stress situations.",
        timings=_timings(5, 5, 5, 5),
        color_theme="neutral",
        recommended_cycles=5,
        tier=2,
    ),
    Pattern(
        id="buteyko",
        label="Light Air",
        tag="Health",
        description="Reduced breathing with a pause after the exhale.",
        timings=_timings(3, 0, 3, 4),
        color_theme="cool",
        recommended_cycles=12,
        tier=3,
    ),
    Pattern(
        id="wim-hof",
        label="Tummo Power",
        tag="Immunity",
        description="Controlled fast breathing. Stop if you feel dizzy.",
        timings=_timings(2.5, 0, 1.5, 0),
        color_theme="warm",
        recommended_cycles=30,
        tier=3,
    ),
]

PATTERNS: Dict[str, Pattern] = {p.id: p for p in _CATALOG}

DEFAULT_PATTERN_ID = "4-7-8"


def get_pattern(pattern_id: str) -> Optional[Pattern]:
    return PATTERNS.get(pattern_id)


def is_pattern_locked(pattern: Pattern, completed_sessions: int) -> bool:
    needed = TIER_UNLOCK_SESSIONS.get(int(pattern.tier), 0)
    return int(completed_sessions) < needed
