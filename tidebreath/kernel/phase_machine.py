# tidebreath/kernel/phase_machine.py
from __future__ import annotations

from typing import Tuple

from tidebreath.kernel.types import Pattern, Phase

PHASE_ORDER: Tuple[Phase, ...] = ("inhale", "hold_in", "exhale", "hold_out")


def next_phase(current: Phase, pattern: Pattern) -> Phase:
    """
    Next phase in the fixed cycle, skipping zero-duration phases.
    Wraps at most once, so the walk can land back on `current`.
    """
    i = PHASE_ORDER.index(current)
    for step in range(1, len(PHASE_ORDER) + 1):
        candidate = PHASE_ORDER[(i + step) % len(PHASE_ORDER)]
        if pattern.duration(candidate) > 0:
            return candidate

    # all-zero pattern (never in the catalog)
    return "inhale"


def is_cycle_boundary(phase: Phase) -> bool:
    # entering inhale closes a cycle
    return phase == "inhale"
