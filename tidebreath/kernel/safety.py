# tidebreath/kernel/safety.py
from __future__ import annotations

import time
from typing import Mapping, Optional

from tidebreath.kernel.events import SafetyIntervention
from tidebreath.kernel.types import RuntimeState, TrustRecord

# Guard A: low-trust pattern + entropy spike
TRUST_RESONANCE_MAX = 0.3
TRUST_ENTROPY_MIN = 0.8

# Guard B: hyperventilation watchdog
WATCHDOG_TIER = 2
WATCHDOG_CYCLES_MIN = 30
WATCHDOG_AROUSAL_MIN = 0.9


def check(
    state: RuntimeState,
    registry: Mapping[str, TrustRecord],
    now: Optional[float] = None,
) -> Optional[SafetyIntervention]:
    """
    Evaluate the guards in order; the first match wins.
    Returns the intervention event to dispatch, or None.
    """
    pattern = state.pattern
    if pattern is None:
        return None

    ts = time.time() if now is None else float(now)

    record = registry.get(pattern.id)
    if record is not None and record.resonance_score < TRUST_RESONANCE_MAX:
        if state.entropy > TRUST_ENTROPY_MIN:
            return SafetyIntervention(risk_level=0.9, action="HALT_PREVENTATIVE", timestamp=ts)

    if (
        pattern.tier == WATCHDOG_TIER
        and state.cycle_count > WATCHDOG_CYCLES_MIN
        and state.belief.arousal > WATCHDOG_AROUSAL_MIN
    ):
        return SafetyIntervention(risk_level=0.8, action="COOLDOWN_FORCED", timestamp=ts)

    return None
