import pytest

from tidebreath.core.patterns import PATTERNS
from tidebreath.kernel import safety
from tidebreath.kernel.types import Belief, RuntimeState, TrustRecord


def _state(pattern_id, cycles=0, arousal=0.2, rhythm=0.0):
    p = PATTERNS[pattern_id]
    return RuntimeState(
        status="RUNNING",
        pattern=p,
        phase="inhale",
        phase_duration=p.duration("inhale"),
        cycle_count=cycles,
        belief=Belief(arousal=arousal, attention=0.5, rhythm_alignment=rhythm),
    )


def test_no_pattern_no_intervention():
    assert safety.check(RuntimeState(), {}) is None


def test_watchdog_forces_cooldown_on_long_fast_tier_two_session():
    hazard = safety.check(_state("awake", cycles=31, arousal=0.95), {}, now=12.0)
    assert hazard is not None
    assert hazard.action == "COOLDOWN_FORCED"
    assert hazard.risk_level == pytest.approx(0.8)
    assert hazard.timestamp == 12.0


@pytest.mark.parametrize(
    "pattern_id,cycles,arousal",
    [
        ("awake", 30, 0.95),      # cycle count must exceed 30
        ("awake", 31, 0.9),       # arousal must exceed 0.9
        ("box", 40, 0.99),        # tier 1 is exempt
        ("wim-hof", 40, 0.99),    # tier 3 is exempt
    ],
)
def test_watchdog_boundaries(pattern_id, cycles, arousal):
    assert safety.check(_state(pattern_id, cycles=cycles, arousal=arousal), {}) is None


def test_low_trust_guard_needs_high_entropy():
    registry = {"box": TrustRecord(pattern_id="box", resonance_score=0.2)}
    assert safety.check(_state("box", arousal=0.8), registry) is None
    hazard = safety.check(_state("box", arousal=0.85), registry)
    assert hazard.action == "HALT_PREVENTATIVE"


def test_trusted_pattern_is_not_halted():
    registry = {"box": TrustRecord(pattern_id="box", resonance_score=0.3)}
    assert safety.check(_state("box", arousal=1.0), registry) is None


def test_rhythm_alignment_can_keep_entropy_under_threshold():
    registry = {"box": TrustRecord(pattern_id="box", resonance_score=0.1)}
    # 1.0 * (1 - 0.8 * 0.5) = 0.6
    assert safety.check(_state("box", arousal=1.0, rhythm=0.5), registry) is None


def test_trust_guard_wins_over_watchdog():
    registry = {"awake": TrustRecord(pattern_id="awake", resonance_score=0.0)}
    hazard = safety.check(_state("awake", cycles=31, arousal=0.95), registry)
    assert hazard.action == "HALT_PREVENTATIVE"
    assert hazard.risk_level == pytest.approx(0.9)
