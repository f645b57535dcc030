import pytest

from tidebreath.core.patterns import PATTERNS
from tidebreath.kernel.phase_machine import PHASE_ORDER, is_cycle_boundary, next_phase
from tidebreath.kernel.types import Pattern


def _pattern(inhale, hold_in, exhale, hold_out):
    return Pattern(
        id="t",
        label="t",
        tag="t",
        description="",
        timings={"inhale": inhale, "hold_in": hold_in, "exhale": exhale, "hold_out": hold_out},
        color_theme="neutral",
        recommended_cycles=1,
        tier=1,
    )


def test_box_walks_all_four_phases():
    box = PATTERNS["box"]
    seen = []
    phase = "inhale"
    for _ in range(4):
        phase = next_phase(phase, box)
        seen.append(phase)
    assert seen == ["hold_in", "exhale", "hold_out", "inhale"]


def test_zero_holds_are_skipped():
    calm = PATTERNS["calm"]
    assert next_phase("inhale", calm) == "exhale"
    assert next_phase("exhale", calm) == "inhale"


def test_478_skips_missing_hold_out():
    p = PATTERNS["4-7-8"]
    assert next_phase("hold_in", p) == "exhale"
    assert next_phase("exhale", p) == "inhale"


def test_single_phase_pattern_lands_on_itself():
    p = _pattern(3, 0, 0, 0)
    assert next_phase("inhale", p) == "inhale"


def test_all_zero_pattern_falls_back_to_inhale():
    p = _pattern(0, 0, 0, 0)
    for phase in PHASE_ORDER:
        assert next_phase(phase, p) == "inhale"


@pytest.mark.parametrize("pattern_id", sorted(PATTERNS))
def test_catalog_never_enters_zero_duration_phase(pattern_id):
    p = PATTERNS[pattern_id]
    for phase in PHASE_ORDER:
        assert p.duration(next_phase(phase, p)) > 0


def test_cycle_boundary_is_inhale_only():
    assert is_cycle_boundary("inhale")
    for phase in ("hold_in", "exhale", "hold_out"):
        assert not is_cycle_boundary(phase)
