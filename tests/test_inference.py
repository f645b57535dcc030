import pytest

from tidebreath.kernel import inference
from tidebreath.kernel.types import Belief, Observation


def _obs(dt, visibility="visible", interaction=None):
    return Observation(timestamp=0.0, delta_time=dt, visibility=visibility, user_interaction=interaction)


def test_flow_lowers_arousal_and_builds_rhythm():
    b = inference.update(Belief(), _obs(1.0), is_running=True)
    assert b.arousal == pytest.approx(0.15)
    assert b.attention == pytest.approx(0.6)
    assert b.rhythm_alignment == pytest.approx(0.2)


def test_hidden_window_counts_as_interruption():
    b = inference.update(Belief(), _obs(1.0, visibility="hidden"), is_running=True)
    assert b.arousal == pytest.approx(0.5)
    assert b.attention == pytest.approx(0.0)
    assert b.rhythm_alignment == pytest.approx(0.0)


def test_pause_interaction_counts_as_interruption():
    obs = _obs(0.5, interaction="pause")
    assert inference.is_interrupted(obs)
    assert not inference.is_interrupted(_obs(0.5, interaction="touch"))


def test_idle_decays_everything_towards_zero():
    start = Belief(arousal=0.5, attention=0.5, rhythm_alignment=0.5)
    b = inference.update(start, _obs(1.0), is_running=False)
    assert b.arousal == pytest.approx(0.4)
    assert b.attention == pytest.approx(0.3)
    assert b.rhythm_alignment == pytest.approx(0.4)


def test_negative_dt_is_treated_as_zero():
    start = Belief(arousal=0.3, attention=0.4, rhythm_alignment=0.5)
    assert inference.update(start, _obs(-2.0), is_running=True) == start


@pytest.mark.parametrize("running", [True, False])
@pytest.mark.parametrize("visibility", ["visible", "hidden"])
def test_belief_stays_in_unit_range_for_huge_steps(running, visibility):
    b = Belief(arousal=0.9, attention=0.1, rhythm_alignment=0.95)
    for _ in range(5):
        b = inference.update(b, _obs(100.0, visibility=visibility), is_running=running)
        for v in b.as_dict().values():
            assert 0.0 <= v <= 1.0


def test_update_is_deterministic():
    b = Belief(arousal=0.33, attention=0.71, rhythm_alignment=0.12)
    obs = _obs(0.016)
    assert inference.update(b, obs, True) == inference.update(b, obs, True)


def test_entropy_rises_with_arousal_and_falls_with_rhythm():
    low = inference.entropy(Belief(arousal=0.2, rhythm_alignment=0.0))
    high = inference.entropy(Belief(arousal=0.8, rhythm_alignment=0.0))
    aligned = inference.entropy(Belief(arousal=0.8, rhythm_alignment=1.0))
    assert low < high
    assert aligned < high
    assert aligned == pytest.approx(0.8 * 0.2)


def test_entropy_is_zero_without_arousal():
    assert inference.entropy(Belief(arousal=0.0, attention=1.0, rhythm_alignment=0.0)) == 0.0
