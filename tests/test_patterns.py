import pytest

from tidebreath.core.patterns import (
    DEFAULT_PATTERN_ID,
    PATTERNS,
    get_pattern,
    is_pattern_locked,
)


def test_catalog_has_eleven_patterns_and_default():
    assert len(PATTERNS) == 11
    assert DEFAULT_PATTERN_ID in PATTERNS
    assert get_pattern("nope") is None


@pytest.mark.parametrize("pattern_id", sorted(PATTERNS))
def test_every_pattern_breathes_in_and_out(pattern_id):
    p = PATTERNS[pattern_id]
    assert p.id == pattern_id
    assert p.duration("inhale") > 0
    assert p.duration("exhale") > 0
    assert p.tier in (1, 2, 3)


def test_known_timings():
    assert PATTERNS["4-7-8"].timings == {"inhale": 4, "hold_in": 7, "exhale": 8, "hold_out": 0}
    assert PATTERNS["wim-hof"].duration("inhale") == 2.5


def test_tier_one_is_never_locked():
    assert not is_pattern_locked(PATTERNS["box"], 0)


def test_tier_two_unlocks_after_three_sessions():
    p = PATTERNS["coherence"]
    assert is_pattern_locked(p, 2)
    assert not is_pattern_locked(p, 3)


def test_tier_three_unlocks_after_ten_sessions():
    p = PATTERNS["buteyko"]
    assert is_pattern_locked(p, 9)
    assert not is_pattern_locked(p, 10)
