from datetime import date

import pytest

from tidebreath.core.settings_store import UserSettings
from tidebreath.core.trust import advance_streak, register_session_complete, update_trust_record
from tidebreath.kernel.types import Belief, RuntimeState, TrustRecord

TODAY = date(2026, 3, 14)


def test_new_record_rewarded_for_calm_session():
    rec = update_trust_record(None, "box", duration_s=60, final_entropy=0.2, now=100.0)
    assert rec.pattern_id == "box"
    assert rec.total_exposure_s == 60
    assert rec.adverse_events == 0
    assert rec.resonance_score == pytest.approx(0.55)
    assert rec.last_updated == 100.0


@pytest.mark.parametrize(
    "duration_s,entropy",
    [
        (45, 0.1),    # must be longer than 45s
        (120, 0.5),   # must end under 0.5
    ],
)
def test_short_or_tense_session_counts_as_adverse(duration_s, entropy):
    rec = update_trust_record(None, "box", duration_s, entropy, now=1.0)
    assert rec.adverse_events == 1
    assert rec.resonance_score == pytest.approx(0.4)


def test_resonance_is_clamped():
    high = TrustRecord(pattern_id="box", resonance_score=0.98)
    low = TrustRecord(pattern_id="box", resonance_score=0.05, adverse_events=3)
    assert update_trust_record(high, "box", 90, 0.1, 1.0).resonance_score == 1.0
    bad = update_trust_record(low, "box", 5, 0.9, 1.0)
    assert bad.resonance_score == 0.0
    assert bad.adverse_events == 4


def test_exposure_accumulates():
    rec = TrustRecord(pattern_id="box", total_exposure_s=100.0)
    assert update_trust_record(rec, "box", 50, 0.1, 1.0).total_exposure_s == 150.0


def test_streak_ignores_short_sessions():
    assert advance_streak(4, "2026-03-13", 30, TODAY) == (4, "2026-03-13")


def test_streak_same_day_unchanged():
    assert advance_streak(4, "2026-03-14", 300, TODAY) == (4, "2026-03-14")


def test_streak_continues_from_yesterday():
    assert advance_streak(4, "2026-03-13", 31, TODAY) == (5, "2026-03-14")


@pytest.mark.parametrize("last", ["", "2026-03-12", "2025-03-13"])
def test_streak_resets_after_gap(last):
    assert advance_streak(9, last, 60, TODAY) == (1, "2026-03-14")


def test_register_session_complete_returns_new_settings():
    settings = UserSettings(streak=2, last_breath_date="2026-03-13")
    final = RuntimeState(belief=Belief(arousal=0.1, attention=0.9, rhythm_alignment=0.9))

    updated = register_session_complete(settings, "calm", 90, final, today=TODAY, now=42.0)

    assert updated is not settings
    assert settings.trust_registry == {}
    assert settings.streak == 2

    assert updated.streak == 3
    assert updated.last_breath_date == "2026-03-14"
    assert updated.last_used_pattern == "calm"
    rec = updated.trust_registry["calm"]
    assert rec.resonance_score == pytest.approx(0.55)
    assert rec.last_updated == 42.0
