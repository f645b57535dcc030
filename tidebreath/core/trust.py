# tidebreath/core/trust.py
from __future__ import annotations

from dataclasses import replace
from datetime import date, timedelta
from typing import Optional, Tuple

from tidebreath.core.settings_store import UserSettings
from tidebreath.kernel.types import RuntimeState, TrustRecord

# a session "went well" if it lasted and ended calm
SUCCESS_MIN_DURATION_S = 45
SUCCESS_MAX_ENTROPY = 0.5

RESONANCE_REWARD = 0.05
RESONANCE_PENALTY = 0.10

STREAK_MIN_DURATION_S = 30


def update_trust_record(
    record: Optional[TrustRecord],
    pattern_id: str,
    duration_s: float,
    final_entropy: float,
    now: float,
) -> TrustRecord:
    if record is None:
        record = TrustRecord(pattern_id=pattern_id, last_updated=now)

    exposure = record.total_exposure_s + float(duration_s)

    if duration_s > SUCCESS_MIN_DURATION_S and final_entropy < SUCCESS_MAX_ENTROPY:
        return replace(
            record,
            total_exposure_s=exposure,
            resonance_score=min(1.0, record.resonance_score + RESONANCE_REWARD),
            last_updated=now,
        )

    return replace(
        record,
        total_exposure_s=exposure,
        adverse_events=record.adverse_events + 1,
        resonance_score=max(0.0, record.resonance_score - RESONANCE_PENALTY),
        last_updated=now,
    )


def advance_streak(streak: int, last_date: str, duration_s: float, today: date) -> Tuple[int, str]:
    """Daily streak: counts days with at least one session longer than 30s."""
    if duration_s <= STREAK_MIN_DURATION_S:
        return streak, last_date

    today_s = today.isoformat()
    yesterday_s = (today - timedelta(days=1)).isoformat()

    if last_date == today_s:
        return streak, last_date
    if last_date == yesterday_s:
        return streak + 1, today_s
    return 1, today_s


def register_session_complete(
    settings: UserSettings,
    pattern_id: str,
    duration_s: float,
    final_state: RuntimeState,
    today: date,
    now: float,
) -> UserSettings:
    """
    Fold a finished session into the user's settings: trust record for the
    pattern, streak, last used pattern. Returns a new UserSettings; the
    caller saves it and pushes the registry into the kernel.
    """
    registry = dict(settings.trust_registry)
    registry[pattern_id] = update_trust_record(
        registry.get(pattern_id),
        pattern_id,
        duration_s,
        final_state.entropy,
        now,
    )

    streak, last_date = advance_streak(
        settings.streak, settings.last_breath_date, duration_s, today
    )

    return replace(
        settings,
        trust_registry=registry,
        streak=streak,
        last_breath_date=last_date,
        last_used_pattern=pattern_id,
    )
