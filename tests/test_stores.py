import csv
import json

import pytest

from tidebreath.core.logger import SessionLogger
from tidebreath.core.settings_store import SettingsStore, UserSettings
from tidebreath.core.storage import MAX_HISTORY, SessionRecord, SessionStore
from tidebreath.kernel.types import Belief, RuntimeState, TrustRecord


# -----------------------
# Settings
# -----------------------

def test_missing_settings_file_gives_defaults(tmp_path):
    s = SettingsStore(tmp_path / "settings.json").load()
    assert s == UserSettings()
    assert s.last_used_pattern == "4-7-8"


def test_settings_survive_save_and_load(tmp_path):
    store = SettingsStore(tmp_path / "settings.json")
    s = UserSettings(
        sound_pack="bells",
        haptic_enabled=False,
        streak=6,
        last_breath_date="2026-03-14",
        trust_registry={"box": TrustRecord(pattern_id="box", adverse_events=2, resonance_score=0.3)},
    )
    store.save(s)

    loaded = store.load()
    assert loaded == s
    assert not (tmp_path / "settings.tmp").exists()


def test_corrupt_settings_file_gives_defaults(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text("{not json", encoding="utf-8")
    assert SettingsStore(path).load() == UserSettings()


def test_invalid_choices_fall_back(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({
        "sound_pack": "kazoo",
        "audio_quality": "ultra",
        "haptic_strength": "medium",
        "show_timer": False,
        "unknown_key": 1,
    }), encoding="utf-8")

    s = SettingsStore(path).load()
    assert s.sound_pack == "musical"
    assert s.audio_quality == "auto"
    assert s.show_timer is False
    assert not hasattr(s, "unknown_key")


def test_trust_record_key_wins_over_stored_id(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({
        "trust_registry": {"calm": {"pattern_id": "other", "resonance_score": 7.0}},
    }), encoding="utf-8")

    rec = SettingsStore(path).load().trust_registry["calm"]
    assert rec.pattern_id == "calm"
    assert rec.resonance_score == 1.0


def test_unreadable_trust_record_is_dropped(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({
        "streak": 4,
        "trust_registry": {
            "box": {"resonance_score": "high"},
            "calm": {"adverse_events": [1]},
            "coherence": {"resonance_score": 0.2, "adverse_events": 1},
        },
    }), encoding="utf-8")

    s = SettingsStore(path).load()
    assert s.streak == 4
    assert set(s.trust_registry) == {"coherence"}
    assert s.trust_registry["coherence"].resonance_score == 0.2


# -----------------------
# History
# -----------------------

def _summary(duration_s, **kw):
    base = {
        "duration_s": duration_s,
        "pattern_id": "box",
        "cycles": 3,
        "final_belief": {"arousal": 0.1, "attention": 0.8, "rhythm_alignment": 0.7},
        "final_entropy": 0.05,
    }
    base.update(kw)
    return base


def test_empty_history(tmp_path):
    store = SessionStore(tmp_path / "sessions.json")
    assert store.load() == []
    assert store.count() == 0


def test_sessions_of_ten_seconds_or_less_are_skipped(tmp_path):
    store = SessionStore(tmp_path / "sessions.json")
    assert store.append_from_summary(_summary(10)) is False
    assert store.count() == 0

    assert store.append_from_summary(_summary(11, ended_by="safety")) is True
    items = store.load()
    assert len(items) == 1
    assert items[0]["duration_s"] == 11
    assert items[0]["pattern_id"] == "box"
    assert items[0]["ended_by"] == "safety"
    assert items[0]["final_belief"]["attention"] == pytest.approx(0.8)
    assert items[0]["timestamp_utc"]


def test_history_keeps_most_recent_entries(tmp_path):
    store = SessionStore(tmp_path / "sessions.json")
    for i in range(MAX_HISTORY + 5):
        store.append(SessionRecord(timestamp_utc=f"t{i}", duration_s=60, pattern_id="box", cycles=i))

    items = store.load()
    assert len(items) == MAX_HISTORY
    assert items[0]["cycles"] == 5
    assert items[-1]["cycles"] == MAX_HISTORY + 4


def test_clear_history(tmp_path):
    store = SessionStore(tmp_path / "sessions.json")
    store.append_from_summary(_summary(60))
    store.clear()
    assert store.count() == 0
    store.clear()


def test_non_list_history_reads_as_empty(tmp_path):
    path = tmp_path / "sessions.json"
    path.write_text(json.dumps({"oops": True}), encoding="utf-8")
    assert SessionStore(path).load() == []


# -----------------------
# Telemetry CSV
# -----------------------

def test_session_logger_writes_header_and_rows(tmp_path):
    logger = SessionLogger(str(tmp_path / "logs"))
    state = RuntimeState(status="RUNNING", cycle_count=2, belief=Belief(arousal=0.5, attention=0.4, rhythm_alignment=0.0))
    logger.log(state)
    logger.close()

    with logger.path.open(newline="", encoding="utf-8") as f:
        rows = list(csv.reader(f))

    assert rows[0] == [
        "timestamp", "status", "phase", "cycle",
        "entropy", "arousal", "attention", "rhythm_alignment",
    ]
    assert rows[1][1:4] == ["RUNNING", "inhale", "2"]
    assert float(rows[1][4]) == pytest.approx(0.5)
