# tidebreath/core/settings_store.py
import json
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

from PySide6.QtCore import QStandardPaths

from tidebreath.kernel.types import TrustRecord

SOUND_PACKS = ("musical", "bells", "breath")
AUDIO_QUALITIES = ("auto", "low", "medium", "high")
HAPTIC_STRENGTHS = ("light", "medium", "heavy")


@dataclass
class UserSettings:
    sound_enabled: bool = True
    sound_pack: str = "musical"
    audio_quality: str = "auto"

    haptic_enabled: bool = True
    haptic_strength: str = "medium"

    show_timer: bool = True

    streak: int = 0
    last_breath_date: str = ""
    last_used_pattern: str = "4-7-8"

    trust_registry: Dict[str, TrustRecord] = field(default_factory=dict)


def settings_path() -> Path:
    base = Path(QStandardPaths.writableLocation(QStandardPaths.AppDataLocation))
    base.mkdir(parents=True, exist_ok=True)
    return base / "settings.json"


def _to_json(settings: UserSettings) -> Dict[str, Any]:
    data = asdict(settings)
    data["trust_registry"] = {
        pid: rec.to_dict() for pid, rec in settings.trust_registry.items()
    }
    return data


def _from_json(data: Dict[str, Any]) -> UserSettings:
    s = UserSettings()
    for k, v in data.items():
        if k == "trust_registry":
            continue
        if hasattr(s, k):
            setattr(s, k, v)

    registry = data.get("trust_registry") or {}
    if isinstance(registry, dict):
        s.trust_registry = {}
        for pid, rec in registry.items():
            if not isinstance(rec, dict):
                continue
            try:
                s.trust_registry[str(pid)] = TrustRecord.from_dict({**rec, "pattern_id": pid})
            except (TypeError, ValueError) as e:
                print(f"[Tidebreath] Dropping unreadable trust record {pid!r}:", repr(e))

    # unknown enum values fall back to defaults
    if s.sound_pack not in SOUND_PACKS:
        s.sound_pack = UserSettings.sound_pack
    if s.audio_quality not in AUDIO_QUALITIES:
        s.audio_quality = UserSettings.audio_quality
    if s.haptic_strength not in HAPTIC_STRENGTHS:
        s.haptic_strength = UserSettings.haptic_strength
    return s


class SettingsStore:
    def __init__(self, path: Optional[Path] = None):
        self.path = path or settings_path()

    def load(self) -> UserSettings:
        if not self.path.exists():
            return UserSettings()
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except Exception:
            return UserSettings()
        if not isinstance(data, dict):
            return UserSettings()
        return _from_json(data)

    def save(self, settings: UserSettings) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(".tmp")
        tmp.write_text(json.dumps(_to_json(settings), indent=2), encoding="utf-8")
        tmp.replace(self.path)
