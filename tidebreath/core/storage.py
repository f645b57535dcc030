import json
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from PySide6.QtCore import QStandardPaths

MAX_HISTORY = 100
MIN_RECORDED_DURATION_S = 10


def _app_data_dir() -> Path:
    base = QStandardPaths.writableLocation(QStandardPaths.AppDataLocation)
    p = Path(base)
    p.mkdir(parents=True, exist_ok=True)
    return p


def sessions_path() -> Path:
    return _app_data_dir() / "sessions.json"


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass
class SessionRecord:
    timestamp_utc: str
    duration_s: int
    pattern_id: str
    cycles: int
    final_belief: Dict[str, float] = field(default_factory=dict)
    final_entropy: float = 0.0
    ended_by: str = "user"   # user | safety
    version: int = 1


class SessionStore:
    def __init__(self, path: Optional[Path] = None):
        self.path = path or sessions_path()

    def load(self) -> List[Dict[str, Any]]:
        if not self.path.exists():
            return []
        try:
            with self.path.open("r", encoding="utf-8") as f:
                data = json.load(f)
            return data if isinstance(data, list) else []
        except Exception:
            return []

    def count(self) -> int:
        return len(self.load())

    def append(self, record: SessionRecord) -> None:
        items = self.load()
        items.append(asdict(record))
        items = items[-MAX_HISTORY:]

        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(".tmp")
        with tmp.open("w", encoding="utf-8") as f:
            json.dump(items, f, ensure_ascii=False, indent=2)
        tmp.replace(self.path)

    def append_from_summary(self, summary: Dict[str, Any]) -> bool:
        """Returns False when the session was too short to keep."""
        duration_s = int(summary.get("duration_s", 0))
        if duration_s <= MIN_RECORDED_DURATION_S:
            return False

        rec = SessionRecord(
            timestamp_utc=_now_iso(),
            duration_s=duration_s,
            pattern_id=str(summary.get("pattern_id", "")),
            cycles=int(summary.get("cycles", 0)),
            final_belief=dict(summary.get("final_belief", {})),
            final_entropy=float(summary.get("final_entropy", 0.0)),
            ended_by=str(summary.get("ended_by", "user")),
        )
        self.append(rec)
        return True

    def clear(self) -> None:
        if self.path.exists():
            self.path.unlink()
