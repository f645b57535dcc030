import csv
from datetime import datetime
from pathlib import Path

from tidebreath.kernel.types import RuntimeState


class SessionLogger:
    """Per-session telemetry CSV, one row per sampled kernel state."""

    def __init__(self, out_dir: str = "logs"):
        Path(out_dir).mkdir(parents=True, exist_ok=True)
        ts = datetime.now().strftime("%Y-%m-%d_%H-%M-%S")
        self.path = Path(out_dir) / f"session_{ts}.csv"

        self._file = self.path.open("w", newline="", encoding="utf-8")
        self._writer = csv.writer(self._file)
        self._writer.writerow([
            "timestamp", "status", "phase", "cycle",
            "entropy", "arousal", "attention", "rhythm_alignment",
        ])

    def log(self, state: RuntimeState):
        ts = datetime.now().isoformat(timespec="seconds")
        b = state.belief
        self._writer.writerow([
            ts, state.status, state.phase, state.cycle_count,
            f"{state.entropy:.4f}", f"{b.arousal:.4f}", f"{b.attention:.4f}", f"{b.rhythm_alignment:.4f}",
        ])
        self._file.flush()

    def close(self):
        try:
            self._file.close()
        except Exception:
            pass
