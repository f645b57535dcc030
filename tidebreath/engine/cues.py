# tidebreath/engine/cues.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Literal, Optional, Sequence

import numpy as np

from tidebreath.kernel.types import Phase

CueType = Literal["inhale", "exhale", "hold"]

SAMPLE_RATE = 44100
MAX_CUE_S = 20.0

# inharmonic partial ratios of a metal singing bowl
BOWL_RATIOS = (2.51, 4.23, 5.91, 8.17, 9.84)

CHORDS = {
    "warm": ("C3", "G3", "B3", "E4"),
    "neutral": ("D3", "A3", "C4", "F4"),
    "cool": ("A2", "E3", "B3", "C#4"),
}

HAPTIC_BASE_MS = {"light": 10, "medium": 20, "heavy": 40}

_NOTE_OFFSETS = {"C": -9, "D": -7, "E": -5, "F": -4, "G": -2, "A": 0, "B": 2}


@dataclass(frozen=True)
class AudioConfig:
    partial_count: int
    reverb_mix: float


_CONFIGS = {
    "low": AudioConfig(partial_count=1, reverb_mix=0.20),
    "medium": AudioConfig(partial_count=3, reverb_mix=0.30),
    "high": AudioConfig(partial_count=5, reverb_mix=0.40),
}


def phase_to_cue(phase: Phase) -> CueType:
    if phase in ("hold_in", "hold_out"):
        return "hold"
    return phase  # type: ignore[return-value]


def resolve_quality(setting: str, cpu_count: Optional[int]) -> str:
    if setting in _CONFIGS:
        return setting
    cores = int(cpu_count or 2)
    if cores < 4:
        return "low"
    if cores < 8:
        return "medium"
    return "high"


def audio_config(quality: str) -> AudioConfig:
    return _CONFIGS.get(quality, _CONFIGS["medium"])


def haptic_pattern(strength: str, cue: CueType) -> List[int]:
    """Vibration pattern in ms (on, off, on, ...)."""
    base = HAPTIC_BASE_MS.get(strength, HAPTIC_BASE_MS["medium"])
    if cue == "inhale":
        return [base]
    if cue == "exhale":
        return [base, 60, base]
    return [max(5, base // 2)]


def note_hz(note: str) -> float:
    """Scientific pitch name ("C#4", "E5") to Hz, A4 = 440."""
    name = note[0].upper()
    rest = note[1:]
    shift = 0
    if rest.startswith("#"):
        shift, rest = 1, rest[1:]
    elif rest.startswith("b"):
        shift, rest = -1, rest[1:]
    octave = int(rest)
    semis = _NOTE_OFFSETS[name] + shift + (octave - 4) * 12
    return 440.0 * 2.0 ** (semis / 12.0)


# -----------------------
# Synthesis
# -----------------------

def _time_axis(seconds: float, sr: int) -> np.ndarray:
    n = max(1, int(min(seconds, MAX_CUE_S) * sr))
    return np.arange(n, dtype=np.float64) / float(sr)


def _envelope(t: np.ndarray, attack: float, decay: float) -> np.ndarray:
    attack = max(attack, 1e-3)
    rise = np.clip(t / attack, 0.0, 1.0)
    fall = np.exp(-np.maximum(t - attack, 0.0) / max(decay, 1e-3))
    return rise * fall


def _normalize(x: np.ndarray, peak: float = 0.8) -> np.ndarray:
    m = float(np.max(np.abs(x))) if x.size else 0.0
    if m <= 1e-12:
        return x
    return x * (peak / m)


def _room(x: np.ndarray, sr: int, mix: float) -> np.ndarray:
    # a few decaying echoes, enough to soften the attack
    out = x.copy()
    for i, delay_s in enumerate((0.031, 0.047, 0.073)):
        d = int(delay_s * sr)
        if d >= x.size:
            break
        out[d:] += x[:-d] * (mix * (0.6 ** i))
    return out


def bowl(freq: float, seconds: float, partials: int, sr: int = SAMPLE_RATE) -> np.ndarray:
    t = _time_axis(seconds, sr)
    x = np.sin(2 * np.pi * freq * t) * _envelope(t, 0.1, max(seconds * 0.5, 0.5))

    for i, ratio in enumerate(BOWL_RATIOS[:max(0, partials)]):
        gain = 10.0 ** ((-12.0 - 4.0 * i) / 20.0)
        decay = max(0.2, (2.0 - 0.2 * i))
        x += gain * np.sin(2 * np.pi * freq * ratio * t) * _envelope(t, 0.01, decay)

    return _normalize(x)


def pad(notes: Sequence[str], seconds: float, sr: int = SAMPLE_RATE) -> np.ndarray:
    t = _time_axis(seconds, sr)
    x = np.zeros_like(t)
    for note in notes:
        f = note_hz(note)
        for detune in (-0.003, 0.0, 0.003):
            x += np.sin(2 * np.pi * f * (1.0 + detune) * t)

    attack = min(2.0, seconds / 2.0)
    swell = np.clip(t / max(attack, 1e-3), 0.0, 1.0)
    tail = np.clip((t[-1] - t) / 1.0, 0.0, 1.0)
    return _normalize(x * swell * tail, peak=0.6)


def noise_swell(seconds: float, color: str, seed: int = 0, sr: int = SAMPLE_RATE) -> np.ndarray:
    t = _time_axis(seconds, sr)
    rng = np.random.default_rng(seed)
    white = rng.standard_normal(t.size)

    if color == "brown":
        x = np.cumsum(white)
        x -= np.linspace(x[0], x[-1], x.size)  # remove drift
    else:
        # pink: 1/sqrt(f) spectral tilt
        spec = np.fft.rfft(white)
        f = np.fft.rfftfreq(white.size, d=1.0 / sr)
        f[0] = f[1] if f.size > 1 else 1.0
        x = np.fft.irfft(spec / np.sqrt(f), n=white.size)

    shape = np.sin(np.pi * np.clip(t / max(t[-1], 1e-6), 0.0, 1.0))
    return _normalize(x * shape, peak=0.5)


def render_cue(
    cue: CueType,
    pack: str,
    duration: float,
    quality: str = "medium",
    sample_rate: int = SAMPLE_RATE,
    seed: int = 0,
) -> Optional[np.ndarray]:
    """
    Mono float32 buffer in [-1, 1] for one phase cue, or None when the
    pack has nothing to play for this cue.
    """
    cfg = audio_config(quality)
    duration = max(0.0, float(duration))

    if pack == "musical":
        if cue == "inhale":
            x = pad(CHORDS["warm"], duration + 1, sample_rate)
        elif cue == "exhale":
            x = pad(CHORDS["neutral"], duration + 1, sample_rate)
        else:
            x = bowl(note_hz("E5"), 2.5, cfg.partial_count, sample_rate)
    elif pack == "bells":
        if cue == "inhale":
            x = bowl(note_hz("C3"), duration + 4, cfg.partial_count, sample_rate)
        elif cue == "exhale":
            x = bowl(note_hz("G2"), duration + 4, cfg.partial_count, sample_rate)
        else:
            x = bowl(note_hz("C5"), 2.0, cfg.partial_count, sample_rate)
    elif pack == "breath":
        if cue == "hold":
            return None
        color = "brown" if cue == "inhale" else "pink"
        x = noise_swell(max(duration, 0.5), color, seed=seed, sr=sample_rate)
    else:
        return None

    x = _room(x, sample_rate, cfg.reverb_mix)
    return np.clip(x, -1.0, 1.0).astype(np.float32)


def to_pcm16(x: np.ndarray) -> bytes:
    return (np.clip(x, -1.0, 1.0) * 32767.0).astype("<i2").tobytes()


CUE_PACKS: Dict[str, str] = {
    "musical": "Musical pads",
    "bells": "Singing bowls",
    "breath": "Breath noise",
}
