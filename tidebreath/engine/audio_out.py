# tidebreath/engine/audio_out.py
from __future__ import annotations

import os
from typing import Callable, List, Optional

from PySide6.QtCore import QBuffer, QByteArray, QIODevice
from PySide6.QtMultimedia import QAudio, QAudioFormat, QAudioSink, QMediaDevices

from tidebreath.engine.cues import SAMPLE_RATE, CueType, render_cue, resolve_quality, to_pcm16


class QtCuePlayer:
    """
    Renders cues with numpy and plays them through the default output.

    Audio failures never propagate: the first one is printed and audio is
    switched off for the rest of the process.
    """

    def __init__(self, quality_provider: Callable[[], str]):
        self._quality_provider = quality_provider
        self._disabled = False
        self._sink: Optional[QAudioSink] = None
        self._live: List[QBuffer] = []  # keep buffers alive while playing
        self._seed = 0

    def play(self, cue: CueType, pack: str, duration: float) -> None:
        if self._disabled:
            return
        try:
            quality = resolve_quality(self._quality_provider(), os.cpu_count())
            self._seed += 1
            samples = render_cue(cue, pack, duration, quality, SAMPLE_RATE, seed=self._seed)
            if samples is None:
                return
            self._start(to_pcm16(samples))
        except Exception as e:
            self._disabled = True
            print("[Tidebreath] Audio disabled:", repr(e))

    def stop(self) -> None:
        try:
            if self._sink is not None:
                self._sink.stop()
        except Exception as e:
            print("[Tidebreath] Audio stop error:", repr(e))
        finally:
            self._sink = None
            self._live.clear()

    # -----------------------
    # Qt plumbing
    # -----------------------

    def _ensure_sink(self) -> QAudioSink:
        if self._sink is not None:
            return self._sink

        fmt = QAudioFormat()
        fmt.setSampleRate(SAMPLE_RATE)
        fmt.setChannelCount(1)
        fmt.setSampleFormat(QAudioFormat.Int16)

        device = QMediaDevices.defaultAudioOutput()
        if device.isNull():
            raise RuntimeError("No audio output device")
        if not device.isFormatSupported(fmt):
            raise RuntimeError("Audio device does not support 16-bit mono")

        self._sink = QAudioSink(device, fmt)
        self._sink.stateChanged.connect(self._on_state)
        return self._sink

    def _start(self, pcm: bytes) -> None:
        sink = self._ensure_sink()
        sink.stop()  # a new phase cue replaces the previous one
        self._live.clear()

        buf = QBuffer()
        buf.setData(QByteArray(pcm))
        buf.open(QIODevice.ReadOnly)
        self._live.append(buf)
        sink.start(buf)

    def _on_state(self, state):
        if state == QAudio.IdleState and self._sink is not None:
            self._sink.stop()
            self._live.clear()
