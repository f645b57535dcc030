import pytest
from PySide6.QtCore import QCoreApplication

from tidebreath.core.settings_store import UserSettings
from tidebreath.engine.heartbeat import BreathEngine, UnknownPattern
from tidebreath.kernel.kernel import BreathKernel


@pytest.fixture(scope="module")
def qapp():
    app = QCoreApplication.instance() or QCoreApplication([])
    yield app


class FakeCuePlayer:
    def __init__(self):
        self.played = []
        self.stopped = 0

    def play(self, cue, pack, duration):
        self.played.append(cue)

    def stop(self):
        self.stopped += 1


@pytest.fixture
def engine(qapp, tmp_path):
    kernel = BreathKernel()
    eng = BreathEngine(
        kernel,
        settings_provider=UserSettings,
        cue_player=FakeCuePlayer(),
        log_dir=str(tmp_path / "logs"),
    )
    yield eng
    eng.shutdown()
    kernel.close()


def test_unknown_pattern_is_rejected(engine):
    with pytest.raises(UnknownPattern):
        engine.start("nope")
    assert not engine.is_active
    assert engine.kernel.get_state().status == "IDLE"


def test_start_loads_runs_and_cues(engine):
    phases = []
    engine.phase_changed.connect(lambda phase, cycle: phases.append((phase, cycle)))

    engine.start("calm")
    st = engine.kernel.get_state()
    assert engine.is_active
    assert st.status == "RUNNING"
    assert st.pattern.id == "calm"
    assert engine.cue_player.played == ["inhale"]
    assert phases == [("inhale", 0)]


def test_pause_resume_round_trip(engine):
    engine.start("box")
    engine.pause()
    assert engine.kernel.get_state().status == "PAUSED"
    engine.resume()
    assert engine.kernel.get_state().status == "RUNNING"


def test_stop_returns_state_before_halt(engine, tmp_path):
    engine.start("box")
    final = engine.stop(reason="user")

    assert final.status == "RUNNING"
    assert final.pattern.id == "box"
    assert engine.kernel.get_state().status == "IDLE"
    assert engine.kernel.event_log[-1].tag == "HALT"
    assert not engine.is_active
    assert engine.cue_player.stopped == 1
    assert list((tmp_path / "logs").glob("session_*.csv"))


def test_frames_are_emitted_per_state(engine):
    frames = []
    engine.frame_changed.connect(lambda p, e, s: frames.append((p, e, s)))
    engine.start("box")
    assert len(frames) == 2   # load + start
    assert frames[-1][0] == 0.0


def test_engine_reports_whether_haptics_are_wired(engine, tmp_path):
    assert engine.has_haptics is False

    pulses = []
    kernel = BreathKernel()
    eng = BreathEngine(
        kernel,
        settings_provider=UserSettings,
        haptics=pulses.append,
        log_dir=str(tmp_path / "haptic-logs"),
    )
    try:
        assert eng.has_haptics is True
        eng.start("box")
        assert len(pulses) == 1
    finally:
        eng.shutdown()
        kernel.close()
