import pytest

from tidebreath.core.settings_store import UserSettings
from tidebreath.engine.bridge import KernelBridge, breath_scale
from tidebreath.kernel.events import LoadProtocol, StartSession, Tick
from tidebreath.kernel.kernel import BreathKernel
from tidebreath.kernel.types import TrustRecord


class FakeCuePlayer:
    def __init__(self, fail=False):
        self.played = []
        self.fail = fail

    def play(self, cue, pack, duration):
        if self.fail:
            raise RuntimeError("device gone")
        self.played.append((cue, pack, duration))


class Harness:
    def __init__(self, settings=None, fail=False, visibility=None):
        self.settings = settings or UserSettings()
        self.cues = FakeCuePlayer(fail=fail)
        self.haptics = []
        self.syncs = []
        self.locks = []
        self.kernel = BreathKernel(visibility=visibility)
        self.bridge = KernelBridge(
            lambda: self.settings,
            cue_sink=self.cues,
            haptic_sink=self.haptics.append,
            on_sync=lambda phase, cycle: self.syncs.append((phase, cycle)),
            on_safety_lock=self.locks.append,
        )
        self.kernel.subscribe(self.bridge)

    def start(self, pattern_id):
        self.kernel.dispatch(LoadProtocol(pattern_id=pattern_id))
        self.kernel.dispatch(StartSession())


def test_first_inhale_gets_a_cue():
    h = Harness()
    h.start("box")
    assert h.cues.played == [("inhale", "musical", 4.0)]
    assert h.haptics == [[20]]


def test_cue_fires_once_per_phase_entry():
    h = Harness()
    h.start("box")
    h.kernel.dispatch(Tick(dt=1.0))
    h.kernel.dispatch(Tick(dt=1.0))
    assert len(h.cues.played) == 1

    h.kernel.dispatch(Tick(dt=2.0))
    assert h.cues.played[-1] == ("hold", "musical", 4.0)
    assert h.haptics[-1] == [10]


def test_sync_only_when_phase_or_cycle_changes():
    h = Harness()
    h.start("calm")
    for _ in range(8):
        h.kernel.dispatch(Tick(dt=0.5))   # 4.0s: inhale -> exhale
    h.kernel.dispatch(Tick(dt=6.0))       # exhale -> inhale, cycle 1

    assert h.syncs == [("inhale", 0), ("exhale", 0), ("inhale", 1)]


def test_frame_tracks_progress_and_scale():
    h = Harness()
    h.start("box")
    h.kernel.dispatch(Tick(dt=1.0))
    f = h.bridge.frame
    assert f.progress == pytest.approx(0.25)
    assert f.scale == pytest.approx(1.0125)
    assert f.entropy == pytest.approx(h.kernel.get_state().entropy)


def test_disabled_sound_and_haptics_stay_silent():
    h = Harness(settings=UserSettings(sound_enabled=False, haptic_enabled=False))
    h.start("box")
    h.kernel.dispatch(Tick(dt=4.0))
    assert h.cues.played == []
    assert h.haptics == []


def test_settings_are_read_at_each_cue():
    h = Harness()
    h.start("box")
    h.settings = UserSettings(sound_pack="bells", haptic_strength="heavy")
    h.kernel.dispatch(Tick(dt=4.0))
    assert h.cues.played[-1][1] == "bells"
    assert h.haptics[-1] == [20]


def test_failing_cue_sink_never_reaches_the_kernel():
    h = Harness(fail=True)
    h.start("box")
    h.kernel.dispatch(Tick(dt=4.0))
    assert h.kernel.get_state().phase == "hold_in"


def test_safety_lock_reported_once_and_silences_cues():
    h = Harness(visibility=lambda: "hidden")
    h.kernel.set_safety_registry({"box": TrustRecord(pattern_id="box", resonance_score=0.1)})
    h.start("box")
    played = len(h.cues.played)

    for _ in range(5):
        h.kernel.dispatch(Tick(dt=0.9))

    assert h.kernel.get_state().status == "SAFETY_LOCK"
    assert len(h.locks) == 1
    assert h.locks[0].status == "SAFETY_LOCK"
    assert len(h.cues.played) == played


def test_reset_rearms_first_cue():
    h = Harness()
    h.start("box")
    h.bridge.reset()
    h.kernel.dispatch(Tick(dt=0.1))
    assert len(h.cues.played) == 2
    assert h.cues.played[-1][0] == "inhale"


@pytest.mark.parametrize(
    "phase,progress,expected",
    [
        ("inhale", 0.0, 1.0),
        ("inhale", 1.0, 1.05),
        ("hold_in", 0.5, 1.05),
        ("exhale", 1.0, 1.0),
        ("hold_out", 0.5, 1.0),
    ],
)
def test_breath_scale(phase, progress, expected):
    assert breath_scale(phase, progress) == pytest.approx(expected)
