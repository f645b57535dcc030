# scripts/simulate_session.py
import sys

from tidebreath.core.patterns import DEFAULT_PATTERN_ID, PATTERNS
from tidebreath.kernel.events import LoadProtocol, StartSession, Tick
from tidebreath.kernel.kernel import BreathKernel


def main():
    pattern_id = sys.argv[1] if len(sys.argv) > 1 else DEFAULT_PATTERN_ID
    if pattern_id not in PATTERNS:
        print(f"❌ Unknown pattern {pattern_id!r}. Known: {', '.join(sorted(PATTERNS))}")
        return

    seconds = 60.0
    dt = 0.1

    kernel = BreathKernel()
    last = {"phase": None}

    def on_state(st):
        if st.status == "RUNNING" and st.phase != last["phase"]:
            last["phase"] = st.phase
            print(
                f"t={st.session_duration:6.1f}s  cycle={st.cycle_count:02d}  {st.phase:<8}"
                f"  entropy={st.entropy:.3f}  arousal={st.belief.arousal:.3f}"
                f"  rhythm={st.belief.rhythm_alignment:.3f}"
            )

    unsubscribe = kernel.subscribe(on_state)

    try:
        print(f"Running {pattern_id} headless for {seconds:.0f}s…")
        kernel.dispatch(LoadProtocol(pattern_id=pattern_id))
        kernel.dispatch(StartSession())

        for _ in range(int(seconds / dt)):
            kernel.dispatch(Tick(dt=dt))
            if kernel.get_state().status != "RUNNING":
                break

        st = kernel.get_state()
        print(f"✅ Final: status={st.status}  cycles={st.cycle_count}  entropy={st.entropy:.3f}")
        print(f"Events logged: {len(kernel.event_log)}")
    finally:
        unsubscribe()
        kernel.close()
        print("Stopped.")


if __name__ == "__main__":
    main()
