"""Frame pacing for the driving loop.

A frame is one 60 Hz timer period: the front-end polls input, calls
`run_frame`, then presents the display if it changed.
"""

from chipjax.emulator import run_cycles, tick_timers, resume_with_key
from chipjax.keypad import last_pressed_key, clear_last_key
from chipjax.state import EmulatorState


def run_frame(state: EmulatorState, cycles_per_frame: int) -> EmulatorState:
    """Advance the machine by one frame.

    A pending wait-for-key is resumed first if a key was reported during
    this poll. Cycles run as no-ops while still waiting, and the timers stay
    frozen. The last-pressed key is consumed at the end of the frame.
    """
    key = last_pressed_key(state)
    if bool(state.paused) and key is not None:
        state = resume_with_key(state, key)

    state = run_cycles(state, cycles_per_frame)
    state = tick_timers(state)
    return clear_last_key(state)
