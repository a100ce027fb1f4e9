"""Tests for frame pacing and configuration."""

import pytest
from chipjax import create_state, load_program, press_key, run_frame, last_pressed_key, EmulatorConfig


def program_state(*words):
    return load_program(create_state(), b"".join(word.to_bytes(2, "big") for word in words))


def test_frame_runs_cycles_and_ticks_timers():
    # V0 = 10; DT = V0; then spin
    state = program_state(0x600A, 0xF015, 0x1204)

    state = run_frame(state, 10)

    assert state.delay_timer == 9
    assert state.pc == 0x204


def test_frame_waits_for_key_then_resumes_once():
    # V0 = 3; DT = V0; wait for key into V5; V6 = 1; spin
    state = program_state(0x6003, 0xF015, 0xF50A, 0x6601, 0x1208)

    state = run_frame(state, 10)
    assert state.paused
    assert state.delay_timer == 3  # frozen
    waiting_pc = state.pc

    state = run_frame(state, 10)
    assert state.paused
    assert state.pc == waiting_pc

    state = press_key(state, 0xC)
    state = run_frame(state, 10)

    assert not state.paused
    assert state.V[5] == 0xC
    assert state.V[6] == 1
    assert state.delay_timer == 2
    assert last_pressed_key(state) is None

    state = run_frame(state, 10)
    assert not state.paused


def test_config_defaults():
    config = EmulatorConfig()

    assert config.cycles_per_frame == 10
    assert config.new_functionality is False


def test_config_from_dict_ignores_unknown_keys():
    config = EmulatorConfig.from_dict({"cycles_per_second": 700, "rom": "game.ch8", "show_debug": True})

    assert config.cycles_per_second == 700
    assert config.cycles_per_frame == 11


def test_config_rejects_non_positive_rates():
    with pytest.raises(ValueError):
        EmulatorConfig(timer_hz=0)
