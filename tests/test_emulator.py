"""Tests for the fetch/execute cycle, program loading, timers and the key wait."""

import jax.numpy as jnp
import pytest
from chipjax import (
    create_state, fetch, step, run_cycles, tick_timers, resume_with_key, load_program, load_rom,
    press_key, MachineHalted, ProgramTooLarge, PROGRAM_START,
)
from chipjax.constants import MEMORY_SIZE, MAX_PROGRAM_SIZE, FONT_DATA


def program_state(*words, state=None):
    """Fresh state with the given 16-bit words loaded at 0x200."""
    program = b"".join(word.to_bytes(2, "big") for word in words)
    return load_program(state if state is not None else create_state(), program)


class TestCreateState:

    def test_initial_state(self):
        state = create_state()

        assert state.pc == PROGRAM_START
        assert state.I == 0
        assert int(jnp.sum(state.V)) == 0
        assert state.stack.pointer == 0
        assert state.delay_timer == 0 and state.sound_timer == 0
        assert not state.paused
        assert not state.redraw
        assert state.new_functionality is False
        assert (state.memory[:len(FONT_DATA)] == FONT_DATA).all()
        assert int(jnp.sum(state.memory[len(FONT_DATA):])) == 0


class TestLoadProgram:

    def test_program_copied_at_load_offset(self):
        state = load_program(create_state(), bytes([0x12, 0x34, 0x56]))

        assert [int(b) for b in state.memory[0x200:0x204]] == [0x12, 0x34, 0x56, 0x00]
        assert (state.memory[:len(FONT_DATA)] == FONT_DATA).all()

    def test_declared_length(self):
        state = load_program(create_state(), bytes([0x12, 0x34, 0x56]), length=2)

        assert [int(b) for b in state.memory[0x200:0x203]] == [0x12, 0x34, 0x00]

    def test_largest_program_fits(self):
        state = load_program(create_state(), bytes([0xAB]) * MAX_PROGRAM_SIZE)

        assert state.memory[MEMORY_SIZE - 1] == 0xAB

    def test_program_too_large(self):
        with pytest.raises(ProgramTooLarge):
            load_program(create_state(), bytes(MAX_PROGRAM_SIZE + 1))

    def test_program_too_large_is_fatal(self):
        with pytest.raises(MachineHalted):
            load_program(create_state(), bytes(MEMORY_SIZE))

    def test_load_rom(self, tmp_path):
        rom = tmp_path / "test.ch8"
        rom.write_bytes(bytes([0x00, 0xE0, 0x12, 0x00]))

        state = load_rom(create_state(), str(rom))

        assert [int(b) for b in state.memory[0x200:0x204]] == [0x00, 0xE0, 0x12, 0x00]


class TestFetch:

    def test_fetch_is_big_endian(self):
        state = program_state(0xA2F0)

        state, instruction = fetch(state)

        assert instruction == 0xA2F0
        assert state.pc == 0x202

    def test_fetch_last_word(self):
        state = create_state().replace(pc=jnp.asarray(MEMORY_SIZE - 2, dtype=jnp.uint16))
        state, _ = fetch(state)
        assert state.pc == MEMORY_SIZE

    def test_fetch_beyond_memory_halts(self):
        state = create_state().replace(pc=jnp.asarray(MEMORY_SIZE - 1, dtype=jnp.uint16))

        with pytest.raises(MachineHalted, match="beyond memory bounds"):
            fetch(state)

    def test_runaway_jump_halts_on_next_cycle(self):
        state = program_state(0x60FF, 0xBFFF)  # V0 = 0xFF; jump to 0xFFF + V0
        state = step(step(state))

        with pytest.raises(MachineHalted):
            step(state)


class TestStep:

    def test_step_executes_one_instruction(self):
        state = program_state(0x6105, 0x7103)

        state = step(state)
        assert state.V[1] == 5
        assert state.pc == 0x202

        state = step(state)
        assert state.V[1] == 8
        assert state.pc == 0x204

    def test_call_then_return_restores_pc(self):
        # 0x200: call 0x206; 0x202: V0 = 1; 0x206: return
        state = program_state(0x2206, 0x6001, 0x0000, 0x00EE)

        state = step(state)
        assert state.pc == 0x206
        assert state.stack.pointer == 1

        state = step(state)
        assert state.pc == 0x202
        assert state.stack.pointer == 0

        state = step(state)
        assert state.V[0] == 1

    def test_run_cycles_matches_steps(self):
        words = (0x6003, 0x6102, 0x8014, 0x7001, 0xA300, 0xF033)
        stepped = program_state(*words)
        for _ in words:
            stepped = step(stepped)

        scanned = run_cycles(program_state(*words), len(words))

        assert jnp.array_equal(scanned.V, stepped.V)
        assert jnp.array_equal(scanned.memory, stepped.memory)
        assert scanned.pc == stepped.pc

    def test_run_cycles_halts_on_overflow(self):
        state = program_state(0x2200)  # calls itself forever

        with pytest.raises(MachineHalted, match="Stack overflow"):
            run_cycles(state, 20)

    def test_run_zero_cycles(self):
        state = program_state(0x6105)
        assert run_cycles(state, 0) is state


class TestWaitForKey:

    def test_cycles_are_noops_while_waiting(self):
        state = program_state(0xF30A, 0x6001)
        state = step(state)
        assert state.paused
        paused_pc = state.pc

        for _ in range(3):
            state = step(state)

        assert state.pc == paused_pc
        assert int(jnp.sum(state.V)) == 0
        assert state.paused

        state = run_cycles(state, 5)
        assert state.pc == paused_pc

    def test_resume_delivers_key_once(self):
        state = program_state(0xF30A, 0x6001, 0x6102)
        state = step(state)

        state = resume_with_key(state, 0xB)

        assert not state.paused
        assert state.V[3] == 0xB
        assert state.pc == 0x202

        state = step(state)
        assert state.V[0] == 1
        state = step(state)
        assert state.V[1] == 2

    def test_resume_when_not_paused_is_noop(self):
        state = program_state(0x6001)
        assert resume_with_key(state, 4) is state

    def test_resume_rejects_invalid_key(self):
        state = step(program_state(0xF00A))
        with pytest.raises(ValueError):
            resume_with_key(state, 16)

    def test_pressed_key_does_not_resume_by_itself(self):
        """Holding a key is not enough; the scheduler resumes explicitly."""
        state = step(program_state(0xF00A))
        state = press_key(state, 3)
        state = step(state)
        assert state.paused


class TestTimers:

    def test_timers_decrement_independently(self):
        state = create_state().replace(
            delay_timer=jnp.asarray(2, dtype=jnp.uint8),
            sound_timer=jnp.asarray(1, dtype=jnp.uint8),
        )

        state = tick_timers(state)
        assert state.delay_timer == 1 and state.sound_timer == 0

        state = tick_timers(state)
        assert state.delay_timer == 0 and state.sound_timer == 0

        state = tick_timers(state)
        assert state.delay_timer == 0 and state.sound_timer == 0

    def test_timers_frozen_while_waiting(self):
        state = program_state(0x6005, 0xF015, 0xF10A)
        state = run_cycles(state, 3)
        assert state.paused

        state = tick_timers(state)
        assert state.delay_timer == 5
