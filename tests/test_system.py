"""Tests for system instructions (0xxx) and the call stack."""

import jax.numpy as jnp
import pytest
from chipjax import execute, MachineHalted
from chipjax.constants import STACK_SIZE


def test_execute_clear_screen(fresh_state):
    """Test 00E0 - Clear display."""
    state = fresh_state.replace(display=fresh_state.display.at[0, 0].set(True).at[63, 31].set(True))

    state = execute(state, 0x00E0)

    assert jnp.sum(state.display) == 0
    assert state.redraw


def test_clear_screen_is_idempotent(fresh_state):
    """00E0 on a blank display still leaves it blank and requests a redraw."""
    state = execute(fresh_state, 0x00E0)
    state = state.replace(redraw=jnp.zeros((), dtype=jnp.bool_))
    state = execute(state, 0x00E0)

    assert jnp.sum(state.display) == 0
    assert state.redraw


def test_execute_call_and_return(fresh_state):
    """Test 2NNN (call) and 00EE (return) together."""
    state = fresh_state.replace(pc=fresh_state.pc + 2)  # as if 2300 was just fetched
    return_address = state.pc

    state = execute(state, 0x2300)  # Call 0x300
    assert state.pc == 0x300
    assert state.stack.pointer == 1
    assert state.stack.data[0] == return_address

    state = execute(state, 0x00EE)
    assert state.pc == return_address
    assert state.stack.pointer == 0


def test_nested_calls_unwind_in_order(fresh_state):
    """Returns pop addresses in reverse call order."""
    state = execute(fresh_state, 0x2300)
    state = execute(state, 0x2400)
    state = execute(state, 0x2500)
    assert state.stack.pointer == 3

    state = execute(state, 0x00EE)
    assert state.pc == 0x400
    state = execute(state, 0x00EE)
    assert state.pc == 0x300
    state = execute(state, 0x00EE)
    assert state.pc == 0x200


def test_return_with_empty_stack_jumps_to_zero(fresh_state):
    """00EE with nothing on the stack is reported and continues at 0x000."""
    state = execute(fresh_state, 0x00EE)

    assert state.pc == 0
    assert state.stack.pointer == 0


def test_call_fills_stack_to_capacity(fresh_state):
    """Sixteen nested calls fit."""
    state = fresh_state
    for _ in range(STACK_SIZE):
        state = execute(state, 0x2300)
    assert state.stack.pointer == STACK_SIZE


def test_call_with_full_stack_halts(fresh_state):
    """A seventeenth nested call is fatal."""
    state = fresh_state
    for _ in range(STACK_SIZE):
        state = execute(state, 0x2300)

    with pytest.raises(MachineHalted, match="Stack overflow"):
        execute(state, 0x2300)


@pytest.mark.parametrize("instruction", [0x0000, 0x0123, 0x00E1, 0x0FFF])
def test_unknown_system_instructions_are_ignored(fresh_state, instruction):
    """0NNN other than 00E0/00EE does nothing."""
    state = execute(fresh_state, instruction)

    assert state.pc == fresh_state.pc
    assert jnp.array_equal(state.V, fresh_state.V)
    assert not state.redraw
