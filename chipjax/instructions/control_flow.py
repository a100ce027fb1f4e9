"""CHIP-8 control flow instructions."""

import jax
import jax.lax
import jax.numpy as jnp
from chipjax.constants import KEY_COUNT
from chipjax.state import EmulatorState
from chipjax.decode import DecodedInstruction
from chipjax.logging import report_if
from chipjax.stack import push


def execute_jump(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """1NNN - Jump to address NNN."""
    return state.replace(pc=jnp.astype(instruction.nnn, jnp.uint16))


def execute_call(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """2NNN - Call subroutine at NNN."""
    state = state.replace(stack=push(state.stack, state.pc))
    return execute_jump(state, instruction)


def make_skip_instruction(condition_fn):
    """Factory for skip instructions."""
    def skip_instruction(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
        condition = condition_fn(state, instruction)
        return jax.lax.cond(
            condition,
            lambda s: s.replace(pc=s.pc + 2),
            lambda s: s,
            state
        )
    return skip_instruction


execute_skip_if_equal_immediate = make_skip_instruction(
    lambda state, inst: state.V[inst.x] == inst.nn
)

execute_skip_if_not_equal_immediate = make_skip_instruction(
    lambda state, inst: state.V[inst.x] != inst.nn
)

execute_skip_if_equal_register = make_skip_instruction(
    lambda state, inst: state.V[inst.x] == state.V[inst.y]
)

execute_skip_if_not_equal_register = make_skip_instruction(
    lambda state, inst: state.V[inst.x] != state.V[inst.y]
)


def execute_jump_with_offset(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """BNNN - Jump to NNN + V0; BXNN - jump to XNN + VX with new functionality.

    The target is not masked: a jump past the end of memory is caught by the next fetch.
    """
    offset_register = instruction.x if state.new_functionality else 0
    jump_address = instruction.nnn + jnp.astype(state.V[offset_register], jnp.int32)
    return state.replace(pc=jnp.astype(jump_address, jnp.uint16))


def key_state(state: EmulatorState, key) -> jnp.ndarray:
    """Keypad lookup for a register value; codes above 0xF are reported and read as released."""
    valid = key < KEY_COUNT
    report_if(~valid, "WARNING", "Attempted to check invalid CHIP-8 key code: {}", key)
    return valid & state.keypad[key & 0xF]


execute_skip_if_key = make_skip_instruction(
    lambda state, inst: key_state(state, state.V[inst.x])
)

execute_skip_if_not_key = make_skip_instruction(
    lambda state, inst: ~key_state(state, state.V[inst.x])
)
