"""CHIP-8 miscellaneous instructions (Fxxx).

Addresses computed from I may run past the end of memory: writes there are
dropped and reads return 0.
"""

import jax.numpy as jnp
from chipjax.constants import FLAG_REGISTER, FONT_START, FONT_GLYPH_SIZE, ADDRESS_MASK, INDEX_MASK, REGISTER_COUNT
from chipjax.state import EmulatorState
from chipjax.decode import DecodedInstruction


def execute_get_delay_timer(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX07 - Set VX to delay timer value."""
    return state.replace(V=state.V.at[instruction.x].set(state.delay_timer))


def execute_set_delay_timer(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX15 - Set delay timer to VX."""
    return state.replace(delay_timer=state.V[instruction.x])


def execute_set_sound_timer(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX18 - Set sound timer to VX."""
    return state.replace(sound_timer=state.V[instruction.x])


def execute_add_to_index(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX1E - Add VX to I register, VF = 1 when the sum leaves the 12-bit address space."""
    total = jnp.astype(state.I, jnp.int32) + jnp.astype(state.V[instruction.x], jnp.int32)
    return state.replace(
        I=jnp.astype(total & ADDRESS_MASK, jnp.uint16),
        V=state.V.at[FLAG_REGISTER].set(jnp.astype(total > ADDRESS_MASK, jnp.uint8))
    )


def execute_wait_for_key(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX0A - Wait for key press.

    The machine pauses with PC pointing back at this instruction; cycles are
    no-ops until `resume_with_key` delivers the key into VX.
    """
    return state.replace(
        paused=jnp.ones((), dtype=jnp.bool_),
        paused_register=jnp.astype(instruction.x, jnp.uint8),
        pc=state.pc - 2,
    )


def execute_font_character(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX29 - Set I to location of sprite for digit VX."""
    font_address = FONT_START + jnp.astype(state.V[instruction.x], jnp.int32) * FONT_GLYPH_SIZE
    return state.replace(I=jnp.astype(font_address, jnp.uint16))


def execute_bcd_conversion(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX33 - Store BCD representation of VX at I, I+1, I+2."""
    value = state.V[instruction.x]

    digits = jnp.array([
        value // 100,
        (value // 10) % 10,
        value % 10
    ], dtype=jnp.uint8)

    indices = jnp.arange(3) + jnp.astype(state.I, jnp.int32)
    new_memory = state.memory.at[indices].set(digits, mode="drop")
    return state.replace(memory=new_memory)


def _advance_index(state: EmulatorState, instruction: DecodedInstruction):
    """Legacy FX55/FX65 leave I pointing past the last register transferred."""
    if state.new_functionality:
        return state.I
    return jnp.astype((jnp.astype(state.I, jnp.int32) + instruction.x + 1) & INDEX_MASK, jnp.uint16)


def execute_store_registers(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX55 - Store V0 through VX in memory starting at I."""
    register_mask = jnp.arange(REGISTER_COUNT) <= instruction.x
    base_indices = jnp.astype(state.I, jnp.int32) + jnp.arange(REGISTER_COUNT)
    current_memory_values = state.memory.at[base_indices].get(mode="fill", fill_value=0)
    new_memory_values = jnp.where(register_mask, state.V, current_memory_values)
    new_memory = state.memory.at[base_indices].set(new_memory_values, mode="drop")
    return state.replace(memory=new_memory, I=_advance_index(state, instruction))


def execute_load_registers(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX65 - Load V0 through VX from memory starting at I."""
    register_mask = jnp.arange(REGISTER_COUNT) <= instruction.x
    base_indices = jnp.astype(state.I, jnp.int32) + jnp.arange(REGISTER_COUNT)
    memory_values = state.memory.at[base_indices].get(mode="fill", fill_value=0)
    new_V = jnp.where(register_mask, memory_values, state.V)
    return state.replace(V=new_V, I=_advance_index(state, instruction))
