"""Main CHIP-8 emulator execution engine.

The public functions take and return `EmulatorState`. Fatal conditions
(fetching outside memory, calling with a full stack) are recorded with
`checkify` inside the compiled step and raised on the host as
`MachineHalted`; no state is returned in that case.
"""

import functools
from typing import Optional, Sequence, Union

import jax
import jax.lax
import jax.numpy as jnp
from jax.experimental import checkify

from chipjax.constants import MEMORY_SIZE, PROGRAM_START, MAX_PROGRAM_SIZE, KEY_COUNT
from chipjax.decode import Op, decode
from chipjax.errors import MachineHalted, ProgramTooLarge
from chipjax.logging import logger
from chipjax.state import EmulatorState
from chipjax.instructions.system import no_op, execute_clear_screen, execute_return
from chipjax.instructions.control_flow import (
    execute_jump, execute_call, execute_skip_if_equal_immediate,
    execute_skip_if_not_equal_immediate, execute_skip_if_equal_register,
    execute_skip_if_not_equal_register, execute_jump_with_offset,
    execute_skip_if_key, execute_skip_if_not_key,
)
from chipjax.instructions.alu import (
    execute_move, execute_or, execute_and, execute_xor, execute_add_register,
    execute_sub_xy, execute_sub_yx, execute_shift_right, execute_shift_left,
)
from chipjax.instructions.memory import execute_set, execute_add, execute_set_index, execute_random
from chipjax.instructions.display import execute_display
from chipjax.instructions.misc import (
    execute_get_delay_timer, execute_wait_for_key, execute_set_delay_timer,
    execute_set_sound_timer, execute_add_to_index, execute_font_character,
    execute_bcd_conversion, execute_store_registers, execute_load_registers,
)


HANDLERS = {
    Op.CLEAR_SCREEN: execute_clear_screen,
    Op.RETURN: execute_return,
    Op.JUMP: execute_jump,
    Op.CALL: execute_call,
    Op.SKIP_EQ_IMM: execute_skip_if_equal_immediate,
    Op.SKIP_NE_IMM: execute_skip_if_not_equal_immediate,
    Op.SKIP_EQ_REG: execute_skip_if_equal_register,
    Op.SET_IMM: execute_set,
    Op.ADD_IMM: execute_add,
    Op.MOVE: execute_move,
    Op.OR: execute_or,
    Op.AND: execute_and,
    Op.XOR: execute_xor,
    Op.ADD_REG: execute_add_register,
    Op.SUB_XY: execute_sub_xy,
    Op.SHIFT_RIGHT: execute_shift_right,
    Op.SUB_YX: execute_sub_yx,
    Op.SHIFT_LEFT: execute_shift_left,
    Op.SKIP_NE_REG: execute_skip_if_not_equal_register,
    Op.SET_INDEX: execute_set_index,
    Op.JUMP_OFFSET: execute_jump_with_offset,
    Op.RANDOM: execute_random,
    Op.DRAW: execute_display,
    Op.SKIP_KEY: execute_skip_if_key,
    Op.SKIP_NOT_KEY: execute_skip_if_not_key,
    Op.GET_DELAY: execute_get_delay_timer,
    Op.WAIT_KEY: execute_wait_for_key,
    Op.SET_DELAY: execute_set_delay_timer,
    Op.SET_SOUND: execute_set_sound_timer,
    Op.ADD_INDEX: execute_add_to_index,
    Op.FONT_CHARACTER: execute_font_character,
    Op.BCD: execute_bcd_conversion,
    Op.STORE_REGISTERS: execute_store_registers,
    Op.LOAD_REGISTERS: execute_load_registers,
    Op.UNKNOWN: no_op,
}
_missing = set(Op) - set(HANDLERS)
if _missing:
    raise RuntimeError(f"No handler registered for {sorted(op.name for op in _missing)}")

# lax.switch branch table, in Op value order
_HANDLER_TABLE = tuple(HANDLERS[op] for op in sorted(Op))


def _execute(state: EmulatorState, instruction) -> EmulatorState:
    decoded_instruction = decode(instruction)
    return jax.lax.switch(decoded_instruction.op, _HANDLER_TABLE, state, decoded_instruction)


def _pack_u16(high: jnp.uint8, low: jnp.uint8) -> jnp.uint16:
    """Pack two bytes into uint16."""
    return (high.astype(jnp.uint16) << 8) | low.astype(jnp.uint16)


def _fetch(state: EmulatorState) -> tuple[EmulatorState, jnp.ndarray]:
    pc = jnp.astype(state.pc, jnp.int32)
    checkify.check(
        pc + 1 < MEMORY_SIZE,
        "Attempted to fetch instruction beyond memory bounds at address {}",
        pc,
    )
    high = state.memory.at[pc].get(mode="fill", fill_value=0)
    low = state.memory.at[pc + 1].get(mode="fill", fill_value=0)
    return state.replace(pc=state.pc + 2), _pack_u16(high, low)


def _cycle(state: EmulatorState) -> EmulatorState:
    def fetch_and_execute(state):
        state, instruction = _fetch(state)
        return _execute(state, instruction)

    return jax.lax.cond(state.paused, lambda s: s, fetch_and_execute, state)


def _run_cycles(state: EmulatorState, n: int) -> EmulatorState:
    state, _ = jax.lax.scan(lambda s, _: (_cycle(s), None), state, length=n)
    return state


_checked_fetch = jax.jit(checkify.checkify(_fetch))
_checked_execute = jax.jit(checkify.checkify(_execute))
_checked_cycle = jax.jit(checkify.checkify(_cycle))


@functools.lru_cache(maxsize=None)
def _checked_run_cycles(n: int):
    return jax.jit(checkify.checkify(functools.partial(_run_cycles, n=n)))


def _halt_on_error(error):
    message = error.get()
    if message is not None:
        logger.critical(message)
        raise MachineHalted(message)


def fetch(state: EmulatorState) -> tuple[EmulatorState, jnp.ndarray]:
    """Fetch next instruction from memory and advance PC by 2."""
    error, (state, instruction) = _checked_fetch(state)
    _halt_on_error(error)
    return state, instruction


def execute(state: EmulatorState, instruction: int, new_functionality: Optional[bool] = None) -> EmulatorState:
    """Execute a single already-fetched CHIP-8 instruction.

    Args:
        state: Current machine state
        instruction: 16-bit instruction word
        new_functionality: Quirk toggle for this instruction only. None uses
            the toggle the state was created with.
    """
    if new_functionality is None:
        error, new_state = _checked_execute(state, instruction)
        _halt_on_error(error)
        return new_state

    error, new_state = _checked_execute(state.replace(new_functionality=new_functionality), instruction)
    _halt_on_error(error)
    return new_state.replace(new_functionality=state.new_functionality)


def step(state: EmulatorState) -> EmulatorState:
    """Run one fetch-decode-execute cycle. Does nothing while waiting for a key."""
    error, state = _checked_cycle(state)
    _halt_on_error(error)
    return state


def run_cycles(state: EmulatorState, n: int) -> EmulatorState:
    """Run `n` cycles in a single compiled scan."""
    if n <= 0:
        return state
    error, state = _checked_run_cycles(n)(state)
    _halt_on_error(error)
    return state


def tick_timers(state: EmulatorState) -> EmulatorState:
    """60 Hz timer tick: decrement both timers, stopping at zero. Frozen while paused."""
    def tick(timer):
        return jnp.where(state.paused | (timer == 0), timer, timer - 1)

    return state.replace(delay_timer=tick(state.delay_timer), sound_timer=tick(state.sound_timer))


def resume_with_key(state: EmulatorState, key: int) -> EmulatorState:
    """Finish a pending FX0A: store `key` in its register and continue after it."""
    if not 0 <= key < KEY_COUNT:
        raise ValueError(f"Invalid CHIP-8 key code {key}, expected 0-{KEY_COUNT - 1}")
    if not bool(state.paused):
        return state

    register = int(state.paused_register)
    logger.debug(f"Key {key:X} pressed, V{register:X} = {key:#04x}")
    return state.replace(
        V=state.V.at[register].set(key),
        pc=state.pc + 2,
        paused=jnp.zeros((), dtype=jnp.bool_),
    )


def load_program(state: EmulatorState, program: Union[bytes, Sequence[int]], length: Optional[int] = None) -> EmulatorState:
    """Copy program bytes into memory starting at 0x200.

    Args:
        state: Machine state to load into
        program: Raw program bytes
        length: Declared number of bytes to copy, defaults to len(program)

    Raises:
        ProgramTooLarge: if the program does not fit below the end of memory.
    """
    if length is None:
        length = len(program)
    if length > len(program):
        raise ValueError(f"Declared length {length} exceeds the {len(program)} bytes supplied")
    if length > MAX_PROGRAM_SIZE:
        message = f"Program size too large to fit in memory: {length} bytes, at most {MAX_PROGRAM_SIZE} allowed"
        logger.critical(message)
        raise ProgramTooLarge(message)

    rom_array = jnp.array(list(program[:length]), dtype=jnp.uint8)
    new_memory = state.memory.at[PROGRAM_START:PROGRAM_START + length].set(rom_array)
    return state.replace(memory=new_memory)


def load_rom(state: EmulatorState, filename: str) -> EmulatorState:
    """Load ROM data from a file into CHIP-8 memory starting at 0x200."""
    with open(filename, 'rb') as f:
        rom_data = f.read()
    state = load_program(state, rom_data)
    logger.info(f"Loaded ROM: {filename} ({len(rom_data)} bytes)")
    return state
