"""CHIP-8 emulator state structures."""

import jax
import jax.numpy as jnp
from flax.struct import dataclass, PyTreeNode, field

from chipjax.constants import (
    MEMORY_SIZE, PROGRAM_START, FONT_START, FONT_DATA, SCREEN_WIDTH, SCREEN_HEIGHT,
    STACK_SIZE, REGISTER_COUNT, KEY_COUNT, NO_KEY,
)


@dataclass(frozen=True)
class StackState:
    """Return address stack; `pointer` is the number of live entries."""
    data: jnp.ndarray
    pointer: jnp.ndarray


class EmulatorState(PyTreeNode):
    """Main CHIP-8 machine state.

    Every field except `new_functionality` is a pytree leaf, so a state can be
    passed through `jax.jit`, `jax.lax.scan` and friends. `new_functionality`
    selects the CHIP-48 behaviour of 8XY6/8XYE, BXNN and FX55/FX65 and is
    static: changing it triggers a retrace.
    """
    rng: jax.Array
    memory: jnp.ndarray
    pc: jnp.ndarray
    I: jnp.ndarray
    V: jnp.ndarray
    stack: StackState
    delay_timer: jnp.ndarray
    sound_timer: jnp.ndarray
    display: jnp.ndarray
    redraw: jnp.ndarray
    keypad: jnp.ndarray
    last_key: jnp.ndarray
    paused: jnp.ndarray
    paused_register: jnp.ndarray
    new_functionality: bool = field(pytree_node=False, default=False)


def create_stack() -> StackState:
    """Create an empty stack."""
    return StackState(
        data=jnp.zeros(STACK_SIZE, dtype=jnp.uint16),
        pointer=jnp.zeros((), dtype=jnp.int32),
    )


def create_state(rng: jax.Array = jax.random.PRNGKey(0), new_functionality: bool = False) -> EmulatorState:
    """Create initial emulator state with font data loaded."""
    memory = jnp.zeros(MEMORY_SIZE, dtype=jnp.uint8)
    memory = memory.at[FONT_START:FONT_START + len(FONT_DATA)].set(FONT_DATA)
    return EmulatorState(
        rng=rng,
        memory=memory,
        pc=jnp.asarray(PROGRAM_START, dtype=jnp.uint16),
        I=jnp.zeros((), dtype=jnp.uint16),
        V=jnp.zeros(REGISTER_COUNT, dtype=jnp.uint8),
        stack=create_stack(),
        delay_timer=jnp.zeros((), dtype=jnp.uint8),
        sound_timer=jnp.zeros((), dtype=jnp.uint8),
        display=jnp.zeros((SCREEN_WIDTH, SCREEN_HEIGHT), dtype=jnp.bool_),
        redraw=jnp.zeros((), dtype=jnp.bool_),
        keypad=jnp.zeros(KEY_COUNT, dtype=jnp.bool_),
        last_key=jnp.asarray(NO_KEY, dtype=jnp.int32),
        paused=jnp.zeros((), dtype=jnp.bool_),
        paused_register=jnp.zeros((), dtype=jnp.uint8),
        new_functionality=new_functionality,
    )
