"""CHIP-8 display operations."""

import jax.numpy as jnp
from chipjax.constants import FLAG_REGISTER, MAX_SPRITE_HEIGHT
from chipjax.state import EmulatorState
from chipjax.decode import DecodedInstruction
from chipjax.display import draw_sprite


def execute_display(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """DXYN - Draw sprite at (VX, VY) with height N, VF = collision."""
    # Rows past the end of memory read as blank.
    addresses = jnp.astype(state.I, jnp.int32) + jnp.arange(MAX_SPRITE_HEIGHT)
    sprite = state.memory.at[addresses].get(mode="fill", fill_value=0)

    display, collision = draw_sprite(state.display, state.V[instruction.x], state.V[instruction.y], sprite, instruction.n)
    return state.replace(
        display=display,
        redraw=jnp.ones((), dtype=jnp.bool_),
        V=state.V.at[FLAG_REGISTER].set(jnp.astype(collision, jnp.uint8)),
    )
