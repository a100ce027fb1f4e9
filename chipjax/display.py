"""CHIP-8 display bitmap: sprite blitting and the renderer contract.

The bitmap is a ``bool[SCREEN_WIDTH, SCREEN_HEIGHT]`` array indexed
``display[x, y]``. Sprites are drawn with XOR; the sprite origin wraps around
the screen but the sprite body is clipped at the right and bottom edges.
"""

import jax.numpy as jnp
import numpy as np

from chipjax.constants import SCREEN_WIDTH, SCREEN_HEIGHT, SPRITE_WIDTH, MAX_SPRITE_HEIGHT

# Pre-computed coordinate grids for display operations
xx, yy = jnp.meshgrid(jnp.arange(SCREEN_WIDTH), jnp.arange(SCREEN_HEIGHT), indexing='ij')


def clear_display(display: jnp.ndarray) -> jnp.ndarray:
    """Turn every pixel off."""
    return jnp.zeros_like(display)


def sprite_mask(x, y, sprite: jnp.ndarray, height) -> jnp.ndarray:
    """Screen-sized mask of the set sprite bits placed with their top-left at (x, y).

    `sprite` holds one byte per row, most significant bit leftmost; only the
    first `height` rows are used. Sequences shorter than
    MAX_SPRITE_HEIGHT are padded with blank rows.
    """
    sprite_x = x % SCREEN_WIDTH
    sprite_y = y % SCREEN_HEIGHT

    col_offset = xx - sprite_x
    row_offset = yy - sprite_y
    in_sprite = (col_offset >= 0) & (col_offset < SPRITE_WIDTH) & (row_offset >= 0) & (row_offset < height)

    rows = jnp.asarray(sprite, dtype=jnp.uint8)
    rows = jnp.pad(rows, (0, max(MAX_SPRITE_HEIGHT - rows.shape[0], 0)))
    row_bytes = rows[jnp.clip(row_offset, 0, rows.shape[0] - 1)].astype(jnp.int32)
    bits = (row_bytes >> (SPRITE_WIDTH - 1 - jnp.clip(col_offset, 0, SPRITE_WIDTH - 1))) & 1
    return (bits == 1) & in_sprite


def draw_sprite(display: jnp.ndarray, x, y, sprite: jnp.ndarray, height) -> tuple[jnp.ndarray, jnp.ndarray]:
    """XOR-blit a sprite onto the display.

    Returns the new display and the collision flag: True when at least one
    lit pixel was turned off.
    """
    sprite = sprite_mask(x, y, sprite, height)
    collision = jnp.any(display & sprite)
    return display ^ sprite, collision


def needs_redraw(state) -> bool:
    """True when the display changed since the renderer last acknowledged it."""
    return bool(state.redraw)


def acknowledge_redraw(state):
    """Clear the redraw-pending flag once a frame has been presented."""
    return state.replace(redraw=jnp.zeros((), dtype=jnp.bool_))


def display_snapshot(state) -> np.ndarray:
    """Host copy of the current bitmap, shape (SCREEN_WIDTH, SCREEN_HEIGHT)."""
    return np.array(state.display, dtype=np.bool_)
