"""CHIP-8 hexadecimal keypad.

The front-end polls its input backend once per frame and forwards key
events here; the interpreter only reads `keypad` and `last_key`.
"""

from typing import Optional

import jax.numpy as jnp

from chipjax.constants import KEY_COUNT, NO_KEY
from chipjax.logging import logger
from chipjax.state import EmulatorState


def _check_key(key: int) -> bool:
    if 0 <= key < KEY_COUNT:
        return True
    logger.warning(f"Attempted to use invalid CHIP-8 key code: {key}")
    return False


def press_key(state: EmulatorState, key: int) -> EmulatorState:
    """Mark `key` as held and record it as the most recently pressed key."""
    if not _check_key(key):
        return state
    return state.replace(
        keypad=state.keypad.at[key].set(True),
        last_key=jnp.asarray(key, dtype=jnp.int32),
    )


def release_key(state: EmulatorState, key: int) -> EmulatorState:
    """Mark `key` as released."""
    if not _check_key(key):
        return state
    return state.replace(keypad=state.keypad.at[key].set(False))


def is_pressed(state: EmulatorState, key: int) -> bool:
    """Whether `key` is held. Invalid key codes are reported and read as not pressed."""
    if not _check_key(key):
        return False
    return bool(state.keypad[key])


def last_pressed_key(state: EmulatorState) -> Optional[int]:
    """Key pressed during the current polling cycle, if any."""
    key = int(state.last_key)
    return None if key == NO_KEY else key


def clear_last_key(state: EmulatorState) -> EmulatorState:
    """Forget the last pressed key; done by the polling step at the start of each frame."""
    return state.replace(last_key=jnp.asarray(NO_KEY, dtype=jnp.int32))
