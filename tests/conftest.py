"""Test configuration and fixtures for CHIP-8 interpreter tests."""

import pytest
import jax.numpy as jnp
from chipjax import create_state


@pytest.fixture
def fresh_state():
    """Provide a fresh emulator state for each test (legacy semantics)."""
    return create_state()


@pytest.fixture
def legacy_state():
    """Provide a fresh state with new functionality disabled."""
    return create_state(new_functionality=False)


@pytest.fixture
def quirk_state():
    """Provide a fresh state with CHIP-48 new functionality enabled."""
    return create_state(new_functionality=True)


def setup_sprite_in_memory(state, address, sprite_bytes):
    """Helper to put sprite data in memory."""
    return state.replace(
        memory=state.memory.at[address:address+len(sprite_bytes)].set(
            jnp.array(sprite_bytes, dtype=jnp.uint8)
        )
    )


def set_registers(state, **registers):
    """Helper to set registers by name, e.g. set_registers(state, V0=0xFE, VF=1)."""
    V = state.V
    for name, value in registers.items():
        V = V.at[int(name[1:], 16)].set(value)
    return state.replace(V=V)
