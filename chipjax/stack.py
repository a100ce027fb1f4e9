"""CHIP-8 stack operations."""

import jax.numpy as jnp
from jax.experimental import checkify

from chipjax.constants import STACK_SIZE
from chipjax.logging import report_if
from chipjax.state import StackState


def push(stack: StackState, address: jnp.ndarray) -> StackState:
    """Push address onto stack. Overflowing a full stack halts the machine."""
    checkify.check(
        stack.pointer < STACK_SIZE,
        "Stack overflow: call with {} return addresses already on the stack",
        stack.pointer,
    )
    new_data = stack.data.at[stack.pointer].set(jnp.astype(address, jnp.uint16), mode="drop")
    return stack.replace(data=new_data, pointer=jnp.minimum(stack.pointer + 1, STACK_SIZE))


def pop(stack: StackState) -> tuple[StackState, jnp.ndarray]:
    """Pop address from stack.

    Popping an empty stack is reported and yields address 0.
    """
    empty = stack.pointer == 0
    report_if(empty, "ERROR", "Stack underflow: return with an empty stack, jumping to 0x000")

    new_pointer = jnp.maximum(stack.pointer - 1, 0)
    popped_address = jnp.where(empty, jnp.zeros((), jnp.uint16), stack.data[new_pointer])
    new_data = stack.data.at[new_pointer].set(jnp.where(empty, stack.data[new_pointer], 0))
    return stack.replace(data=new_data, pointer=new_pointer), popped_address
