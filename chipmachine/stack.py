"""CHIP-8 stack operations."""

import jax.numpy as jnp
from jax.experimental import checkify

from chipmachine.constants import STACK_SIZE
from chipmachine.state import StackState


def push(stack: StackState, address: jnp.ndarray) -> StackState:
    """Push return address onto stack."""
    checkify.check(
        stack.pointer < STACK_SIZE,
        "stack overflow: call to a subroutine with {} return addresses already stacked",
        stack.pointer,
    )
    new_data = stack.data.at[stack.pointer].set(jnp.asarray(address).astype(jnp.uint16))
    return stack.replace(data=new_data, pointer=stack.pointer + 1)


def pop(stack: StackState) -> tuple[StackState, jnp.ndarray]:
    """Pop return address from stack."""
    checkify.check(stack.pointer > 0, "stack underflow: return with an empty stack")
    new_pointer = stack.pointer - 1
    popped_address = stack.data[new_pointer]
    new_data = stack.data.at[new_pointer].set(0)
    return stack.replace(data=new_data, pointer=new_pointer), popped_address
