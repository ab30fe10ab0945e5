"""CHIP-8 stack operations.

The pointer wraps modulo the stack size in both directions, so sixteen
nested calls overwrite the oldest return address and a return on an empty
stack reads slot 15.
"""

import jax.numpy as jnp
from chip8vm.constants import STACK_SIZE
from chip8vm.state import StackState


def push(stack: StackState, address: int) -> StackState:
    """Push address onto stack."""
    new_data = stack.data.at[stack.pointer].set(jnp.asarray(address & 0xFFFF, dtype=jnp.uint16))
    return stack.replace(data=new_data, pointer=(stack.pointer + 1) % STACK_SIZE)


def pop(stack: StackState) -> tuple[StackState, int]:
    """Pop address from stack."""
    new_pointer = (stack.pointer - 1) % STACK_SIZE
    return stack.replace(pointer=new_pointer), int(stack.data[new_pointer])
