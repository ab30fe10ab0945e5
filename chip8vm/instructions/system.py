"""CHIP-8 system instructions (0x0xxx)."""

import jax.numpy as jnp
from chip8vm.state import MachineState, set_pc
from chip8vm.decode import DecodedInstruction
from chip8vm.stack import pop


def execute_clear_screen(state: MachineState, instruction: DecodedInstruction) -> MachineState:
    """00E0 - Clear display."""
    return state.replace(display=jnp.zeros_like(state.display), draw_flag=True)


def execute_return(state: MachineState, instruction: DecodedInstruction) -> MachineState:
    """00EE - Return from subroutine."""
    stack, address = pop(state.stack)
    return set_pc(state.replace(stack=stack), address)
