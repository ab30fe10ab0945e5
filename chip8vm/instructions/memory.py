"""CHIP-8 memory and register operations."""

import jax
import jax.numpy as jnp
from chip8vm.state import MachineState, set_index, set_register
from chip8vm.decode import DecodedInstruction


def execute_set(state: MachineState, instruction: DecodedInstruction) -> MachineState:
    """6XNN - Set VX = NN."""
    return set_register(state, instruction.x, instruction.nn)


def execute_add(state: MachineState, instruction: DecodedInstruction) -> MachineState:
    """7XNN - Add NN to VX, wrapping, VF untouched."""
    return set_register(state, instruction.x, int(state.V[instruction.x]) + instruction.nn)


def execute_set_index(state: MachineState, instruction: DecodedInstruction) -> MachineState:
    """ANNN - Set I = NNN."""
    return set_index(state, instruction.nnn)


def execute_random(state: MachineState, instruction: DecodedInstruction) -> MachineState:
    """CXNN - Set VX = random & NN."""
    key, subkey = jax.random.split(state.rng)
    random_value = int(jax.random.bits(subkey, dtype=jnp.uint8))
    state = set_register(state, instruction.x, random_value & instruction.nn)
    return state.replace(rng=key)
