"""CHIP-8 miscellaneous instructions (Fxxx)."""

import jax.numpy as jnp
from chip8vm.constants import FONT_START, GLYPH_SIZE, KEY_COUNT
from chip8vm.state import MachineState, read_memory, set_index, set_pc, set_register, write_memory
from chip8vm.decode import DecodedInstruction


def execute_get_delay_timer(state: MachineState, instruction: DecodedInstruction) -> MachineState:
    """FX07 - Set VX to delay timer value."""
    return set_register(state, instruction.x, int(state.delay_timer))


def execute_set_delay_timer(state: MachineState, instruction: DecodedInstruction) -> MachineState:
    """FX15 - Set delay timer to VX."""
    return state.replace(delay_timer=state.V[instruction.x])


def execute_set_sound_timer(state: MachineState, instruction: DecodedInstruction) -> MachineState:
    """FX18 - Set sound timer to VX."""
    return state.replace(sound_timer=state.V[instruction.x])


def execute_add_to_index(state: MachineState, instruction: DecodedInstruction) -> MachineState:
    """FX1E - Add VX to I register, VF untouched."""
    return set_index(state, int(state.I) + int(state.V[instruction.x]))


def released_key(keys_previous: int, keys: int):
    """Lowest key that was held in `keys_previous` and is up in `keys`, or None."""
    for key in range(KEY_COUNT):
        if (keys_previous >> key) & 1 and not (keys >> key) & 1:
            return key
    return None


def execute_wait_for_key(state: MachineState, instruction: DecodedInstruction) -> MachineState:
    """FX0A - Wait for a key release and store the key in VX.

    Without a release the program counter is rewound so the instruction runs
    again on the next step. A completed wait consumes the release by syncing
    `keys_previous` to the current latch, so a later FX0A needs a new one.
    """
    key = released_key(int(state.keys_previous), int(state.keys))
    if key is None:
        return set_pc(state, int(state.pc) - 2)
    state = state.replace(keys_previous=state.keys)
    return set_register(state, instruction.x, key)


def execute_font_character(state: MachineState, instruction: DecodedInstruction) -> MachineState:
    """FX29 - Set I to location of sprite for digit VX."""
    digit = int(state.V[instruction.x]) % 16
    return set_index(state, FONT_START + digit * GLYPH_SIZE)


def execute_bcd_conversion(state: MachineState, instruction: DecodedInstruction) -> MachineState:
    """FX33 - Store BCD representation of VX at I, I+1, I+2."""
    value = int(state.V[instruction.x])
    digits = [value // 100, (value // 10) % 10, value % 10]
    return write_memory(state, int(state.I), digits, instruction.raw)


def execute_store_registers(state: MachineState, instruction: DecodedInstruction) -> MachineState:
    """FX55 - Store V0 through VX in memory starting at I, then I += X + 1."""
    count = instruction.x + 1
    state = write_memory(state, int(state.I), state.V[:count], instruction.raw)
    return set_index(state, int(state.I) + count)


def execute_load_registers(state: MachineState, instruction: DecodedInstruction) -> MachineState:
    """FX65 - Load V0 through VX from memory starting at I, then I += X + 1."""
    count = instruction.x + 1
    values = read_memory(state, int(state.I), count, instruction.raw)
    state = state.replace(V=state.V.at[:count].set(jnp.asarray(values, dtype=jnp.uint8)))
    return set_index(state, int(state.I) + count)
