"""CHIP-8 machine state structures."""

import jax
import jax.numpy as jnp
from flax.struct import dataclass, field, PyTreeNode

from chip8vm.constants import (
    FONT_DATA, FONT_START, MAX_PROGRAM_SIZE, MEMORY_SIZE, PROGRAM_START,
    REGISTER_COUNT, SCREEN_HEIGHT, SCREEN_WIDTH, STACK_SIZE,
)
from chip8vm.errors import LoadError, OutOfBounds


@dataclass(frozen=True)
class StackState:
    """Return address ring buffer for subroutine calls."""
    data: jnp.ndarray = field(default_factory=lambda: jnp.zeros(STACK_SIZE, dtype=jnp.uint16))
    pointer: int = 0


class MachineState(PyTreeNode):
    """Complete CHIP-8 machine state.

    Attributes:
        rng: PRNG key consumed by CXKK
        memory: 4096 bytes, font at 0x000, program from 0x200
        pc: Address of the next instruction to fetch
        display: Monochrome framebuffer indexed [y, x]
        stack: Return addresses and stack pointer
        delay_timer: Counts down at 60 Hz
        sound_timer: Counts down at 60 Hz, tone plays while non-zero
        keys: Bitmask of currently pressed keys (bit n = key n)
        keys_previous: Key bitmask before the latest edit, synced by a completed FX0A
        V: General purpose registers V0..VF
        I: Index register
        draw_flag: Set when the display changed since the last repaint
    """
    rng: jax.random.PRNGKey
    memory: jnp.ndarray = field(default_factory=lambda: jnp.zeros(MEMORY_SIZE, dtype=jnp.uint8))
    pc: jnp.ndarray = field(default_factory=lambda: jnp.asarray(PROGRAM_START, dtype=jnp.uint16))
    display: jnp.ndarray = field(default_factory=lambda: jnp.zeros((SCREEN_HEIGHT, SCREEN_WIDTH), dtype=jnp.bool_))
    stack: StackState = field(default_factory=StackState)
    delay_timer: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.uint8))
    sound_timer: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.uint8))
    keys: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.uint16))
    keys_previous: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.uint16))
    V: jnp.ndarray = field(default_factory=lambda: jnp.zeros(REGISTER_COUNT, dtype=jnp.uint8))
    I: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.uint16))
    draw_flag: bool = False


def create_state(rng: jax.random.PRNGKey = jax.random.PRNGKey(0), program: bytes = None) -> MachineState:
    """Create initial machine state with font data loaded and, optionally, a program."""
    state = MachineState(rng)
    state = state.replace(memory=state.memory.at[FONT_START:FONT_START + len(FONT_DATA)].set(FONT_DATA))
    if program is not None:
        state = load_program(state, program)
    return state


def load_program(state: MachineState, program: bytes) -> MachineState:
    """Copy a program image into memory starting at 0x200."""
    if len(program) > MAX_PROGRAM_SIZE:
        raise LoadError(
            f"Program is {len(program)} bytes, at most {MAX_PROGRAM_SIZE} bytes fit in memory"
        )
    if not program:
        return state
    program_array = jnp.array(list(program), dtype=jnp.uint8)
    return state.replace(memory=state.memory.at[PROGRAM_START:PROGRAM_START + len(program)].set(program_array))


def check_bounds(address: int, length: int = 1, instruction: int = None) -> None:
    """Raise OutOfBounds unless [address, address + length) lies within memory."""
    if address < 0 or address + length > MEMORY_SIZE:
        raise OutOfBounds(address, length, instruction)


def read_memory(state: MachineState, address: int, length: int, instruction: int = None) -> jnp.ndarray:
    """Bounds-checked read of `length` bytes."""
    check_bounds(address, length, instruction)
    return state.memory[address:address + length]


def write_memory(state: MachineState, address: int, values, instruction: int = None) -> MachineState:
    """Bounds-checked write of a byte sequence."""
    values = jnp.asarray(values, dtype=jnp.uint8)
    check_bounds(address, values.shape[0], instruction)
    return state.replace(memory=state.memory.at[address:address + values.shape[0]].set(values))


def clear_draw_flag(state: MachineState) -> MachineState:
    """Acknowledge that the display has been repainted."""
    return state.replace(draw_flag=False)


def set_register(state: MachineState, index: int, value: int) -> MachineState:
    """Store an 8-bit value into VX, truncating to the register width."""
    return state.replace(V=state.V.at[index].set(jnp.asarray(value & 0xFF, dtype=jnp.uint8)))


def set_index(state: MachineState, value: int) -> MachineState:
    """Store a 16-bit value into I, truncating to the register width."""
    return state.replace(I=jnp.asarray(value & 0xFFFF, dtype=jnp.uint16))


def set_pc(state: MachineState, address: int) -> MachineState:
    """Set the program counter."""
    return state.replace(pc=jnp.asarray(address & 0xFFFF, dtype=jnp.uint16))
