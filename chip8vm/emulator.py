"""Main CHIP-8 interpreter execution engine."""

from typing import Callable, Optional

import jax.numpy as jnp
from chip8vm.state import MachineState, load_program, set_pc
from chip8vm.decode import DecodedInstruction, Op, decode
from chip8vm.constants import MEMORY_SIZE
from chip8vm.errors import LoadError, OutOfBounds, UnknownOpcode
from chip8vm.logging import ConsoleLogger
from chip8vm.instructions.system import execute_clear_screen, execute_return
from chip8vm.instructions.control_flow import (
    execute_jump, execute_call, execute_skip_if_equal_immediate,
    execute_skip_if_not_equal_immediate, execute_skip_if_equal_register,
    execute_skip_if_not_equal_register, execute_jump_with_offset,
    execute_skip_if_key, execute_skip_if_not_key
)
from chip8vm.instructions.alu import execute_alu_operation
from chip8vm.instructions.memory import execute_set, execute_add, execute_set_index, execute_random
from chip8vm.instructions.display import execute_display
from chip8vm.instructions.misc import (
    execute_get_delay_timer, execute_wait_for_key, execute_set_delay_timer,
    execute_set_sound_timer, execute_add_to_index, execute_font_character,
    execute_bcd_conversion, execute_store_registers, execute_load_registers
)

logger = ConsoleLogger(name="interpreter")

Handler = Callable[[MachineState, DecodedInstruction], MachineState]

HANDLERS: dict[Op, Handler] = {
    Op.CLS: execute_clear_screen,
    Op.RET: execute_return,
    Op.JP: execute_jump,
    Op.CALL: execute_call,
    Op.SE_IMM: execute_skip_if_equal_immediate,
    Op.SNE_IMM: execute_skip_if_not_equal_immediate,
    Op.SE_REG: execute_skip_if_equal_register,
    Op.LD_IMM: execute_set,
    Op.ADD_IMM: execute_add,
    Op.LD_REG: execute_alu_operation,
    Op.OR: execute_alu_operation,
    Op.AND: execute_alu_operation,
    Op.XOR: execute_alu_operation,
    Op.ADD_REG: execute_alu_operation,
    Op.SUB: execute_alu_operation,
    Op.SHR: execute_alu_operation,
    Op.SUBN: execute_alu_operation,
    Op.SHL: execute_alu_operation,
    Op.SNE_REG: execute_skip_if_not_equal_register,
    Op.LD_INDEX: execute_set_index,
    Op.JP_V0: execute_jump_with_offset,
    Op.RND: execute_random,
    Op.DRW: execute_display,
    Op.SKP: execute_skip_if_key,
    Op.SKNP: execute_skip_if_not_key,
    Op.LD_VX_DT: execute_get_delay_timer,
    Op.LD_VX_K: execute_wait_for_key,
    Op.LD_DT_VX: execute_set_delay_timer,
    Op.LD_ST_VX: execute_set_sound_timer,
    Op.ADD_INDEX: execute_add_to_index,
    Op.LD_FONT: execute_font_character,
    Op.LD_BCD: execute_bcd_conversion,
    Op.LD_MEM_VX: execute_store_registers,
    Op.LD_VX_MEM: execute_load_registers,
}


def execute(state: MachineState, instruction: int) -> MachineState:
    """Execute single CHIP-8 instruction.

    The program counter is expected to already point past the instruction;
    only jumps, calls, returns, skips and FX0A modify it here.

    Raises:
        UnknownOpcode: if the word does not decode
        OutOfBounds: if the instruction touches memory outside 0x000-0xFFF
    """
    decoded_instruction = decode(instruction)
    return HANDLERS[decoded_instruction.op](state, decoded_instruction)


def fetch(state: MachineState) -> tuple[MachineState, int]:
    """Fetch next instruction from memory and advance the program counter by 2."""
    pc = int(state.pc)
    if pc + 1 >= MEMORY_SIZE:
        data = bytes(int(b) for b in state.memory[pc:])
        raise OutOfBounds(pc, 2, data=data)
    instruction = (int(state.memory[pc]) << 8) | int(state.memory[pc + 1])
    return set_pc(state, pc + 2), instruction


def step(state: MachineState, log: Optional[ConsoleLogger] = None) -> MachineState:
    """Run one fetch-decode-execute cycle.

    Unknown opcodes are reported and skipped. OutOfBounds propagates to the
    caller, which still holds the state from before the faulting step.
    """
    log = log or logger
    address = int(state.pc)
    state, instruction = fetch(state)
    try:
        decoded_instruction = decode(instruction, address)
    except UnknownOpcode as e:
        log.warning(str(e))
        return state
    return HANDLERS[decoded_instruction.op](state, decoded_instruction)


def tick_timers(state: MachineState) -> MachineState:
    """Decrement both timers by one, stopping at zero. Call at 60 Hz."""
    return state.replace(
        delay_timer=jnp.maximum(state.delay_timer, 1) - 1,
        sound_timer=jnp.maximum(state.sound_timer, 1) - 1,
    )


def run_frame(state: MachineState, instructions_per_frame: int, log: Optional[ConsoleLogger] = None,
              timer_ticks: int = 1) -> MachineState:
    """Execute one display frame worth of instructions, then tick the timers.

    `timer_ticks` is the number of 60 Hz periods the frame covered; callers
    pacing by wall-clock time may pass 0 or several.
    """
    for _ in range(instructions_per_frame):
        state = step(state, log)
    for _ in range(timer_ticks):
        state = tick_timers(state)
    return state


def load_rom(state: MachineState, filename: str) -> MachineState:
    """Load ROM data into CHIP-8 memory starting at 0x200."""
    try:
        with open(filename, 'rb') as f:
            rom_data = f.read()
    except OSError as e:
        raise LoadError(f"Could not read ROM file '{filename}': {e.strerror}") from e
    return load_program(state, rom_data)
