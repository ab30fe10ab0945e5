"""CHIP-8 control flow instructions."""

from chip8vm.state import MachineState, set_pc
from chip8vm.decode import DecodedInstruction
from chip8vm.stack import push


def execute_jump(state: MachineState, instruction: DecodedInstruction) -> MachineState:
    """1NNN - Jump to address NNN."""
    return set_pc(state, instruction.nnn)


def execute_call(state: MachineState, instruction: DecodedInstruction) -> MachineState:
    """2NNN - Call subroutine at NNN.

    The pushed address is the (already advanced) program counter, i.e. the
    instruction after the call.
    """
    state = state.replace(stack=push(state.stack, int(state.pc)))
    return execute_jump(state, instruction)


def make_skip_instruction(condition_fn):
    """Factory for skip instructions."""
    def skip_instruction(state: MachineState, instruction: DecodedInstruction) -> MachineState:
        if condition_fn(state, instruction):
            return set_pc(state, int(state.pc) + 2)
        return state
    return skip_instruction


def _key_pressed(state: MachineState, key: int) -> bool:
    # Values above 0xF address no key and read as released
    return bool((int(state.keys) >> key) & 1)


execute_skip_if_equal_immediate = make_skip_instruction(
    lambda state, inst: int(state.V[inst.x]) == inst.nn
)

execute_skip_if_not_equal_immediate = make_skip_instruction(
    lambda state, inst: int(state.V[inst.x]) != inst.nn
)

execute_skip_if_equal_register = make_skip_instruction(
    lambda state, inst: int(state.V[inst.x]) == int(state.V[inst.y])
)

execute_skip_if_not_equal_register = make_skip_instruction(
    lambda state, inst: int(state.V[inst.x]) != int(state.V[inst.y])
)

execute_skip_if_key = make_skip_instruction(
    lambda state, inst: _key_pressed(state, int(state.V[inst.x]))
)

execute_skip_if_not_key = make_skip_instruction(
    lambda state, inst: not _key_pressed(state, int(state.V[inst.x]))
)


def execute_jump_with_offset(state: MachineState, instruction: DecodedInstruction) -> MachineState:
    """BNNN - Jump to address NNN + V0.

    The target is not masked to 12 bits; a target past the end of memory
    faults on the next fetch.
    """
    return set_pc(state, instruction.nnn + int(state.V[0]))
