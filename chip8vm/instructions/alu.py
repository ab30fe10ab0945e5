"""CHIP-8 ALU operations (8xxx).

Each operation maps (VX, VY) to (new VX, new VF). A VF of None leaves the
flag register untouched. The flag is written after VX, so it wins when X is F.
"""

from typing import Optional

from chip8vm.constants import FLAG_REGISTER
from chip8vm.state import MachineState, set_register
from chip8vm.decode import DecodedInstruction, Op


def alu_set(vx: int, vy: int) -> tuple[int, Optional[int]]:
    """8XY0 - Set: VX = VY."""
    return vy, None


def alu_or(vx: int, vy: int) -> tuple[int, Optional[int]]:
    """8XY1 - Binary OR: VX |= VY, VF cleared."""
    return vx | vy, 0


def alu_and(vx: int, vy: int) -> tuple[int, Optional[int]]:
    """8XY2 - Binary AND: VX &= VY, VF cleared."""
    return vx & vy, 0


def alu_xor(vx: int, vy: int) -> tuple[int, Optional[int]]:
    """8XY3 - Logical XOR: VX ^= VY, VF cleared."""
    return vx ^ vy, 0


def alu_add(vx: int, vy: int) -> tuple[int, Optional[int]]:
    """8XY4 - Add: VX += VY, set carry flag."""
    result = vx + vy
    return result & 0xFF, int(result > 0xFF)


def alu_sub_xy(vx: int, vy: int) -> tuple[int, Optional[int]]:
    """8XY5 - Subtract: VX -= VY, VF = 1 when no borrow."""
    return (vx - vy) & 0xFF, int(vx >= vy)


def alu_shift_right(vx: int, vy: int) -> tuple[int, Optional[int]]:
    """8XY6 - Shift right: VX = VY >> 1, VF = bit shifted out of VY."""
    return vy >> 1, vy & 1


def alu_sub_yx(vx: int, vy: int) -> tuple[int, Optional[int]]:
    """8XY7 - Subtract: VX = VY - VX, VF = 1 when no borrow."""
    return (vy - vx) & 0xFF, int(vy >= vx)


def alu_shift_left(vx: int, vy: int) -> tuple[int, Optional[int]]:
    """8XYE - Shift left: VX = VY << 1, VF = bit shifted out of VY."""
    return (vy << 1) & 0xFF, (vy >> 7) & 1


ALU_OPERATIONS = {
    Op.LD_REG: alu_set,
    Op.OR: alu_or,
    Op.AND: alu_and,
    Op.XOR: alu_xor,
    Op.ADD_REG: alu_add,
    Op.SUB: alu_sub_xy,
    Op.SHR: alu_shift_right,
    Op.SUBN: alu_sub_yx,
    Op.SHL: alu_shift_left,
}


def execute_alu_operation(state: MachineState, instruction: DecodedInstruction) -> MachineState:
    """8XYN - ALU operations dispatcher."""
    vx = int(state.V[instruction.x])
    vy = int(state.V[instruction.y])

    result, vf = ALU_OPERATIONS[instruction.op](vx, vy)

    state = set_register(state, instruction.x, result)
    if vf is not None:
        state = set_register(state, FLAG_REGISTER, vf)
    return state
