"""Exceptions raised by the CHIP-8 interpreter."""

from typing import Optional


class Chip8Error(Exception):
    """Base class for interpreter errors."""


class LoadError(Chip8Error):
    """Program image could not be placed in memory."""


class OutOfBounds(Chip8Error):
    """Instruction fetch or data access outside of the 4 KiB address space."""

    def __init__(self, address: int, length: int = 1, instruction: Optional[int] = None,
                 data: bytes = b""):
        self.address = address
        self.length = length
        self.instruction = instruction
        self.data = data
        message = f"Memory access [0x{address:04X}, 0x{address + length:04X}) is out of bounds"
        if instruction is not None:
            message += f" (instruction 0x{instruction:04X})"
        if data:
            message += " (read " + " ".join(f"{b:02X}" for b in data) + ")"
        super().__init__(message)


class UnknownOpcode(Chip8Error):
    """Instruction word that does not decode to any CHIP-8 operation."""

    def __init__(self, instruction: int, address: Optional[int] = None):
        self.instruction = instruction
        self.address = address
        nibbles = " ".join(f"{(instruction >> shift) & 0xF:X}" for shift in (12, 8, 4, 0))
        message = f"Unknown opcode 0x{instruction:04X} ({nibbles})"
        if address is not None:
            message += f" at 0x{address:03X}"
        super().__init__(message)
