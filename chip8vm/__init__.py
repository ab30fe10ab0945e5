"""CHIP-8 interpreter package."""

from chip8vm.state import MachineState, StackState, create_state, load_program, clear_draw_flag
from chip8vm.emulator import execute, fetch, step, run_frame, tick_timers, load_rom
from chip8vm.decode import DecodedInstruction, Op, decode
from chip8vm.errors import Chip8Error, LoadError, OutOfBounds, UnknownOpcode
from chip8vm.input import press_key, release_key, set_keys, is_pressed
from chip8vm.constants import *
from chip8vm.rendering import display_to_rgb, create_color_scheme

__all__ = [
    "MachineState",
    "StackState",
    "create_state",
    "load_program",
    "clear_draw_flag",
    "fetch",
    "execute",
    "step",
    "run_frame",
    "tick_timers",
    "load_rom",
    "DecodedInstruction",
    "Op",
    "decode",
    "Chip8Error",
    "LoadError",
    "OutOfBounds",
    "UnknownOpcode",
    "press_key",
    "release_key",
    "set_keys",
    "is_pressed",
    "PROGRAM_START",
    "FONT_START",
    "MEMORY_SIZE",
    "SCREEN_WIDTH",
    "SCREEN_HEIGHT",
    "display_to_rgb",
    "create_color_scheme",
]
