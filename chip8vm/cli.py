"""Command line entry point.

    chip8vm ROM [--scale N] [--ipf N] [--fps N] [--colors NAME] [--seed N]
    chip8vm ROM --headless --frames N

Without a ROM argument the path is read from an interactive prompt.
"""

import argparse
import sys
from typing import Optional, Sequence

import jax
from tqdm import tqdm

from chip8vm.config import EmulatorConfig
from chip8vm.emulator import load_rom, run_frame
from chip8vm.errors import LoadError, OutOfBounds
from chip8vm.input import pressed_keys
from chip8vm.logging import ConsoleLogger
from chip8vm.rendering import COLOR_SCHEMES
from chip8vm.state import MachineState, create_state


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="chip8vm",
        description="CHIP-8 interpreter",
    )
    parser.add_argument(
        "rom",
        nargs="?",
        help="Path to a CHIP-8 program image (prompted for when omitted)",
    )
    parser.add_argument(
        "--scale",
        type=int,
        default=EmulatorConfig.scale,
        help="Window pixels per CHIP-8 pixel",
    )
    parser.add_argument(
        "--ipf",
        type=int,
        default=EmulatorConfig.instructions_per_frame,
        help="Instructions executed per frame",
    )
    parser.add_argument(
        "--fps",
        type=int,
        default=EmulatorConfig.fps,
        help="Frames per second (timers tick once per frame)",
    )
    parser.add_argument(
        "--colors",
        choices=sorted(COLOR_SCHEMES),
        default=EmulatorConfig.color_scheme,
        help="Display color scheme",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=EmulatorConfig.seed,
        help="Seed for the random number instruction",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        default="INFO",
        help="Minimum level of diagnostics to print",
    )
    parser.add_argument(
        "--headless",
        action="store_true",
        help="Run without a window for a fixed number of frames",
    )
    parser.add_argument(
        "--frames",
        type=int,
        default=600,
        help="Frames to run in headless mode",
    )
    return parser


def config_from_args(args: argparse.Namespace) -> EmulatorConfig:
    return EmulatorConfig(
        scale=args.scale,
        instructions_per_frame=args.ipf,
        fps=args.fps,
        color_scheme=args.colors,
        seed=args.seed,
    )


def prompt_rom_path() -> Optional[str]:
    """Ask for a ROM path on stdin, None on end of input."""
    try:
        path = input("Enter ROM file: ").strip()
    except EOFError:
        return None
    return path or None


def format_registers(state: MachineState) -> str:
    registers = " ".join(f"V{i:X}={int(v):02X}" for i, v in enumerate(state.V))
    keys = "".join(f"{key:X}" for key in pressed_keys(state)) or "-"
    return (
        f"PC={int(state.pc):03X} I={int(state.I):03X} "
        f"DT={int(state.delay_timer)} ST={int(state.sound_timer)} K={keys} {registers}"
    )


def run_headless(state: MachineState, config: EmulatorConfig, frames: int, logger: ConsoleLogger) -> MachineState:
    """Run a fixed number of frames without a window."""
    for _ in tqdm(range(frames), desc="Frames", unit="frame"):
        state = run_frame(state, config.instructions_per_frame, logger)
    logger.info(format_registers(state))
    return state


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logger = ConsoleLogger(name="chip8vm", log_level=args.log_level)

    try:
        config = config_from_args(args)
    except ValueError as e:
        parser.error(str(e))

    rom_path = args.rom or prompt_rom_path()
    if rom_path is None:
        logger.error("No ROM file given")
        return 2

    state = create_state(jax.random.PRNGKey(config.seed))
    try:
        state = load_rom(state, rom_path)
    except LoadError as e:
        logger.critical(str(e))
        return 1
    logger.info(f"Loaded {rom_path}")

    try:
        if args.headless:
            run_headless(state, config, args.frames, logger)
        else:
            from chip8vm.frontend import run_emulator
            run_emulator(state, config, logger, title=f"CHIP-8 - {rom_path}")
    except OutOfBounds as e:
        logger.critical(f"Interpreter halted: {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
