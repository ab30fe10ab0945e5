"""pygame window for running a CHIP-8 program interactively."""

import pygame

from chip8vm.audio import Beeper
from chip8vm.config import EmulatorConfig
from chip8vm.constants import SCREEN_HEIGHT, SCREEN_WIDTH, TIMER_FREQUENCY
from chip8vm.emulator import run_frame
from chip8vm.input import press_key, release_key
from chip8vm.logging import ConsoleLogger
from chip8vm.rendering import create_color_scheme, display_to_rgb
from chip8vm.state import MachineState, clear_draw_flag

# The left-hand 4x4 block of a QWERTY keyboard mirrors the COSMAC VIP keypad
KEY_MAP = {
    pygame.K_1: 0x1, pygame.K_2: 0x2, pygame.K_3: 0x3, pygame.K_4: 0xC,
    pygame.K_q: 0x4, pygame.K_w: 0x5, pygame.K_e: 0x6, pygame.K_r: 0xD,
    pygame.K_a: 0x7, pygame.K_s: 0x8, pygame.K_d: 0x9, pygame.K_f: 0xE,
    pygame.K_z: 0xA, pygame.K_x: 0x0, pygame.K_c: 0xB, pygame.K_v: 0xF,
}

TIMER_PERIOD_MS = 1000 / TIMER_FREQUENCY


def due_timer_ticks(elapsed_ms: float, carry_ms: float = 0.0) -> tuple[int, float]:
    """Whole timer periods covered by `elapsed_ms` plus the leftover `carry_ms`.

    Returns:
        The number of ticks due and the new leftover in milliseconds
    """
    ticks, carry_ms = divmod(carry_ms + elapsed_ms, TIMER_PERIOD_MS)
    return int(ticks), carry_ms


def handle_events(state: MachineState, events) -> tuple[MachineState, bool]:
    """Apply keyboard events to the key latch.

    Returns:
        The updated state and whether the window should stay open
    """
    running = True
    for event in events:
        if event.type == pygame.QUIT:
            running = False
        elif event.type == pygame.KEYDOWN:
            if event.key == pygame.K_ESCAPE:
                running = False
            elif event.key in KEY_MAP:
                state = press_key(state, KEY_MAP[event.key])
        elif event.type == pygame.KEYUP:
            if event.key in KEY_MAP:
                state = release_key(state, KEY_MAP[event.key])
    return state, running


def draw(screen: pygame.Surface, state: MachineState, config: EmulatorConfig):
    """Blit the framebuffer onto the window surface."""
    on_color, off_color = create_color_scheme(config.color_scheme)
    frame = display_to_rgb(state.display, config.scale, on_color, off_color)
    # surfarray expects (width, height, 3)
    pygame.surfarray.blit_array(screen, frame.swapaxes(0, 1))
    pygame.display.flip()


def run_emulator(state: MachineState, config: EmulatorConfig, logger: ConsoleLogger, title: str = "CHIP-8") -> MachineState:
    """Main emulator loop: input, N instructions and timers, repaint, audio.

    Timers tick by elapsed wall-clock time, so they keep 60 Hz even when a
    frame runs long.

    OutOfBounds raised by the interpreter ends the loop and propagates.
    """
    pygame.init()
    screen = pygame.display.set_mode((SCREEN_WIDTH * config.scale, SCREEN_HEIGHT * config.scale))
    pygame.display.set_caption(title)
    clock = pygame.time.Clock()

    beeper = None
    try:
        beeper = Beeper(config.tone_frequency, config.sample_rate, config.volume)
    except pygame.error as e:
        logger.warning(f"Audio disabled: {e}")

    logger.info(f"Running at {config.instructions_per_frame} instructions/frame, {config.fps} FPS")
    draw(screen, state, config)

    running = True
    carry_ms = 0.0
    try:
        while running:
            elapsed_ms = clock.tick(config.fps)

            state, running = handle_events(state, pygame.event.get())
            if not running:
                break

            ticks, carry_ms = due_timer_ticks(elapsed_ms, carry_ms)
            state = run_frame(state, config.instructions_per_frame, logger, timer_ticks=ticks)

            if state.draw_flag:
                draw(screen, state, config)
                state = clear_draw_flag(state)

            if beeper is not None:
                beeper.update(int(state.sound_timer))
    finally:
        if beeper is not None:
            beeper.close()
        pygame.quit()

    return state
