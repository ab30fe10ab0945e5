"""Run-time configuration for the emulator front ends."""

import dataclasses

from chip8vm.constants import TIMER_FREQUENCY


@dataclasses.dataclass(frozen=True)
class EmulatorConfig:
    """Knobs that do not affect instruction semantics.

    Attributes:
        scale: Window pixels per CHIP-8 pixel
        instructions_per_frame: Interpreter steps between two timer ticks
        fps: Frames per second, also the timer frequency
        color_scheme: Name understood by `rendering.create_color_scheme`
        tone_frequency: Buzzer pitch in Hz
        sample_rate: Mixer sample rate in Hz
        volume: Buzzer amplitude in [0, 1]
        seed: Seed for the CXNN random generator
    """
    scale: int = 10
    instructions_per_frame: int = 10
    fps: int = TIMER_FREQUENCY
    color_scheme: str = "white"
    tone_frequency: int = 440
    sample_rate: int = 44100
    volume: float = 0.1
    seed: int = 0

    def __post_init__(self):
        if self.scale < 1:
            raise ValueError(f"scale must be at least 1, got {self.scale}")
        if self.instructions_per_frame < 1:
            raise ValueError(
                f"instructions_per_frame must be at least 1, got {self.instructions_per_frame}"
            )
        if self.fps < 1:
            raise ValueError(f"fps must be at least 1, got {self.fps}")
        if not 0.0 <= self.volume <= 1.0:
            raise ValueError(f"volume must be in [0, 1], got {self.volume}")
