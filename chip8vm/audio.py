"""Buzzer output: a square wave played while the sound timer runs."""

import numpy as np
import pygame


def square_wave(frequency: int, sample_rate: int, volume: float = 0.1) -> np.ndarray:
    """One second of a signed 16-bit mono square wave.

    Args:
        frequency: Tone frequency in Hz
        sample_rate: Samples per second
        volume: Amplitude as a fraction of full scale

    Returns:
        int16 array of `sample_rate` samples alternating between +A and -A
    """
    if frequency <= 0 or sample_rate <= 0:
        raise ValueError("frequency and sample_rate must be positive")
    amplitude = int(32767 * volume)
    half_period = max(1, sample_rate // (2 * frequency))
    phase = (np.arange(sample_rate) // half_period) % 2
    return np.where(phase == 0, amplitude, -amplitude).astype(np.int16)


class Beeper:
    """Plays the tone in a loop whenever `update` sees a running sound timer."""

    def __init__(self, frequency: int = 440, sample_rate: int = 44100, volume: float = 0.1):
        if pygame.mixer.get_init() is None:
            pygame.mixer.init(frequency=sample_rate, size=-16, channels=1)
        mixer_rate, _, channels = pygame.mixer.get_init()
        samples = square_wave(frequency, mixer_rate, volume)
        if channels > 1:
            samples = np.repeat(samples[:, None], channels, axis=1)
        self.sound = pygame.sndarray.make_sound(samples)
        self.playing = False

    def update(self, sound_timer: int):
        """Start or stop the tone to match the sound timer."""
        if sound_timer > 0 and not self.playing:
            self.sound.play(loops=-1)
            self.playing = True
        elif sound_timer == 0 and self.playing:
            self.sound.stop()
            self.playing = False

    def close(self):
        if self.playing:
            self.sound.stop()
            self.playing = False
