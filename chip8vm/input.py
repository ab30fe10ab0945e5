"""Keypad latch editing.

Keys are stored as a 16-bit mask, bit n set while key n is held. Every
edit first copies the current mask into `keys_previous` so FX0A can see
which key was just released.
"""

import jax.numpy as jnp
from chip8vm.constants import KEY_COUNT
from chip8vm.state import MachineState


def _check_key(key: int):
    if not 0 <= key < KEY_COUNT:
        raise ValueError(f"Key must be in [0, {KEY_COUNT}), got {key}")


def set_keys(state: MachineState, mask: int) -> MachineState:
    """Replace the whole key mask, remembering the old one."""
    return state.replace(
        keys_previous=state.keys,
        keys=jnp.asarray(mask & 0xFFFF, dtype=jnp.uint16),
    )


def press_key(state: MachineState, key: int) -> MachineState:
    """Mark key as held."""
    _check_key(key)
    return set_keys(state, int(state.keys) | (1 << key))


def release_key(state: MachineState, key: int) -> MachineState:
    """Mark key as released."""
    _check_key(key)
    return set_keys(state, int(state.keys) & ~(1 << key))


def is_pressed(state: MachineState, key: int) -> bool:
    """Whether key is currently held."""
    _check_key(key)
    return bool((int(state.keys) >> key) & 1)


def pressed_keys(state: MachineState) -> list[int]:
    """All currently held keys in ascending order."""
    keys = int(state.keys)
    return [key for key in range(KEY_COUNT) if (keys >> key) & 1]
