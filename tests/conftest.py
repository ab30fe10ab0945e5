"""Test configuration and fixtures for CHIP-8 interpreter tests."""

import pytest
import jax.numpy as jnp
from chip8vm import create_state, PROGRAM_START


@pytest.fixture
def fresh_state():
    """Provide a fresh machine state for each test."""
    return create_state()


def set_registers(state, **registers):
    """Helper to assign registers by name, e.g. set_registers(state, V1=3, VF=1)."""
    V = state.V
    for name, value in registers.items():
        V = V.at[int(name[1:], 16)].set(value)
    return state.replace(V=V)


def setup_sprite_in_memory(state, address, sprite_bytes):
    """Helper to put sprite data in memory."""
    return state.replace(
        memory=state.memory.at[address:address+len(sprite_bytes)].set(
            jnp.array(sprite_bytes, dtype=jnp.uint8)
        )
    )


def program(*words):
    """Assemble 16-bit instruction words into a big-endian program image."""
    return b"".join(word.to_bytes(2, "big") for word in words)


def state_with_program(*words):
    """Fresh state with the given instruction words loaded at 0x200."""
    state = create_state(program=program(*words))
    assert state.pc == PROGRAM_START
    return state
