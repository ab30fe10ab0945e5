"""CHIP-8 display operations."""

import jax.numpy as jnp
from chip8vm.constants import FLAG_REGISTER, SCREEN_HEIGHT, SCREEN_WIDTH
from chip8vm.state import MachineState, read_memory, set_register
from chip8vm.decode import DecodedInstruction

# Bit masks for the 8 columns of a sprite row, most significant bit first
_COLUMN_SHIFTS = jnp.arange(7, -1, -1, dtype=jnp.uint8)


def execute_display(state: MachineState, instruction: DecodedInstruction) -> MachineState:
    """DXYN - Draw sprite at (VX, VY) with height N.

    The origin wraps around the screen but the sprite itself is clipped at
    the right and bottom edges. Only the rows that land on screen are read
    from memory.
    """
    sprite_x = int(state.V[instruction.x]) % SCREEN_WIDTH
    sprite_y = int(state.V[instruction.y]) % SCREEN_HEIGHT

    rows = min(instruction.n, SCREEN_HEIGHT - sprite_y)
    cols = min(8, SCREEN_WIDTH - sprite_x)

    sprite_bytes = read_memory(state, int(state.I), rows, instruction.raw)
    sprite = ((sprite_bytes[:, None] >> _COLUMN_SHIFTS[None, :]) & 1).astype(jnp.bool_)[:, :cols]

    region = state.display[sprite_y:sprite_y + rows, sprite_x:sprite_x + cols]
    collision = bool(jnp.any(region & sprite))

    state = state.replace(
        display=state.display.at[sprite_y:sprite_y + rows, sprite_x:sprite_x + cols].set(region ^ sprite),
        draw_flag=True,
    )
    return set_register(state, FLAG_REGISTER, int(collision))
