"""CHIP-8 rendering utilities for visualization."""

from typing import Tuple

import jax.numpy as jnp
import numpy as np

COLOR_SCHEMES = {
    "white": ((255, 255, 255), (0, 0, 0)),  # White on black
    "classic": ((0, 255, 0), (0, 0, 0)),  # Green on black
    "amber": ((255, 176, 0), (0, 0, 0)),  # Amber on black
    "blue": ((0, 255, 255), (0, 0, 64)),  # Cyan on dark blue
    "retro": ((255, 255, 0), (64, 0, 64)),  # Yellow on purple
}


def display_to_rgb(
    display: jnp.ndarray,
    scale: int = 8,
    on_color: Tuple[int, int, int] = (255, 255, 255),
    off_color: Tuple[int, int, int] = (0, 0, 0),
) -> np.ndarray:
    """Convert CHIP-8 boolean display to RGB array with optional upscaling.

    Args:
        display: Boolean array of shape (32, 64) indexed [y, x]
        scale: Upscaling factor for better visibility (default: 8x)
        on_color: RGB color for "on" pixels (default: white)
        off_color: RGB color for "off" pixels (default: black)

    Returns:
        RGB array of shape (height*scale, width*scale, 3) with uint8 values
    """
    pixels = np.array(display, dtype=np.bool_)
    height, width = pixels.shape

    rgb_frame = np.zeros((height, width, 3), dtype=np.uint8)

    rgb_frame[pixels] = on_color
    rgb_frame[~pixels] = off_color

    # Nearest neighbour upscaling
    if scale > 1:
        rgb_frame = np.repeat(np.repeat(rgb_frame, scale, axis=0), scale, axis=1)

    return rgb_frame


def create_color_scheme(
    scheme: str = "white",
) -> Tuple[Tuple[int, int, int], Tuple[int, int, int]]:
    """Get predefined color schemes for CHIP-8 rendering.

    Args:
        scheme: Color scheme name ("white", "classic", "amber", "blue", "retro")

    Returns:
        Tuple of (on_color, off_color) as RGB tuples
    """
    if scheme not in COLOR_SCHEMES:
        raise ValueError(
            f"Unknown color scheme '{scheme}'. Available: {list(COLOR_SCHEMES.keys())}"
        )

    return COLOR_SCHEMES[scheme]
