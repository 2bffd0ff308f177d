"""Synthetic bracelet images shared by the tests."""

import math

import numpy as np
import pytest

RED = (255, 0, 0)
YELLOW = (255, 255, 0)
GREEN = (0, 255, 0)
BLUE = (0, 0, 255)
WHITE = (255, 255, 255)


def draw_ring(size, radius, thickness, colors, channels=3):
    """Draw a ring around the image center split into equal arcs of the given colors.

    Arcs start at angle 0 (pointing right) and run in increasing angle
    (clockwise on screen, since y points down).
    """
    image = np.zeros((size, size, channels), dtype=np.uint8)
    if channels == 4:
        image[..., 3] = 255

    rows, cols = np.mgrid[0:size, 0:size]
    delta_x = cols - size / 2
    delta_y = rows - size / 2
    theta = np.arctan2(delta_y, delta_x) % (2 * math.pi)
    arc_index = np.minimum(
        (theta // (2 * math.pi / len(colors))).astype(int), len(colors) - 1)

    band = np.abs(np.hypot(delta_x, delta_y) - radius) <= thickness / 2
    palette = np.array(colors, dtype=np.uint8)
    image[band, :3] = palette[arc_index[band]]
    return image


@pytest.fixture
def four_color_ring():
    """400x400 ring of radius 150, arcs red, yellow, green, blue."""
    return draw_ring(400, 150, 20, [RED, YELLOW, GREEN, BLUE])


@pytest.fixture
def white_ring():
    """300x300 white ring of radius 100."""
    return draw_ring(300, 100, 16, [WHITE])


@pytest.fixture
def blank_field():
    """Edge field without any edges."""
    return np.zeros((60, 120), dtype=np.uint8)
