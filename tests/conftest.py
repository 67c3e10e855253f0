"""
Shared fixtures: small synthetic images.
"""
import numpy as np
import pytest


@pytest.fixture
def red_4x4():
    """4x4 image, every pixel pure red."""
    image = np.zeros((4, 4, 3), dtype=np.uint8)
    image[..., 0] = 255
    return image


@pytest.fixture
def four_colour_2x2():
    """2x2 image with four distinct colours."""
    return np.array(
        [
            [[255, 0, 0], [0, 255, 0]],
            [[0, 0, 255], [255, 255, 0]],
        ],
        dtype=np.uint8,
    )


@pytest.fixture
def two_tone():
    """8x8 image: left half dark blue, right half orange."""
    image = np.zeros((8, 8, 3), dtype=np.uint8)
    image[:, :4] = (20, 40, 160)
    image[:, 4:] = (240, 140, 20)
    return image


@pytest.fixture
def noisy_image():
    """Seeded 12x10 random image."""
    rng = np.random.default_rng(1234)
    return rng.integers(0, 256, size=(12, 10, 3), dtype=np.uint8)


@pytest.fixture
def random_rgb_rows():
    """Seeded random sRGB rows in 0..1, including the cube corners."""
    rng = np.random.default_rng(42)
    corners = np.array(
        [[r, g, b] for r in (0.0, 1.0) for g in (0.0, 1.0) for b in (0.0, 1.0)]
    )
    return np.vstack([corners, rng.random((200, 3))])
