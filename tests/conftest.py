import numpy as np
import pytest

from inversion.color import pack_rgb
from inversion.formats import SampleFormat
from inversion.image import StackImage


@pytest.fixture
def rng():
    return np.random.default_rng(42)


@pytest.fixture
def gray8_stack(rng):
    """3-frame 8x6 GRAY8 stack with random samples."""
    frames = [rng.integers(0, 256, 48, dtype=np.uint8) for _ in range(3)]
    return StackImage(width=8, height=6, format=SampleFormat.GRAY8, frames=frames)


@pytest.fixture
def packed_rgb_stack(rng):
    """2-frame 4x4 packed RGB stack."""
    frames = []
    for _ in range(2):
        r, g, b = (rng.integers(0, 256, 16, dtype=np.uint8) for _ in range(3))
        frames.append(pack_rgb(r, g, b))
    return StackImage(width=4, height=4, format=SampleFormat.COLOR_RGB, frames=frames)
