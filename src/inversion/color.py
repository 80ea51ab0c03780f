"""Packed RGB helpers — split 0xAARRGGBB pixels into channels and back."""

import numpy as np

_ALPHA_MASK = np.uint32(0xFF000000)


def _as_uint32(packed: np.ndarray) -> np.ndarray:
    # Same-width view; int32 storage keeps its bit pattern
    if packed.dtype.itemsize != 4 or packed.dtype.kind not in "iu":
        raise TypeError(f"packed RGB buffer must be 32-bit int, got {packed.dtype}")
    return packed.view(np.uint32)


def split_channels(packed: np.ndarray) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Split a packed RGB buffer into new (r, g, b) uint8 buffers."""
    px = _as_uint32(packed)
    r = ((px >> 16) & 0xFF).astype(np.uint8)
    g = ((px >> 8) & 0xFF).astype(np.uint8)
    b = (px & 0xFF).astype(np.uint8)
    return r, g, b


def merge_channels(
    r: np.ndarray, g: np.ndarray, b: np.ndarray, out: np.ndarray
) -> np.ndarray:
    """Write (r, g, b) channel buffers back into a packed buffer in place.

    The top byte of each pixel in ``out`` (alpha) is left as it was.
    """
    px = _as_uint32(out)
    px[...] = (
        (px & _ALPHA_MASK)
        | (r.astype(np.uint32) << 16)
        | (g.astype(np.uint32) << 8)
        | b.astype(np.uint32)
    )
    return out


def pack_rgb(r: np.ndarray, g: np.ndarray, b: np.ndarray) -> np.ndarray:
    """Build a new packed int32 buffer with an opaque alpha byte."""
    out = np.full(np.shape(r), -1, dtype=np.int32)  # 0xFFFFFFFF
    return merge_channels(r, g, b, out)
