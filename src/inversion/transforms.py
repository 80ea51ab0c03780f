"""Per-format inversion rules. Every transform mutates its buffer in place."""

from typing import Callable

import numpy as np

from inversion.color import merge_channels, split_channels
from inversion.formats import SampleFormat

TransformFn = Callable[[np.ndarray], None]


def _unsigned_view(buf: np.ndarray, unsigned: type) -> np.ndarray:
    """Return ``buf`` as its unsigned dtype, reinterpreting signed storage."""
    target = np.dtype(unsigned)
    if buf.dtype == target:
        return buf
    if buf.dtype.kind == "i" and buf.dtype.itemsize == target.itemsize:
        return buf.view(target)
    raise TypeError(f"expected {target} or same-width signed storage, got {buf.dtype}")


def invert_gray8(buf: np.ndarray) -> None:
    """v -> 255 - v over unsigned 8-bit samples."""
    u = _unsigned_view(buf, np.uint8)
    np.subtract(np.uint8(255), u, out=u)


def invert_gray16(buf: np.ndarray) -> None:
    """v -> 65535 - v over unsigned 16-bit samples."""
    u = _unsigned_view(buf, np.uint16)
    np.subtract(np.uint16(65535), u, out=u)


def invert_gray32(buf: np.ndarray) -> None:
    """v -> 1.0 - v. Values outside [0, 1] are not clamped."""
    np.subtract(np.float32(1.0), buf, out=buf)


def invert_rgb(buf: np.ndarray) -> None:
    """Apply the 8-bit rule to each of R, G and B independently.

    Accepts packed 32-bit pixels (alpha byte untouched), or uint8 samples
    either interleaved flat (r, g, b, r, g, b, ...) or channel-last.

    Raises:
        TypeError: If a uint8 buffer does not hold whole RGB triples.
    """
    if buf.dtype == np.uint8:
        if buf.size % 3 != 0 or (buf.ndim > 1 and buf.shape[-1] != 3):
            raise TypeError(f"uint8 RGB buffer of shape {buf.shape} is not RGB triples")
        # Every channel takes the same rule, so all samples invert at once
        invert_gray8(buf)
        return

    r, g, b = split_channels(buf)
    invert_gray8(r)
    invert_gray8(g)
    invert_gray8(b)
    merge_channels(r, g, b, out=buf)


TRANSFORMS: dict[SampleFormat, TransformFn] = {
    SampleFormat.GRAY8: invert_gray8,
    SampleFormat.GRAY16: invert_gray16,
    SampleFormat.GRAY32: invert_gray32,
    SampleFormat.COLOR_RGB: invert_rgb,
}


def transform_for(fmt: SampleFormat) -> TransformFn:
    return TRANSFORMS[fmt]
