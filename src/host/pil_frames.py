"""Pillow host adapter — decoded Pillow frames in, StackImage out, and back."""

from typing import Sequence

import numpy as np
from PIL import Image

from inversion.color import split_channels
from inversion.formats import SampleFormat, resolve_format
from inversion.image import StackImage

MODE_FORMATS: dict[str, SampleFormat] = {
    "L": SampleFormat.GRAY8,
    "I;16": SampleFormat.GRAY16,
    "I;16L": SampleFormat.GRAY16,
    "I;16B": SampleFormat.GRAY16,
    "F": SampleFormat.GRAY32,
    "RGB": SampleFormat.COLOR_RGB,
}

# Native storage dtype for frames built from each format
_NATIVE_DTYPES = {
    SampleFormat.GRAY8: np.uint8,
    SampleFormat.GRAY16: np.uint16,
    SampleFormat.GRAY32: np.float32,
    SampleFormat.COLOR_RGB: np.uint8,
}


def from_pil(images: Sequence[Image.Image]) -> StackImage:
    """Wrap already-decoded Pillow frames as one StackImage.

    Each frame is copied into a writable numpy buffer owned by the returned
    image. A mode without an inversion rule is kept as the format tag, so
    the operation rejects it instead of this adapter.

    Raises:
        ValueError: On an empty sequence or frames of differing size/mode.
    """
    if not images:
        raise ValueError("at least one frame is required")

    first = images[0]
    for i, img in enumerate(images[1:], start=2):
        if img.size != first.size or img.mode != first.mode:
            raise ValueError(
                f"frame {i} is {img.mode} {img.size}, expected {first.mode} {first.size}"
            )

    fmt = MODE_FORMATS.get(first.mode)
    if fmt is None:
        frames = [np.array(img) for img in images]
        tag: object = first.mode
    else:
        dtype = _NATIVE_DTYPES[fmt]
        frames = [np.array(img).astype(dtype, copy=False) for img in images]
        tag = fmt

    width, height = first.size
    return StackImage(width=width, height=height, format=tag, frames=frames)


def _frame_to_pil(frame: np.ndarray, fmt: SampleFormat, width: int, height: int):
    if fmt is SampleFormat.COLOR_RGB:
        if frame.dtype != np.uint8:
            r, g, b = split_channels(frame)
            frame = np.stack([r, g, b], axis=-1)
        return Image.fromarray(frame.reshape(height, width, 3))

    if frame.dtype.kind == "i":
        # Signed storage of unsigned samples
        frame = frame.view(_NATIVE_DTYPES[fmt])
    return Image.fromarray(frame.reshape(height, width))


def to_pil(image: StackImage) -> list[Image.Image]:
    """Build one Pillow image per frame.

    Raises:
        UnsupportedFormatError: If the image format has no inversion rule.
    """
    fmt = resolve_format(image.format)
    return [
        _frame_to_pil(frame, fmt, image.width, image.height) for frame in image.frames
    ]
