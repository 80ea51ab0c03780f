"""Stack image model — host-owned frames plus the metadata needed to invert them."""

from dataclasses import dataclass, field

import numpy as np

from inversion.formats import SampleFormat, UnsupportedFormatError, resolve_format


@dataclass
class StackImage:
    """One image as handed over by the host.

    ``format`` is kept as the host declared it; it is resolved when the
    image is processed so an unsupported tag can still be represented.
    Frames are the host's own buffers and are mutated in place.
    """

    width: int
    height: int
    format: object
    frames: list[np.ndarray] = field(default_factory=list)

    @property
    def frame_count(self) -> int:
        return len(self.frames)

    def get_frame(self, index: int) -> np.ndarray:
        """Return the buffer of frame ``index`` (1-based)."""
        if not 1 <= index <= self.frame_count:
            raise IndexError(
                f"frame {index} out of range 1..{self.frame_count}"
            )
        return self.frames[index - 1]


def _expected_size(image: StackImage, fmt: SampleFormat, frame: np.ndarray) -> int:
    pixels = image.width * image.height
    if fmt is SampleFormat.COLOR_RGB and frame.dtype == np.uint8:
        return pixels * 3
    return pixels


def validate(image: StackImage) -> list[str]:
    """Validate an image against the inverter's preconditions.

    Returns list of error strings (empty = valid). The inverter itself
    does not call this; hosts may use it before handing an image over.
    """
    errors: list[str] = []

    try:
        fmt = resolve_format(image.format)
    except UnsupportedFormatError as e:
        errors.append(str(e))
        return errors  # Can't check buffers without a format

    if image.width <= 0 or image.height <= 0:
        errors.append(f"Invalid dimensions: {image.width}x{image.height}")
        return errors

    if image.frame_count < 1:
        errors.append("Image has no frames")

    for i, frame in enumerate(image.frames, start=1):
        if frame.dtype not in fmt.dtypes:
            errors.append(f"Frame {i}: dtype {frame.dtype} not valid for {fmt.value}")
            continue
        if fmt is SampleFormat.COLOR_RGB and frame.dtype == np.uint8:
            if frame.ndim > 1 and frame.shape[-1] != 3:
                errors.append(f"Frame {i}: uint8 RGB needs 3 channels per pixel")
                continue
        expected = _expected_size(image, fmt, frame)
        if frame.size != expected:
            errors.append(f"Frame {i}: {frame.size} samples, expected {expected}")

    return errors
