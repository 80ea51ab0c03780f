"""Sample formats — the four pixel representations the inverter understands."""

import numbers
from enum import Enum

import numpy as np


class UnsupportedFormatError(ValueError):
    """Raised when an image declares a sample format with no inversion rule."""

    def __init__(self, tag):
        self.tag = tag
        super().__init__(f"unsupported sample format: {tag!r}")


class SampleFormat(Enum):
    GRAY8 = "gray8"
    GRAY16 = "gray16"
    GRAY32 = "gray32"
    COLOR_RGB = "rgb"

    @property
    def max_value(self) -> int | float:
        return _MAX_VALUES[self]

    @property
    def dtypes(self) -> tuple[np.dtype, ...]:
        """Storage dtypes accepted for a frame buffer of this format."""
        return _DTYPES[self]


_MAX_VALUES: dict[SampleFormat, int | float] = {
    SampleFormat.GRAY8: 255,
    SampleFormat.GRAY16: 65535,
    SampleFormat.GRAY32: 1.0,
    SampleFormat.COLOR_RGB: 255,
}

_DTYPES: dict[SampleFormat, tuple[np.dtype, ...]] = {
    SampleFormat.GRAY8: (np.dtype(np.uint8), np.dtype(np.int8)),
    SampleFormat.GRAY16: (np.dtype(np.uint16), np.dtype(np.int16)),
    SampleFormat.GRAY32: (np.dtype(np.float32),),
    # Packed 0xAARRGGBB ints, or channel-last uint8
    SampleFormat.COLOR_RGB: (
        np.dtype(np.int32),
        np.dtype(np.uint32),
        np.dtype(np.uint8),
    ),
}

# Legacy host image type codes. 3 is indexed 8-bit colour (no rule).
HOST_TYPE_CODES: dict[int, SampleFormat] = {
    0: SampleFormat.GRAY8,
    1: SampleFormat.GRAY16,
    2: SampleFormat.GRAY32,
    4: SampleFormat.COLOR_RGB,
}


def resolve_format(tag) -> SampleFormat:
    """Map a format tag to a SampleFormat.

    Accepts a SampleFormat member, its string value, or a legacy integer
    host type code.

    Raises:
        UnsupportedFormatError: If the tag names no supported format.
    """
    if isinstance(tag, SampleFormat):
        return tag
    # bool is an int subclass; True/False are not type codes
    if isinstance(tag, numbers.Integral) and not isinstance(tag, bool):
        fmt = HOST_TYPE_CODES.get(int(tag))
        if fmt is None:
            raise UnsupportedFormatError(tag)
        return fmt
    if isinstance(tag, str):
        try:
            return SampleFormat(tag.lower())
        except ValueError:
            raise UnsupportedFormatError(tag) from None
    raise UnsupportedFormatError(tag)
