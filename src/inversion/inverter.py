"""Inverter — true pixel-value inversion over every frame of a stack."""

import logging
from typing import Callable

from inversion.formats import resolve_format
from inversion.image import StackImage
from inversion.transforms import transform_for

logger = logging.getLogger(__name__)

ProgressFn = Callable[[int, int], None]


def invert_image(image: StackImage, progress: ProgressFn | None = None) -> None:
    """Replace every sample ``v`` of every frame with ``max - v``, in place.

    Args:
        image:    Host image. Frames are mutated; format and size are not.
        progress: Optional sink called as ``progress(i, total)`` before
                  frame ``i`` (1-based) is processed.

    Raises:
        UnsupportedFormatError: If the image format has no rule. Raised
            before any frame is touched.
    """
    fmt = resolve_format(image.format)
    transform = transform_for(fmt)
    total = image.frame_count

    for i in range(1, total + 1):
        if progress is not None:
            progress(i, total)
        transform(image.get_frame(i))
        logger.debug("Inverted frame %d/%d (%s)", i, total, fmt.value)

    logger.info(
        "Inverted %d frame(s) of %dx%d %s image",
        total,
        image.width,
        image.height,
        fmt.value,
    )
