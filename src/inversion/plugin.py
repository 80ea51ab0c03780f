"""Host entry point — the invert operation as a host calls it.

The host first calls ``setup()`` (either to ask for the about text or to
learn which formats are handled) and then ``run()`` once per image.
Progress, status and message output go through sinks the host passes in.
"""

import logging
from typing import Callable

import sentry_sdk

import diagnostics
import telemetry
from inversion.formats import SampleFormat, UnsupportedFormatError
from inversion.image import StackImage
from inversion.inverter import ProgressFn, invert_image
from telemetry import DEFAULT_CONSENT_PATH

logger = logging.getLogger(__name__)

OPERATION_ID = "image.true_invert"
OPERATION_NAME = "Invert Image"

ABOUT_MESSAGE = (
    OPERATION_NAME,
    "True invert of image pixel values - not just inverting the LUT: "
    "8-bit 0 becomes 255, 16-bit 0 becomes 65535, 32-bit 0.0 becomes 1.0, "
    "RGB channels are inverted independently",
)

SUPPORTED_FORMATS: frozenset[SampleFormat] = frozenset(SampleFormat)

# Returned by setup() when there is nothing left to run
DONE = frozenset()

MessageFn = Callable[[str, str], None]
StatusFn = Callable[[str], None]


def _capture_with_context(e: UnsupportedFormatError, context: dict):
    """Capture an unsupported-format rejection to Sentry with image context."""
    with sentry_sdk.new_scope() as scope:
        scope.set_tag("sample_format", str(e.tag))
        scope.fingerprint = ["unsupported-format", str(e.tag)]
        scope.set_context("image", context)
        sentry_sdk.capture_exception(e, scope=scope)


def show_about(message_sink: MessageFn):
    title, text = ABOUT_MESSAGE
    message_sink(title, text)


def setup(arg: str, message_sink: MessageFn | None = None) -> frozenset[SampleFormat]:
    """Answer the host's setup call.

    ``arg == "about"`` sends the about text to ``message_sink`` and returns
    DONE. Any other arg returns the set of formats ``run`` accepts.
    """
    if arg == "about":
        if message_sink is not None:
            show_about(message_sink)
        return DONE
    return SUPPORTED_FORMATS


def image_context(image: StackImage) -> dict:
    """JSON-safe description of an image for logs, crash dumps and Sentry."""
    fmt = image.format
    return {
        "sample_format": fmt.value if isinstance(fmt, SampleFormat) else str(fmt),
        "width": image.width,
        "height": image.height,
        "frame_count": image.frame_count,
    }


def init_host(consent_path: str = DEFAULT_CONSENT_PATH) -> str:
    """One-time process setup for a host: JSON logs, crash dumps, Sentry.

    Returns the log directory.
    """
    log_dir = diagnostics.init_diagnostics()
    telemetry.init_telemetry(consent_path)
    return log_dir


def run(
    image: StackImage,
    progress_sink: ProgressFn | None = None,
    status_sink: StatusFn | None = None,
) -> None:
    """Invert ``image`` in place. The host redraws it afterwards.

    Raises:
        UnsupportedFormatError: The image was left untouched.
    """
    context = image_context(image)
    diagnostics.note_image(context)
    logger.info(
        "%s: %dx%d, %d frame(s), format=%s",
        OPERATION_ID,
        image.width,
        image.height,
        image.frame_count,
        context["sample_format"],
        extra=context,
    )
    try:
        invert_image(image, progress=progress_sink)
    except UnsupportedFormatError as e:
        _capture_with_context(e, context)
        logger.error("%s rejected image: %s", OPERATION_ID, e, extra=context)
        raise

    if status_sink is not None:
        status_sink(f"Inverted {image.frame_count} frame(s)")
