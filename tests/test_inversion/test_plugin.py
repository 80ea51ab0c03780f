"""Tests for the host entry point — setup/about, run, status and error capture."""

import logging
from unittest.mock import MagicMock, patch

import numpy as np
import pytest

import diagnostics
from inversion import plugin
from inversion.formats import SampleFormat, UnsupportedFormatError
from inversion.image import StackImage

pytestmark = pytest.mark.smoke


def test_setup_about_sends_message_and_is_done():
    sink = MagicMock()
    result = plugin.setup("about", message_sink=sink)
    assert result == plugin.DONE
    assert not result
    sink.assert_called_once_with(*plugin.ABOUT_MESSAGE)


def test_setup_about_without_sink():
    assert plugin.setup("about") == plugin.DONE


def test_setup_returns_supported_formats():
    sink = MagicMock()
    formats = plugin.setup("", message_sink=sink)
    assert formats == set(SampleFormat)
    assert len(formats) == 4
    sink.assert_not_called()


def test_about_message_mentions_true_invert():
    title, text = plugin.ABOUT_MESSAGE
    assert title == plugin.OPERATION_NAME
    assert "not just inverting the LUT" in text


def test_run_inverts_and_reports(gray8_stack):
    originals = [f.copy() for f in gray8_stack.frames]
    progress = MagicMock()
    status = MagicMock()

    plugin.run(gray8_stack, progress_sink=progress, status_sink=status)

    for before, after in zip(originals, gray8_stack.frames):
        np.testing.assert_array_equal(after, 255 - before)
    assert progress.call_count == 3
    progress.assert_called_with(3, 3)
    status.assert_called_once_with("Inverted 3 frame(s)")


def test_run_without_sinks(packed_rgb_stack):
    plugin.run(packed_rgb_stack)


def test_run_unsupported_format_captured_and_reraised():
    frame = np.array([1, 2, 3, 4], dtype=np.uint8)
    image = StackImage(width=2, height=2, format=3, frames=[frame])
    status = MagicMock()

    with patch("inversion.plugin.sentry_sdk.capture_exception") as mock_capture:
        with pytest.raises(UnsupportedFormatError) as exc_info:
            plugin.run(image, status_sink=status)

    assert exc_info.value.tag == 3
    mock_capture.assert_called_once()
    assert mock_capture.call_args.args[0] is exc_info.value
    status.assert_not_called()
    np.testing.assert_array_equal(frame, [1, 2, 3, 4])


def test_run_unsupported_format_logged(caplog):
    image = StackImage(
        width=1, height=1, format="gray12", frames=[np.zeros(1, dtype=np.uint8)]
    )
    with patch("inversion.plugin.sentry_sdk.capture_exception"):
        with pytest.raises(UnsupportedFormatError):
            plugin.run(image)
    assert any(
        r.levelname == "ERROR" and "gray12" in r.getMessage() for r in caplog.records
    )


def test_image_context_is_json_safe(gray8_stack):
    assert plugin.image_context(gray8_stack) == {
        "sample_format": "gray8",
        "width": 8,
        "height": 6,
        "frame_count": 3,
    }
    gray8_stack.format = 3
    assert plugin.image_context(gray8_stack)["sample_format"] == "3"


def test_run_notes_image_for_crash_dumps(packed_rgb_stack):
    try:
        plugin.run(packed_rgb_stack)
        assert diagnostics.current_image() == {
            "sample_format": "rgb",
            "width": 4,
            "height": 4,
            "frame_count": 2,
        }
    finally:
        diagnostics.note_image({})


def test_run_log_records_carry_image(gray8_stack, caplog):
    with caplog.at_level(logging.INFO, logger="inversion.plugin"):
        plugin.run(gray8_stack)
    record = next(r for r in caplog.records if r.name == "inversion.plugin")
    assert record.sample_format == "gray8"
    assert record.frame_count == 3
    diagnostics.note_image({})


def test_init_host_sets_up_diagnostics_and_telemetry(tmp_path):
    consent = str(tmp_path / "consent")
    with patch("diagnostics.init_diagnostics", return_value="/logs") as mock_diag:
        with patch("telemetry.init_telemetry") as mock_tel:
            assert plugin.init_host(consent) == "/logs"
    mock_diag.assert_called_once_with()
    mock_tel.assert_called_once_with(consent)
