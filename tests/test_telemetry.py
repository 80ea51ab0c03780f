"""Tests for consent-gated Sentry initialisation."""

from unittest.mock import patch

import pytest

from security import strip_pii
from telemetry import has_consent, init_telemetry

pytestmark = pytest.mark.smoke


@pytest.fixture
def consent_file(tmp_path):
    return tmp_path / "telemetry_consent"


def test_no_consent_file_means_no_consent(consent_file):
    assert has_consent(str(consent_file)) is False


def test_consent_requires_yes(consent_file):
    consent_file.write_text("no\n")
    assert has_consent(str(consent_file)) is False
    consent_file.write_text("yes\n")
    assert has_consent(str(consent_file)) is True


def test_without_consent_dsn_is_empty(consent_file, monkeypatch):
    monkeypatch.setenv("SENTRY_DSN", "https://key@example.invalid/1")
    with patch("telemetry.sentry_sdk.init") as mock_init:
        enabled = init_telemetry(str(consent_file))
    assert enabled is False
    kwargs = mock_init.call_args.kwargs
    assert kwargs["dsn"] == ""
    assert kwargs["before_send"] is strip_pii


def test_with_consent_dsn_from_env(consent_file, monkeypatch):
    consent_file.write_text("yes")
    monkeypatch.setenv("SENTRY_DSN", "https://key@example.invalid/1")
    monkeypatch.setenv("SENTRY_ENV", "test")
    with patch("telemetry.sentry_sdk.init") as mock_init:
        enabled = init_telemetry(str(consent_file))
    assert enabled is True
    kwargs = mock_init.call_args.kwargs
    assert kwargs["dsn"] == "https://key@example.invalid/1"
    assert kwargs["environment"] == "test"
    assert kwargs["release"].startswith("trueinvert@")


def test_with_consent_but_no_dsn(consent_file, monkeypatch):
    consent_file.write_text("yes")
    monkeypatch.delenv("SENTRY_DSN", raising=False)
    with patch("telemetry.sentry_sdk.init") as mock_init:
        assert init_telemetry(str(consent_file)) is False
    assert mock_init.call_args.kwargs["dsn"] == ""
