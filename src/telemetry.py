"""Consent-gated Sentry initialisation for a host process."""

import os
from pathlib import Path

import sentry_sdk

from _version import __version__
from security import strip_pii

DEFAULT_CONSENT_PATH = "~/.trueinvert/telemetry_consent"


def has_consent(consent_path: str = DEFAULT_CONSENT_PATH) -> bool:
    path = Path(os.path.expanduser(consent_path))
    try:
        return path.read_text().strip() == "yes"
    except OSError:
        return False


def init_telemetry(consent_path: str = DEFAULT_CONSENT_PATH) -> bool:
    """Initialise Sentry. Events are only sent with consent and a DSN.

    Returns True when a DSN was configured.
    """
    dsn = ""
    if has_consent(consent_path):
        dsn = os.environ.get("SENTRY_DSN", "")

    sentry_sdk.init(
        dsn=dsn,
        release=f"trueinvert@{__version__}",
        environment=os.environ.get("SENTRY_ENV", "development"),
        before_send=strip_pii,
        max_breadcrumbs=50,
    )
    return bool(dsn)
