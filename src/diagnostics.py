"""Diagnostics for a host process running the inverter.

JSON-lines logging that carries the image being inverted, and crash dumps
that record which image was in flight when the process died.
"""

import datetime
import json
import logging
import logging.handlers
import os
import sys
import traceback
from pathlib import Path

logger = logging.getLogger(__name__)

APP_DIR = "~/.trueinvert"
LOG_FILENAME = "trueinvert.log"

MAX_CRASH_REPORTS = 5

# Record attributes copied into each JSON line when a caller passes them
# through ``extra=``
IMAGE_FIELDS = ("sample_format", "width", "height", "frame_count")

# Last image handed to the inverter; written into crash dumps
_current_image: dict = {}


def note_image(context: dict):
    """Remember the image about to be inverted, for crash dumps."""
    _current_image.clear()
    _current_image.update(context)


def current_image() -> dict:
    return dict(_current_image)


def _validate_log_dir(env_dir: str) -> str:
    """Keep APP_LOG_DIR inside the app directory. Returns the dir to use."""
    default = os.path.expanduser(f"{APP_DIR}/logs")
    if not env_dir:
        return default
    resolved = os.path.realpath(env_dir)
    allowed = os.path.realpath(os.path.expanduser(APP_DIR))
    if resolved != allowed and not resolved.startswith(allowed + os.sep):
        logger.warning("APP_LOG_DIR outside %s, using default", APP_DIR)
        return default
    return resolved


class JSONFormatter(logging.Formatter):
    """One JSON object per line, with image fields when present."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.datetime.fromtimestamp(
                record.created, tz=datetime.timezone.utc
            ).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        image = {f: getattr(record, f) for f in IMAGE_FIELDS if hasattr(record, f)}
        if image:
            entry["image"] = image
        if record.exc_info and record.exc_info[1] is not None:
            entry["exception"] = {
                "type": type(record.exc_info[1]).__name__,
                "traceback": self.formatException(record.exc_info),
            }
        return json.dumps(entry, default=str)


def setup_structured_logging(log_dir: str | None = None) -> str:
    """Attach a rotating JSON handler to the root logger.

    APP_LOG_DIR and APP_LOG_LEVEL are read from the environment.
    Returns the directory holding the log file.
    """
    resolved_dir = _validate_log_dir(log_dir or os.environ.get("APP_LOG_DIR", ""))
    os.makedirs(resolved_dir, mode=0o700, exist_ok=True)

    handler = logging.handlers.RotatingFileHandler(
        os.path.join(resolved_dir, LOG_FILENAME),
        maxBytes=10_000_000,
        backupCount=7,
    )
    handler.setFormatter(JSONFormatter())

    level = os.environ.get("APP_LOG_LEVEL", "INFO").upper()
    root = logging.getLogger()
    root.setLevel(getattr(logging, level, logging.INFO))
    root.addHandler(handler)
    return resolved_dir


def _cleanup_old_crash_reports(crash_dir: str):
    """Keep only the newest MAX_CRASH_REPORTS dumps."""
    try:
        dumps = sorted(
            Path(crash_dir).glob("crash_*.json"),
            key=lambda f: f.stat().st_mtime,
            reverse=True,
        )
        for old in dumps[MAX_CRASH_REPORTS:]:
            old.unlink(missing_ok=True)
    except OSError:
        pass


def write_crash_report(crash_dir: str, exc_type, exc_value, exc_tb) -> str:
    """Write a PII-scrubbed JSON crash dump. Returns its path."""
    from security import strip_pii

    os.makedirs(crash_dir, mode=0o700, exist_ok=True)
    stamp = datetime.datetime.now(tz=datetime.timezone.utc).strftime(
        "%Y%m%dT%H%M%S%fZ"
    )
    path = os.path.join(crash_dir, f"crash_{stamp}.json")

    report = {
        "timestamp": stamp,
        "exception_type": exc_type.__name__ if exc_type else "Unknown",
        "exception_message": str(exc_value),
        "traceback": traceback.format_exception(exc_type, exc_value, exc_tb),
        "image": current_image(),
        "python_version": sys.version,
        "platform": sys.platform,
    }
    report = strip_pii({"extra": report}, {}).get("extra", report)

    old_umask = os.umask(0o077)
    try:
        with open(path, "w") as f:
            json.dump(report, f, indent=2, default=str)
    finally:
        os.umask(old_umask)

    _cleanup_old_crash_reports(crash_dir)
    return path


def setup_excepthook():
    """Dump unhandled exceptions to ~/.trueinvert/crash_reports, then re-raise."""
    crash_dir = os.path.expanduser(f"{APP_DIR}/crash_reports")

    def _crash_excepthook(exc_type, exc_value, exc_tb):
        try:
            write_crash_report(crash_dir, exc_type, exc_value, exc_tb)
        except Exception:
            # Never let the dump itself mask the original error
            pass
        sys.__excepthook__(exc_type, exc_value, exc_tb)

    sys.excepthook = _crash_excepthook


def init_diagnostics() -> str:
    """Structured logging plus crash dumps. Returns the log directory."""
    log_dir = setup_structured_logging()
    setup_excepthook()
    logger.info("Diagnostics initialized: logging=%s", log_dir)
    return log_dir
