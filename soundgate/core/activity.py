"""Audit trail of uploads and moderation actions, written to a rotating log file."""
import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

from soundgate.config import ACTIVITY_LOG_BACKUPS, ACTIVITY_LOG_MAX_BYTES

ACTIVITY_LOGGER_NAME = "soundgate.activity"

activity_logger = logging.getLogger(ACTIVITY_LOGGER_NAME)


def configure_activity_log(path: Path) -> RotatingFileHandler:
    """Attach a rotating file handler for the activity log (replaces any previous one)."""
    for handler in list(activity_logger.handlers):
        if isinstance(handler, RotatingFileHandler):
            activity_logger.removeHandler(handler)
            handler.close()
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(
        path,
        maxBytes=ACTIVITY_LOG_MAX_BYTES,
        backupCount=ACTIVITY_LOG_BACKUPS,
        encoding="utf-8",
    )
    handler.setFormatter(logging.Formatter("[%(asctime)s] %(message)s"))
    activity_logger.addHandler(handler)
    activity_logger.setLevel(logging.INFO)
    return handler


def log_activity(event: str, *fields: object) -> None:
    """Record one event, e.g. log_activity("APPROVE", admin_id, owner_id, track_id)."""
    parts = [event] + [str(f) for f in fields if f is not None and f != ""]
    activity_logger.info(" ".join(parts))


def read_activity_log(path: Path) -> str:
    """Current activity log text; empty if nothing has been logged yet."""
    try:
        return Path(path).read_text(encoding="utf-8")
    except FileNotFoundError:
        return ""
