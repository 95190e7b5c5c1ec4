"""
Logging for the Resume Scanner API.

Console output for the platform log stream plus a rotating file under
``LOG_DIR``. Startup configuration is logged through ``sanitize_log_data``.
"""
import logging
import sys
from pathlib import Path
from logging.handlers import RotatingFileHandler

from sqlalchemy.engine import make_url
from sqlalchemy.exc import ArgumentError

LOG_FILE_NAME = "resume_scanner.log"
LOG_FILE_MAX_BYTES = 10 * 1024 * 1024
LOG_FILE_BACKUPS = 5

CONSOLE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
FILE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Chatty at INFO: one line per request or per model call
QUIET_LOGGERS = ("uvicorn", "uvicorn.access", "openai", "httpx", "multipart")

REDACTED = "***REDACTED***"
SENSITIVE_KEYS = ("password", "token", "secret", "api_key")


def _handler(handler: logging.Handler, level: int, fmt: str) -> logging.Handler:
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt, datefmt=DATE_FORMAT))
    return handler


def setup_logging(log_level: str = "INFO", log_dir: str = "logs") -> Path:
    """
    Replace the root logger's handlers with console + rotating file output.

    Args:
        log_level: Level name; unknown names fall back to INFO
        log_dir: Directory for the rotating log file, created if missing

    Returns:
        Path of the log file
    """
    level = getattr(logging, log_level.upper(), logging.INFO)
    log_file = Path(log_dir) / LOG_FILE_NAME
    log_file.parent.mkdir(parents=True, exist_ok=True)

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()
    root.addHandler(_handler(logging.StreamHandler(sys.stdout), level, CONSOLE_FORMAT))
    root.addHandler(_handler(
        RotatingFileHandler(log_file, maxBytes=LOG_FILE_MAX_BYTES, backupCount=LOG_FILE_BACKUPS),
        level,
        FILE_FORMAT,
    ))

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

    return log_file


def mask_database_url(url: str) -> str:
    """Database URL with the password hidden; unparseable URLs are hidden entirely."""
    try:
        return make_url(url).render_as_string(hide_password=True)
    except ArgumentError:
        return REDACTED


def sanitize_log_data(data: dict) -> dict:
    """
    Copy of ``data`` that is safe to log.

    Secret-looking keys are redacted and database URLs keep everything but
    the password. Unset values are left as-is so a missing credential is
    still visible.
    """
    sanitized = dict(data)
    for key, value in sanitized.items():
        if not value:
            continue
        lowered = key.lower()
        if lowered.endswith("database_url"):
            sanitized[key] = mask_database_url(str(value))
        elif any(sensitive in lowered for sensitive in SENSITIVE_KEYS):
            sanitized[key] = REDACTED
    return sanitized
