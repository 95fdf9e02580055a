"""
Logging configuration for VehicleHub API.

Console plus rotating file output, and helpers that keep payment
references and credentials out of the log lines.
"""
import logging
import sys
from pathlib import Path
from logging.handlers import RotatingFileHandler
from typing import Any, Dict

REDACTED = "***REDACTED***"
SENSITIVE_KEYS = ("password", "token", "secret", "key", "transaction_id", "database_url")

QUIET_LOGGERS = ("uvicorn", "uvicorn.access", "sqlalchemy.engine", "alembic.runtime.migration")

CONSOLE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
FILE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(log_level: str = "INFO", log_dir: str = "logs"):
    """
    Configure the root logger.

    Args:
        log_level: Logging level name; unknown names fall back to INFO
        log_dir: Directory that receives vehiclehub.log (10MB x 5 backups)
    """
    level = getattr(logging, log_level.upper(), logging.INFO)

    log_path = Path(log_dir)
    log_path.mkdir(parents=True, exist_ok=True)

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT, datefmt=DATE_FORMAT))

    file_handler = RotatingFileHandler(
        log_path / "vehiclehub.log",
        maxBytes=10 * 1024 * 1024,
        backupCount=5
    )
    file_handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt=DATE_FORMAT))

    for handler in (console_handler, file_handler):
        handler.setLevel(level)
        root.addHandler(handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def sanitize_log_data(data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Copy of `data` with sensitive values replaced, nested dicts included.

    A key is sensitive when its lowercased name contains any of
    SENSITIVE_KEYS. Empty values are left as they are.
    """
    sanitized = {}
    for key, value in data.items():
        if isinstance(value, dict):
            sanitized[key] = sanitize_log_data(value)
        elif value is not None and any(s in str(key).lower() for s in SENSITIVE_KEYS):
            sanitized[key] = REDACTED
        else:
            sanitized[key] = value
    return sanitized


def format_log_fields(**fields: Any) -> str:
    """Render keyword fields as sanitized `key=value` pairs for a log line."""
    return ", ".join(f"{k}={v}" for k, v in sanitize_log_data(fields).items())
