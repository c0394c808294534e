"""Process-wide logging setup: timestamped console output plus optional log file."""

import logging
import logging.config
from pathlib import Path

from config.settings import settings

_FORMAT = "[%(asctime)s] [%(levelname)s] %(name)s: %(message)s"


def configure_logging(level: str | None = None, log_file: str | None = None) -> None:
    """Install root handlers. DEBUG=True in settings forces DEBUG level."""
    resolved_level = "DEBUG" if settings.DEBUG else (level or settings.LOG_LEVEL).upper()
    file_path = log_file if log_file is not None else settings.LOG_FILE_PATH

    handlers: dict[str, dict[str, object]] = {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "default",
        },
    }
    if file_path:
        Path(file_path).parent.mkdir(parents=True, exist_ok=True)
        handlers["file"] = {
            "class": "logging.FileHandler",
            "formatter": "default",
            "filename": file_path,
            "encoding": "utf-8",
        }

    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {"default": {"format": _FORMAT}},
            "handlers": handlers,
            "root": {"level": resolved_level, "handlers": list(handlers)},
            # httpx logs every request at INFO; the monitor polls every few seconds
            "loggers": {"httpx": {"level": "WARNING"}},
        }
    )
    logging.getLogger(__name__).debug("Logging configured at %s", resolved_level)
