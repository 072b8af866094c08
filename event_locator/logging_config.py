import logging
import sys
from pathlib import Path
from typing import Any, Dict, Optional

from event_locator.config import Settings, get_settings

# Notices published without a webhook are written here
NOTIFICATION_LOGGER = "event_locator.notifications"

MAX_LOG_BYTES = 10485760  # 10MB
LOG_BACKUPS = 5

# Third-party loggers and the level they are capped at outside debug mode
QUIET_LOGGERS = ("apscheduler", "geopy", "aiohttp.client", "sqlalchemy.engine")


def rotating_json_handler(path: Path, level: str) -> Dict[str, Any]:
    """Handler config for a size-rotated JSON lines file."""
    return {
        "level": level,
        "class": "logging.handlers.RotatingFileHandler",
        "formatter": "json",
        "filename": str(path),
        "maxBytes": MAX_LOG_BYTES,
        "backupCount": LOG_BACKUPS,
        "encoding": "utf-8",
    }


def configure_logging(settings: Optional[Settings] = None) -> Dict[str, Any]:
    """Build the dictConfig for the API, the background jobs and the notice channel.

    Application records go to the console and ``event_locator.log``. Event
    notices get their own ``notifications.log`` so the channel can be tailed
    or shipped on its own.

    Returns:
        Dict: Logging configuration dictionary
    """
    settings = settings or get_settings()
    log_path = Path(settings.LOG_DIR)
    log_path.mkdir(parents=True, exist_ok=True)
    level = settings.LOG_LEVEL.upper()
    library_level = "DEBUG" if settings.DEBUG else "WARNING"

    loggers: Dict[str, Dict[str, Any]] = {
        "event_locator": {
            "handlers": ["console", "file"],
            "level": level,
            "propagate": False,
        },
        NOTIFICATION_LOGGER: {
            "handlers": ["notifications"],
            "level": "INFO",
            "propagate": False,
        },
        "uvicorn": {
            "handlers": ["console", "file"],
            "level": level,
            "propagate": False,
        },
    }
    for name in QUIET_LOGGERS:
        loggers[name] = {
            "handlers": ["console", "file"],
            "level": library_level,
            "propagate": False,
        }

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "default": {
                "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
            "json": {
                "()": "pythonjsonlogger.jsonlogger.JsonFormatter",
                "format": "%(asctime)s %(name)s %(levelname)s %(message)s",
            },
        },
        "handlers": {
            "console": {
                "level": level,
                "class": "logging.StreamHandler",
                "formatter": "default",
                "stream": sys.stdout,
            },
            "file": rotating_json_handler(log_path / "event_locator.log", level),
            "notifications": rotating_json_handler(log_path / "notifications.log", "INFO"),
        },
        "loggers": loggers,
    }


def get_logger(name: str) -> logging.Logger:
    """Logger under the ``event_locator`` namespace."""
    return logging.getLogger(f"event_locator.{name}")
