"""
Logging configuration for the service.

``build_logging_config`` describes the handlers as a ``dictConfig``
mapping: a console handler, an optional rotating log file, and the
uvicorn loggers routed through the root logger so server and
application messages share one format.  ``setup_logging`` applies it
once per process; if the root logger already has handlers (a test
runner, an embedding application) it leaves them alone.
"""

import logging
import logging.config
from pathlib import Path
from typing import Any, Dict, Optional

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
LOG_FILE_MAX_BYTES = 10 * 1024 * 1024
LOG_FILE_BACKUPS = 5


def resolve_level(level: str) -> str:
    """Return a valid level name; unknown names fall back to ``INFO``."""
    name = level.upper()
    return name if isinstance(logging.getLevelName(name), int) else "INFO"


def build_logging_config(level: str = "INFO", logfile: Optional[str] = None) -> Dict[str, Any]:
    level_name = resolve_level(level)
    handlers: Dict[str, Dict[str, Any]] = {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "default",
        },
    }
    if logfile:
        handlers["file"] = {
            "class": "logging.handlers.RotatingFileHandler",
            "formatter": "default",
            "filename": str(Path(logfile).resolve()),
            "maxBytes": LOG_FILE_MAX_BYTES,
            "backupCount": LOG_FILE_BACKUPS,
            "encoding": "utf-8",
        }

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "default": {"format": LOG_FORMAT, "datefmt": DATE_FORMAT},
        },
        "handlers": handlers,
        "root": {"level": level_name, "handlers": list(handlers)},
        "loggers": {
            # Uvicorn ships its own handlers; drop them and propagate to root.
            "uvicorn": {"level": level_name, "handlers": [], "propagate": True},
            "uvicorn.error": {"handlers": [], "propagate": True},
            "uvicorn.access": {"handlers": [], "propagate": True},
        },
    }


def setup_logging(level: str = "INFO", logfile: Optional[str] = None) -> None:
    """Configure logging unless the root logger is already configured.

    Parameters
    ----------
    level : str
        Logging level name, case insensitive.
    logfile : Optional[str]
        Path of a rotating log file.  If omitted, only the console is
        used.
    """
    if logging.getLogger().handlers:
        return
    logging.config.dictConfig(build_logging_config(level, logfile))
