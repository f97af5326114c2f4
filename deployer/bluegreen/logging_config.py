"""Structured logging configuration for the deployment tooling."""

import logging
import logging.config
import sys
from datetime import datetime
from pathlib import Path
from typing import Any

from bluegreen.config import settings


def setup_logging() -> None:
    """Configure console and file logging with levels suited to the environment."""

    extra_handlers: list[str] = []
    # File logs keep a postmortem trail of every run; skip them under automated tests.
    disable_file_handlers = settings.is_testing
    handlers: dict[str, Any] = {
        "console": {
            "class": "logging.StreamHandler",
            "level": "DEBUG" if settings.is_development else "INFO",
            "formatter": "detailed" if settings.is_development else "simple",
            "stream": sys.stdout,
        },
    }

    if not disable_file_handlers:
        log_dir = Path(settings.log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)
        timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
        info_log = log_dir / f"bluegreen-{timestamp}.log"
        error_log = log_dir / f"error-{timestamp}.log"
        file_formatter = "json" if settings.is_production else "detailed"
        handlers.update(
            {
                "file": {
                    "class": "logging.FileHandler",
                    "level": "INFO",
                    "formatter": file_formatter,
                    "filename": str(info_log),
                    "encoding": "utf-8",
                },
                "error_file": {
                    "class": "logging.FileHandler",
                    "level": "ERROR",
                    "formatter": file_formatter,
                    "filename": str(error_log),
                    "encoding": "utf-8",
                },
            }
        )
        extra_handlers = ["file", "error_file"]

    handler_names = ["console"] + extra_handlers

    log_config: dict[str, Any] = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "detailed": {
                "format": "%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s",
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
            "simple": {
                "format": "%(levelname)s - %(message)s",
            },
            "json": {
                "()": "pythonjsonlogger.json.JsonFormatter",
                "format": "%(asctime)s %(name)s %(levelname)s %(filename)s %(lineno)d %(message)s",
            },
        },
        "handlers": handlers,
        "loggers": {
            "bluegreen": {
                "level": settings.log_level,
                "handlers": handler_names,
                "propagate": False,
            },
            "uvicorn": {
                "level": "INFO",
                "handlers": handler_names,
                "propagate": False,
            },
            "uvicorn.access": {
                "level": "INFO",
                "handlers": handler_names,
                "propagate": False,
            },
            "httpx": {
                "level": "WARNING",
                "handlers": handler_names,
                "propagate": False,
            },
        },
        "root": {
            "level": settings.log_level,
            "handlers": handler_names,
        },
    }

    logging.config.dictConfig(log_config)

    logger = logging.getLogger("bluegreen")
    logger.debug(
        "Logging initialized - Environment: %s, Level: %s",
        settings.environment,
        settings.log_level,
    )


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance under the package namespace.

    Args:
        name: Logger name, typically __name__ of the calling module

    Returns:
        Configured logger instance
    """
    if name == "bluegreen" or name.startswith("bluegreen."):
        return logging.getLogger(name)
    return logging.getLogger(f"bluegreen.{name}")
