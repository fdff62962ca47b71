from __future__ import annotations

import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

LOG_DIR_ENV = "CONTENTFLOW_LOG_DIR"
LOGGER_NAME = "contentflow"

_LOGGER: logging.Logger | None = None


def default_log_dir() -> Path:
    env = os.getenv(LOG_DIR_ENV)
    if env:
        return Path(env).expanduser()
    return Path.home() / "ContentFlow" / "logs"


def get_logger(log_dir: Path | None = None) -> logging.Logger:
    """Return the configured application logger writing to <log_dir>/app.log.

    Creates the directory if needed. Uses rotating file handler.
    """
    global _LOGGER
    if _LOGGER is not None:
        return _LOGGER

    base = Path(log_dir) if log_dir is not None else default_log_dir()
    base.mkdir(parents=True, exist_ok=True)
    log_path = base / "app.log"

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.INFO)
    logger.propagate = False

    fmt = logging.Formatter(
        fmt="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    file_handler = RotatingFileHandler(log_path, maxBytes=2 * 1024 * 1024, backupCount=3, encoding="utf-8")
    file_handler.setFormatter(fmt)
    logger.addHandler(file_handler)

    console = logging.StreamHandler(sys.stderr)
    console.setFormatter(fmt)
    logger.addHandler(console)

    _LOGGER = logger
    return logger


def set_level(level: str) -> None:
    """Apply a textual log level (DEBUG/INFO/...) to the application logger."""

    numeric = getattr(logging, level.upper(), None)
    if not isinstance(numeric, int):
        raise ValueError(f"Unknown log level: {level}")
    get_logger().setLevel(numeric)
