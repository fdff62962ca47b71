"""Logger lookup for the contentflow_io package.

Loggers live under the core ``contentflow`` logger and add no handlers of
their own; records reach whatever handlers ``contentflow.core.logger``
configures once the CLI or a store knows the log directory.
"""

from __future__ import annotations

import logging

from contentflow.core.logger import LOGGER_NAME


def get_logger(name: str) -> logging.Logger:
    """Return ``contentflow.io.<name>``."""

    return logging.getLogger(f"{LOGGER_NAME}.io.{name}")
