"""
RESPONSIBILITIES
- Provide a persistence-local logger helper reusing the core logging setup.
- Ensure the <root>/logs directory exists before logger creation.
PROCESS OVERVIEW
1. Callers request get_logger(name, root).
2. The logs directory under the resolved data root is created if necessary.
3. The core contentflow logger is reused and a child logger is returned.
"""

from __future__ import annotations

import logging
from pathlib import Path

from contentflow.core.logger import get_logger as core_get_logger

from .paths import LOGS_DIR, resolve_root


def get_logger(name: str, root: Path | None = None) -> logging.Logger:
    """Return a namespaced logger for persistence modules."""

    logs = resolve_root(root) / LOGS_DIR
    logs.mkdir(parents=True, exist_ok=True)
    base_logger = core_get_logger(logs)
    return base_logger.getChild(name)
