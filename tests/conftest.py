from __future__ import annotations

import faulthandler
import os
import sys
import tempfile
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

faulthandler.enable()  # Ensure crashes emit tracebacks.

_LOG_DIR = Path(tempfile.mkdtemp(prefix="contentflow-test-logs-"))
os.environ["CONTENTFLOW_LOG_DIR"] = str(_LOG_DIR)

from contentflow.core.logger import get_logger
from contentflow_persist import ContentStore

# Bind log handlers to the session streams before CliRunner swaps stdout/stderr.
get_logger(_LOG_DIR)


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("CONTENTFLOW_DATA_ROOT", raising=False)
    monkeypatch.delenv("CONTENTFLOW_SETTINGS", raising=False)


@pytest.fixture()
def data_root(tmp_path: Path) -> Path:
    return (tmp_path / "data").resolve()


@pytest.fixture()
def content_store(data_root: Path) -> ContentStore:
    store = ContentStore(data_root)
    store.ensure_directories()
    return store
