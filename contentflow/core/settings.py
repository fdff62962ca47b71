"""Settings loader for the content store.

Reads ``config/settings.yaml`` (or the file named by ``CONTENTFLOW_SETTINGS``),
applies environment overrides and validates the result with pydantic.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Mapping

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from contentflow.config import DEFAULT_SETTINGS_PATH
from contentflow_persist.utils.paths import DEFAULT_MODULES

from .errors import ConfigError

SETTINGS_PATH_ENV = "CONTENTFLOW_SETTINGS"
DATA_ROOT_ENV = "CONTENTFLOW_DATA_ROOT"

load_dotenv(override=False)


class StoreSettings(BaseModel):
    """Validated runtime settings shared by stores, services and the CLI."""

    model_config = ConfigDict(frozen=True)

    data_root: Path = Field(default_factory=lambda: Path.home() / "ContentFlow" / "data")
    modules: tuple[str, ...] = DEFAULT_MODULES
    file_limit: int = Field(default=8, gt=0)
    spreadsheet_extensions: tuple[str, ...] = (".xlsx", ".xls")
    log_dir: Path | None = None

    @field_validator("data_root", "log_dir")
    @classmethod
    def _expand_path(cls, value: Path | None) -> Path | None:
        if value is None:
            return None
        return Path(os.path.expandvars(str(value))).expanduser()

    @field_validator("modules")
    @classmethod
    def _check_modules(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        cleaned = tuple(str(name).strip() for name in value)
        if not cleaned:
            raise ValueError("at least one module is required")
        for name in cleaned:
            if not name or "/" in name or "\\" in name or name in {".", ".."}:
                raise ValueError(f"invalid module name: {name!r}")
        if len(set(cleaned)) != len(cleaned):
            raise ValueError("module names must be unique")
        return cleaned

    @field_validator("spreadsheet_extensions")
    @classmethod
    def _normalize_extensions(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        normalized: list[str] = []
        for ext in value:
            text = str(ext).strip().lower()
            if not text:
                continue
            normalized.append(text if text.startswith(".") else f".{text}")
        return tuple(normalized)

    def with_data_root(self, root: str | Path) -> "StoreSettings":
        return self.model_copy(update={"data_root": Path(root).expanduser()})


def _load_yaml(path: Path) -> Mapping[str, Any]:
    if not path.exists():
        raise ConfigError(f"settings file not found: {path}")
    with path.open("r", encoding="utf-8") as handle:
        try:
            data = yaml.safe_load(handle) or {}
        except yaml.YAMLError as exc:
            raise ConfigError(f"settings file is not valid YAML: {path}") from exc
    if not isinstance(data, Mapping):
        raise ConfigError("settings file must contain a mapping")
    section = data.get("store", {})
    if not isinstance(section, Mapping):
        raise ConfigError("settings 'store' section must be a mapping")
    return section


def load_settings(path: str | Path | None = None) -> StoreSettings:
    """Load settings from YAML, then apply environment overrides.

    Args:
        path: Optional settings file; defaults to ``CONTENTFLOW_SETTINGS`` or the
            bundled ``config/settings.yaml``.

    Returns:
        Validated ``StoreSettings``.

    Raises:
        ConfigError: When the file is missing, malformed or fails validation.
    """

    env_path = os.getenv(SETTINGS_PATH_ENV)
    cfg_path = Path(path) if path else Path(env_path) if env_path else DEFAULT_SETTINGS_PATH
    raw = dict(_load_yaml(cfg_path.expanduser()))
    root_override = os.getenv(DATA_ROOT_ENV)
    if root_override:
        raw["data_root"] = root_override
    raw = {key: value for key, value in raw.items() if value is not None or key == "log_dir"}
    try:
        return StoreSettings(**raw)
    except ValidationError as exc:
        raise ConfigError(f"invalid settings in {cfg_path}: {exc}") from exc
