"""Typer based command line entry points for ContentFlow."""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

import typer

from contentflow.core.errors import ContentFlowError
from contentflow.core.logger import get_logger, set_level
from contentflow.core.settings import StoreSettings, load_settings
from contentflow.services import Stores, UploadService, build_stores
from contentflow_persist import StoreError

app = typer.Typer(help="Manage uploaded content, images and Markdown documents.")
content_app = typer.Typer(name="content", help="Per-module content files with activation.")
img_app = typer.Typer(name="img", help="Uploaded images.")
md_app = typer.Typer(name="md", help="Markdown documents.")
app.add_typer(content_app, name="content")
app.add_typer(img_app, name="img")
app.add_typer(md_app, name="md")


@dataclass(slots=True)
class CliState:
    settings: StoreSettings
    stores: Stores

    @property
    def uploads(self) -> UploadService:
        return UploadService(self.settings, stores=self.stores)


def _emit(payload: dict[str, Any]) -> None:
    typer.echo(json.dumps(payload, ensure_ascii=False, indent=2))


def _fail(message: str) -> None:
    _emit({"success": False, "error": message})
    raise typer.Exit(code=1)


def _state(ctx: typer.Context) -> CliState:
    state = ctx.obj
    if not isinstance(state, CliState):
        raise typer.BadParameter("CLI state not initialised")
    return state


def _check_module(ctx: typer.Context, module: str) -> str:
    modules = _state(ctx).settings.modules
    if module not in modules:
        raise typer.BadParameter(f"module must be one of {', '.join(modules)}")
    return module


@app.callback()
def main_callback(
    ctx: typer.Context,
    settings_path: Optional[Path] = typer.Option(
        None,
        "--settings",
        help="Alternate settings YAML (defaults to $CONTENTFLOW_SETTINGS or the bundled file).",
    ),
    data_root: Optional[Path] = typer.Option(None, "--data-root", help="Override the data root directory."),
    log_level: str = typer.Option(
        "INFO",
        "--log-level",
        help="Set global logging level (e.g. DEBUG/INFO/WARNING).",
    ),
) -> None:
    """Load settings and build the stores before executing commands."""

    try:
        settings = load_settings(settings_path)
    except ContentFlowError as exc:
        raise typer.BadParameter(str(exc), param_hint="--settings") from exc
    if data_root is not None:
        settings = settings.with_data_root(data_root)
    get_logger(settings.log_dir)
    try:
        set_level(log_level)
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_hint="--log-level") from exc
    ctx.obj = CliState(settings=settings, stores=build_stores(settings))


@app.command("init")
def init_command(ctx: typer.Context) -> None:
    """Create the data root directory layout."""

    state = _state(ctx)
    try:
        state.stores.ensure_directories()
    except StoreError as exc:
        _fail(str(exc))
    _emit({"success": True, "data": {"root": str(state.stores.content.root)}})


@app.command("modules")
def modules_command(ctx: typer.Context) -> None:
    """List configured modules and their active entry."""

    content = _state(ctx).stores.content
    data = []
    for module in content.modules:
        active = content.active_entry(module)
        data.append({"module": module, "active": active.to_dict() if active else None})
    _emit({"success": True, "data": data})


# Content ---------------------------------------------------------------------------


@content_app.command("upload")
def content_upload(
    ctx: typer.Context,
    file: Path = typer.Argument(..., exists=True, dir_okay=False, readable=True),
    module: str = typer.Option(..., "--module", "-m", help="Target module."),
) -> None:
    """Upload a content file into a module."""

    _check_module(ctx, module)
    try:
        receipt = _state(ctx).uploads.upload_content(file, module)
    except (ContentFlowError, StoreError) as exc:
        _fail(str(exc))
    _emit({"success": True, "data": receipt.to_dict()})


@content_app.command("list")
def content_list(
    ctx: typer.Context,
    module: str = typer.Option(..., "--module", "-m", help="Module to list."),
) -> None:
    """List a module's files, newest first."""

    _check_module(ctx, module)
    entries = _state(ctx).stores.content.list(module)
    _emit({"success": True, "data": [entry.to_dict() for entry in entries]})


@content_app.command("use")
def content_use(
    ctx: typer.Context,
    path: str = typer.Argument(..., help="Path relative to the data root, e.g. uploads/tech/<file>."),
    module: str = typer.Option(..., "--module", "-m", help="Module owning the file."),
) -> None:
    """Mark a file as the module's active entry (converts spreadsheets)."""

    _check_module(ctx, module)
    result = _state(ctx).stores.content.activate(path, module)
    _emit(result.to_dict())
    if not result.success:
        raise typer.Exit(code=1)


@content_app.command("delete")
def content_delete(ctx: typer.Context, path: str = typer.Argument(..., help="Path relative to the data root.")) -> None:
    """Delete a content file."""

    removed = _state(ctx).stores.content.delete(path)
    _emit({"success": removed})
    if not removed:
        raise typer.Exit(code=1)


# Images ----------------------------------------------------------------------------


@img_app.command("upload")
def img_upload(ctx: typer.Context, file: Path = typer.Argument(..., exists=True, dir_okay=False, readable=True)) -> None:
    """Upload an image."""

    try:
        receipt = _state(ctx).uploads.upload_image(file)
    except (ContentFlowError, StoreError) as exc:
        _fail(str(exc))
    _emit({"success": True, "data": receipt.to_dict()})


@img_app.command("list")
def img_list(ctx: typer.Context) -> None:
    """List images, newest first."""

    entries = _state(ctx).stores.images.list()
    _emit({"success": True, "data": [entry.to_dict() for entry in entries]})


@img_app.command("delete")
def img_delete(ctx: typer.Context, path: str = typer.Argument(..., help="Path relative to the data root.")) -> None:
    """Delete an image."""

    removed = _state(ctx).stores.images.delete(path)
    _emit({"success": removed})
    if not removed:
        raise typer.Exit(code=1)


# Markdown --------------------------------------------------------------------------


@md_app.command("upload")
def md_upload(ctx: typer.Context, file: Path = typer.Argument(..., exists=True, dir_okay=False, readable=True)) -> None:
    """Upload a Markdown document."""

    try:
        receipt = _state(ctx).uploads.upload_markdown(file)
    except (ContentFlowError, StoreError) as exc:
        _fail(str(exc))
    _emit({"success": True, "data": receipt.to_dict()})


@md_app.command("list")
def md_list(ctx: typer.Context) -> None:
    """List Markdown documents, newest first."""

    entries = _state(ctx).stores.documents.list()
    _emit({"success": True, "data": [entry.to_dict() for entry in entries]})


@md_app.command("delete")
def md_delete(ctx: typer.Context, path: str = typer.Argument(..., help="Path relative to the data root.")) -> None:
    """Delete a Markdown document."""

    removed = _state(ctx).stores.documents.delete(path)
    _emit({"success": removed})
    if not removed:
        raise typer.Exit(code=1)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
