"""
RESPONSIBILITIES
- Run dependency and filesystem health checks for the content, image and document stores.
- Provide both a callable API and a small CLI for quick diagnostics.
PROCESS OVERVIEW
1. store_healthcheck() aggregates health from content/images/markdown stores.
2. CLI prints per-store status along with remediation hints.
3. Future automation can consume the structured results to block deployments.
"""

from __future__ import annotations

from pathlib import Path
from typing import Dict

import typer

from contentflow.core.settings import StoreSettings, load_settings
from contentflow.services import build_stores
from contentflow_persist import PersistHealth
from contentflow_persist.utils.log import get_logger

app = typer.Typer(help="Run content store health checks.")
logger = get_logger("tools.store_health")


def store_healthcheck(settings: StoreSettings) -> Dict[str, PersistHealth]:
    """Return per-store health diagnostic results."""

    stores = build_stores(settings)
    checks = {
        "content": stores.content,
        "images": stores.images,
        "markdown": stores.documents,
    }
    results: Dict[str, PersistHealth] = {}
    for name, store in checks.items():
        try:
            results[name] = store.healthcheck()
        except Exception as exc:  # noqa: BLE001 - capture unexpected failures
            logger.error("Healthcheck failed for %s: %s", name, exc)
            results[name] = PersistHealth(
                dependencies={},
                writable_paths={},
                locked_paths=[],
                issues=[str(exc)],
            )
    return results


@app.command("run")
def run_command(
    settings_path: Path | None = typer.Option(None, "--settings", help="Alternate settings YAML."),
    root: Path | None = typer.Option(None, help="Alternate data root."),
) -> None:
    """Execute health checks and pretty-print the outcome."""

    settings = load_settings(settings_path)
    if root is not None:
        settings = settings.with_data_root(root)
    results = store_healthcheck(settings)
    failed = False
    for name, health in results.items():
        status = "OK" if health.is_healthy() else "FAIL"
        failed = failed or not health.is_healthy()
        typer.echo(f"[{status}] {name} store")
        if not health.dependencies:
            typer.echo("  dependencies: (not evaluated)")
        else:
            for dep, ok in health.dependencies.items():
                typer.echo(f"  dependency {dep}: {'OK' if ok else 'MISSING'}")
        for path, ok in health.writable_paths.items():
            typer.echo(f"  writable {path}: {'yes' if ok else 'no'}")
        if health.locked_paths:
            typer.echo(f"  locked: {', '.join(health.locked_paths)}")
            typer.echo("  hint: remove stale lock files if no other process is running")
        if health.issues:
            typer.echo("  issues:")
            for issue in health.issues:
                typer.echo(f"    - {issue}")
    if failed:
        typer.echo("Run `contentflow init` to create missing directories.")
        raise typer.Exit(code=1)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
