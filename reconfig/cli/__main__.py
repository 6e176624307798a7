from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import List, Optional

import typer

from ..core.errors import ReconfigError
from ..core.manifest import ENVIRONMENT_VARIABLE, ManifestLoader, apply_manifest
from ..core.registry import Registry

app = typer.Typer(help="reconfig CLI")


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _build(
    paths: Optional[List[Path]],
    manifest: Optional[Path],
    env: Optional[str],
    required: Optional[List[str]] = None,
    optional: bool = False,
    raw: bool = False,
    nested: Optional[str] = None,
) -> Registry:
    loader = ManifestLoader(manifest)
    if manifest is not None and loader.config_path is None:
        raise typer.BadParameter(f"Manifest not found: {manifest}", param_hint="--manifest")

    registry = Registry()
    apply_manifest(registry, loader, environment=env, required_environments=required)
    for path in paths or []:
        registry.register(path.resolve(), optional=optional, raw=raw, nested=nested)
    return registry


def _fail(err: Exception) -> None:
    typer.echo(f"Error: {err}", err=True)
    raise typer.Exit(code=1)


@app.command()
def show(
    paths: Optional[List[Path]] = typer.Argument(None, help="Config files to register after the manifest"),
    env: Optional[str] = typer.Option(None, "--env", envvar=ENVIRONMENT_VARIABLE),
    manifest: Optional[Path] = typer.Option(None, "--manifest"),
    nested: Optional[str] = typer.Option(None, "--nested", help="Dotted key to merge PATHS under"),
    raw: bool = typer.Option(False, "--raw", help="PATHS have no environment keys"),
    optional: bool = typer.Option(False, "--optional", help="Tolerate missing PATHS"),
    key: Optional[str] = typer.Option(None, "--key", help="Print only this dotted key"),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
):
    _setup_logging(verbose)
    try:
        registry = _build(paths, manifest, env, optional=optional, raw=raw, nested=nested)
    except (ReconfigError, ValueError) as e:
        _fail(e)

    if key is None:
        value = registry.tree.to_dict()
    elif key in registry.tree:
        value = registry.tree[key]
    else:
        _fail(KeyError(key))
    typer.echo(json.dumps(value, indent=2, default=str))


@app.command()
def check(
    paths: Optional[List[Path]] = typer.Argument(None),
    require: List[str] = typer.Option([], "--require", help="Environment every file must define"),
    env: Optional[str] = typer.Option(
        None,
        "--env",
        envvar=ENVIRONMENT_VARIABLE,
        help="Environment to apply; defaults to the first --require value",
    ),
    manifest: Optional[Path] = typer.Option(None, "--manifest"),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
):
    _setup_logging(verbose)
    # Files need not define "default" when only other environments are required.
    if env is None and require:
        env = require[0]
    try:
        registry = _build(paths, manifest, env, required=require)
    except (ReconfigError, ValueError) as e:
        _fail(e)
    typer.echo(f"OK: {len(registry.registrations)} sources checked")


@app.command()
def sources(
    manifest: Optional[Path] = typer.Option(None, "--manifest"),
    env: Optional[str] = typer.Option(None, "--env", envvar=ENVIRONMENT_VARIABLE),
):
    try:
        registry = _build(None, manifest, env)
    except (ReconfigError, ValueError) as e:
        _fail(e)
    typer.echo(json.dumps([
        {
            "id": d.source_id,
            "optional": d.options.optional,
            "raw": d.options.raw,
            "nested": d.options.nested,
            "loaded": d.config is not None,
        }
        for d in registry.registrations
    ], indent=2))


if __name__ == "__main__":
    app()
