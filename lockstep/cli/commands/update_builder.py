from __future__ import annotations

import re
from pathlib import Path

import typer

from lockstep.cli.commands._helpers import exit_release_error
from lockstep.cli.context import build_context
from lockstep.core.errors import ErrorCode
from lockstep.core.result import Err
from lockstep.services.release.semver import parse_version
from lockstep.services.release.service import update_builders

_SEPARATORS = re.compile(r"[,\s]+")


def split_builders(values: list[str]) -> list[str]:
    """Builder directories from repeated or comma/newline separated values."""
    return [item for value in values for item in _SEPARATORS.split(value) if item]


def update_builder(
    buildpack_id: str = typer.Option(..., "--buildpack-id", help="Buildpack to repin"),
    buildpack_version: str = typer.Option(..., "--buildpack-version", help="New X.Y.Z"),
    buildpack_uri: str = typer.Option(..., "--buildpack-uri", help="New image URI"),
    builders: list[str] = typer.Option(
        ..., "--builders", help="Builder directories (repeat, or separate with commas)"
    ),
    project_dir: Path = typer.Argument(Path("."), help="Directory the builders are under"),
) -> None:
    """Repin one buildpack's uri and order.group version in builder.toml files."""
    version = parse_version(buildpack_version.strip())
    if version is None:
        typer.echo(
            f"error: invalid version: {buildpack_version} (expected MAJOR.MINOR.PATCH)", err=True
        )
        raise typer.Exit(code=int(ErrorCode.USER_ERROR))

    ctx = build_context(project_dir)

    result = update_builders(
        root=ctx.root,
        builders=split_builders(builders),
        buildpack_id=buildpack_id.strip(),
        version=version,
        uri=buildpack_uri,
        console=ctx.console,
    )
    if isinstance(result, Err):
        exit_release_error(result.error, ctx)
