from __future__ import annotations

import os
from pathlib import Path

import typer

from lockstep.cli.commands._helpers import exit_release_error
from lockstep.cli.context import build_context
from lockstep.core.errors import ErrorCode
from lockstep.core.result import Err
from lockstep.services.release.outputs import set_output
from lockstep.services.release.semver import parse_version
from lockstep.services.release.service import generate_changelog


def changelog(
    unreleased: bool = typer.Option(False, "--unreleased", help="Pending changes (default)"),
    version: str | None = typer.Option(None, "--version", help="Changes released as X.Y.Z"),
    project_dir: Path = typer.Argument(Path("."), help="Root of the package tree"),
) -> None:
    """Aggregate the changelog notes of every package into one document."""
    if unreleased and version is not None:
        typer.echo("error: --unreleased and --version are mutually exclusive", err=True)
        raise typer.Exit(code=int(ErrorCode.USER_ERROR))
    if version is not None and parse_version(version.strip()) is None:
        typer.echo(f"error: invalid version: {version} (expected MAJOR.MINOR.PATCH)", err=True)
        raise typer.Exit(code=int(ErrorCode.USER_ERROR))

    ctx = build_context(project_dir)

    report = generate_changelog(
        root=ctx.root,
        version=version.strip() if version is not None else None,
        config=ctx.config.release,
        console=ctx.console,
    )
    if isinstance(report, Err):
        exit_release_error(report.error, ctx)

    out = set_output("changelog", report.value, env=os.environ)
    if isinstance(out, Err):
        exit_release_error(out.error, ctx)
