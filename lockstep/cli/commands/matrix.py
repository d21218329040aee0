from __future__ import annotations

import os
from pathlib import Path

import typer

from lockstep.cli.commands._helpers import exit_release_error
from lockstep.cli.context import build_context
from lockstep.core.result import Err
from lockstep.services.release.outputs import set_output
from lockstep.services.release.service import generate_matrix


def matrix(
    project_dir: Path = typer.Argument(Path("."), help="Root of the package tree"),
) -> None:
    """Emit a CI job matrix with one `{id, path}` entry per package."""
    ctx = build_context(project_dir)

    result = generate_matrix(root=ctx.root, config=ctx.config.release, console=ctx.console)
    if isinstance(result, Err):
        exit_release_error(result.error, ctx)

    out = set_output("buildpacks", result.value, env=os.environ)
    if isinstance(out, Err):
        exit_release_error(out.error, ctx)
