from __future__ import annotations

import os
from pathlib import Path

import typer

from lockstep.cli.commands._helpers import exit_release_error
from lockstep.cli.context import build_context
from lockstep.core.result import Err
from lockstep.services.release.outputs import set_output
from lockstep.services.release.service import list_packages, package_dirs_json


def list_cmd(
    project_dir: Path = typer.Argument(Path("."), help="Root of the package tree"),
) -> None:
    """List the packages found under the project directory.

    Sets the `buildpacks` output to a JSON array of package directories.
    """
    ctx = build_context(project_dir)

    packages = list_packages(root=ctx.root, config=ctx.config.release, console=ctx.console)
    if isinstance(packages, Err):
        exit_release_error(packages.error, ctx)

    for p in packages.value:
        path = p.manifest.document.path.parent
        try:
            shown = path.relative_to(ctx.root)
        except ValueError:
            shown = path
        ctx.console.print(f"{p.id} {p.manifest.descriptor.version} {shown}")

    out = set_output("buildpacks", package_dirs_json(packages.value), env=os.environ)
    if isinstance(out, Err):
        exit_release_error(out.error, ctx)
