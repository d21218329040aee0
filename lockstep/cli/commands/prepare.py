from __future__ import annotations

import os
from datetime import UTC, datetime
from enum import Enum
from pathlib import Path

import typer

from lockstep.cli.commands._helpers import exit_release_error
from lockstep.cli.context import build_context
from lockstep.core.result import Err
from lockstep.output.console import Style
from lockstep.services.release.model import ReleaseBump
from lockstep.services.release.outputs import set_outputs
from lockstep.services.release.service import prepare_release, write_release


class BumpCoordinate(str, Enum):
    MAJOR = "major"
    MINOR = "minor"
    PATCH = "patch"


_BUMPS: dict[BumpCoordinate, ReleaseBump] = {
    BumpCoordinate.MAJOR: "major",
    BumpCoordinate.MINOR: "minor",
    BumpCoordinate.PATCH: "patch",
}


def prepare(
    bump: BumpCoordinate = typer.Option(..., "--bump", help="major/minor/patch"),
    project_dir: Path = typer.Argument(Path("."), help="Root of the package tree"),
) -> None:
    """Bump every package to the next shared version and date the changelogs."""
    ctx = build_context(project_dir)

    prepared = prepare_release(
        root=ctx.root,
        bump=_BUMPS[bump],
        today=datetime.now(UTC).date(),
        config=ctx.config.release,
        console=ctx.console,
    )
    if isinstance(prepared, Err):
        exit_release_error(prepared.error, ctx)

    plan = prepared.value.plan
    ctx.console.print(
        f"{len(plan.packages)} package(s): {plan.from_version} → {plan.to_version}", Style.DIM
    )

    written = write_release(prepared.value, console=ctx.console)
    if isinstance(written, Err):
        exit_release_error(written.error, ctx)

    out = set_outputs(prepared.value.outputs(), env=os.environ)
    if isinstance(out, Err):
        exit_release_error(out.error, ctx)
