"""Shared helpers for CLI commands."""

from __future__ import annotations

from typing import TYPE_CHECKING, NoReturn

import typer

from lockstep.core.errors import ErrorCode
from lockstep.output.console import Style
from lockstep.services.release.errors import ReleaseError

if TYPE_CHECKING:
    from lockstep.cli.context import CLIContext


def release_error_code(error: ReleaseError) -> ErrorCode:
    if error.kind in {"read_failed", "write_failed", "output_failed"}:
        return ErrorCode.IO_ERROR
    return ErrorCode.USER_ERROR


def exit_release_error(error: ReleaseError, ctx: CLIContext) -> NoReturn:
    """Report a release error on the console and exit with its code."""
    ctx.console.error(error.message)
    if error.hint:
        ctx.console.print(f"hint: {error.hint}", Style.DIM)
    raise typer.Exit(code=int(release_error_code(error)))
