from __future__ import annotations

import typer

from lockstep import __version__
from lockstep.cli.commands.changelog import changelog
from lockstep.cli.commands.list_cmd import list_cmd
from lockstep.cli.commands.matrix import matrix
from lockstep.cli.commands.prepare import prepare
from lockstep.cli.commands.update_builder import update_builder


app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    rich_markup_mode="rich",
)


# Commands
app.command()(prepare)
app.command()(changelog)
app.command("list")(list_cmd)
app.command()(matrix)
app.command("update-builder")(update_builder)


def _print_version(value: bool) -> None:
    if value:
        typer.echo(__version__)
        raise typer.Exit(code=0)


@app.callback()
def _main(  # pyright: ignore[reportUnusedFunction]
    version: bool = typer.Option(
        False,
        "--version",
        help="Show version and exit.",
        callback=_print_version,
        is_eager=True,
    ),
) -> None:
    """Release every package of a repository on one shared version."""


def main() -> None:
    app()
