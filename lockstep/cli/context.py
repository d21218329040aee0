from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import typer

from lockstep.core.config import CONFIG_FILE_NAME, Config, load_config_or_default
from lockstep.core.errors import ErrorCode
from lockstep.core.result import Err
from lockstep.output.console import ConsoleProtocol, RichConsole


@dataclass(frozen=True, slots=True)
class CLIContext:
    root: Path
    config: Config
    console: ConsoleProtocol


def build_context(project_dir: Path) -> CLIContext:
    try:
        root = project_dir.expanduser().resolve()
    except OSError as e:
        typer.echo(f"error: invalid project directory: {e}", err=True)
        raise typer.Exit(code=int(ErrorCode.USER_ERROR))

    config_result = load_config_or_default(root / CONFIG_FILE_NAME)
    if isinstance(config_result, Err):
        typer.echo(f"error: {config_result.error.message}", err=True)
        raise typer.Exit(code=int(ErrorCode.ENV_ERROR))

    return CLIContext(root=root, config=config_result.value, console=RichConsole())
