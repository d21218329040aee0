from __future__ import annotations

from pathlib import Path

import pytest
import typer

from lockstep.cli.commands._helpers import exit_release_error, release_error_code
from lockstep.cli.context import CLIContext
from lockstep.core.config import Config
from lockstep.core.errors import ErrorCode
from lockstep.output.console import MockConsole, Style
from lockstep.services.release.errors import ReleaseError


@pytest.mark.parametrize("kind", ["read_failed", "write_failed", "output_failed"])
def test_io_failures_map_to_io_error(kind: str) -> None:
    error = ReleaseError(kind=kind, message="boom")  # type: ignore[arg-type]
    assert release_error_code(error) is ErrorCode.IO_ERROR


@pytest.mark.parametrize(
    "kind",
    [
        "no_packages",
        "no_builders",
        "invalid_manifest",
        "invalid_changelog",
        "invalid_builder",
        "invalid_uri",
        "invalid_version",
        "span_mismatch",
        "version_mismatch",
    ],
)
def test_input_failures_map_to_user_error(kind: str) -> None:
    error = ReleaseError(kind=kind, message="boom")  # type: ignore[arg-type]
    assert release_error_code(error) is ErrorCode.USER_ERROR


def test_exit_release_error_prints_hint(tmp_path: Path) -> None:
    console = MockConsole()
    ctx = CLIContext(root=tmp_path, config=Config(), console=console)
    error = ReleaseError(kind="write_failed", message="cannot write x", hint="check permissions")

    with pytest.raises(typer.Exit) as exc:
        exit_release_error(error, ctx)

    assert exc.value.exit_code == int(ErrorCode.IO_ERROR)
    assert console.messages == ["error: cannot write x", "hint: check permissions"]
    assert console.outputs[1].style is Style.DIM
