from __future__ import annotations

import os
from pathlib import Path

from lockstep.core.config import ReleaseConfig
from lockstep.core.result import Err, Ok, Result
from lockstep.output.console import ConsoleProtocol
from lockstep.services.release.errors import ReleaseError


def find_package_dirs(
    root: Path, *, config: ReleaseConfig, console: ConsoleProtocol
) -> Result[list[Path], ReleaseError]:
    """Directories under root holding both a manifest and a changelog.

    Hidden directories and the configured ignore names are not descended
    into. A manifest without a changelog is skipped with a warning.
    """
    if not root.is_dir():
        return Err(
            ReleaseError(
                kind="read_failed",
                message=f"project directory not found: {root}",
                hint=str(root),
            )
        )

    found: list[Path] = []
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames[:] = sorted(
            d for d in dirnames if not d.startswith(".") and d not in config.ignore
        )
        if config.manifest not in filenames:
            continue
        package_dir = Path(dirpath)
        if config.changelog not in filenames:
            console.warning(
                f"ignoring {package_dir}: {config.manifest} found but no {config.changelog}"
            )
            continue
        found.append(package_dir)

    if not found:
        return Err(
            ReleaseError(
                kind="no_packages",
                message=f"no packages found under {root}",
                hint=f"expected directories with {config.manifest} and {config.changelog}",
            )
        )

    return Ok(sorted(found))
