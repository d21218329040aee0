"""CI step outputs.

GitHub Actions reads step outputs from the file named by `GITHUB_OUTPUT`.
Outside CI the same lines go to stdout.
"""

from __future__ import annotations

import sys
import uuid
from collections.abc import Mapping
from pathlib import Path
from typing import TextIO

from lockstep.core.result import Err, Ok, Result
from lockstep.services.release.errors import ReleaseError

OUTPUT_ENV = "GITHUB_OUTPUT"


def format_output(name: str, value: str) -> str:
    """`name=value`, or the heredoc form when value spans several lines."""
    if "\n" not in value:
        return f"{name}={value}\n"
    delimiter = f"ghadelimiter_{uuid.uuid4()}"
    body = value if value.endswith("\n") else value + "\n"
    return f"{name}<<{delimiter}\n{body}{delimiter}\n"


def set_output(
    name: str,
    value: str,
    *,
    env: Mapping[str, str],
    stream: TextIO | None = None,
) -> Result[None, ReleaseError]:
    line = format_output(name, value)

    target = env.get(OUTPUT_ENV)
    if not target:
        out = stream if stream is not None else sys.stdout
        out.write(line)
        return Ok(None)

    try:
        with Path(target).open("a", encoding="utf-8") as handle:
            handle.write(line)
    except OSError as e:
        return Err(
            ReleaseError(
                kind="output_failed",
                message=f"could not write output {name}: {e}",
                hint=target,
            )
        )
    return Ok(None)


def set_outputs(
    values: Mapping[str, str],
    *,
    env: Mapping[str, str],
    stream: TextIO | None = None,
) -> Result[None, ReleaseError]:
    for name, value in values.items():
        r = set_output(name, value, env=env, stream=stream)
        if isinstance(r, Err):
            return r
    return Ok(None)
