"""Result type for explicit error handling.

Every step of a release run (reading a file, locating a span, checking the
fixed version) can fail. Failures are returned as values instead of raised,
so a caller decides where the run stops:

    def parse(text: str) -> Result[Version, str]:
        version = parse_version(text)
        if version is None:
            return Err(f"invalid version: {text}")
        return Ok(version)

    result = parse("0.8.16")
    if isinstance(result, Err):
        ...
    result.value
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Ok[T]:
    """Success carrying `value`."""

    value: T


@dataclass(frozen=True, slots=True)
class Err[E]:
    """Failure carrying `error`, usually a ReleaseError."""

    error: E


type Result[T, E] = Ok[T] | Err[E]
