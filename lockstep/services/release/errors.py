from __future__ import annotations

from dataclasses import dataclass
from typing import Literal


ReleaseErrorKind = Literal[
    "no_packages",
    "no_builders",
    "read_failed",
    "invalid_manifest",
    "invalid_changelog",
    "invalid_builder",
    "invalid_uri",
    "invalid_version",
    "span_mismatch",
    "version_mismatch",
    "write_failed",
    "output_failed",
]


@dataclass(frozen=True, slots=True)
class ReleaseError:
    kind: ReleaseErrorKind
    message: str
    # Usually the offending file path.
    hint: str | None = None
