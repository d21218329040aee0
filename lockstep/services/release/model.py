from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Literal

if TYPE_CHECKING:
    from lockstep.services.release.semver import Version


ReleaseBump = Literal["major", "minor", "patch"]

NO_CHANGES = "- No Changes"


@dataclass(frozen=True, slots=True, order=True)
class Span:
    """Half-open range [start, end) into one immutable text buffer."""

    start: int
    end: int

    @property
    def is_empty(self) -> bool:
        return self.start == self.end

    def text(self, raw: str) -> str:
        return raw[self.start : self.end]


def _no_spans() -> dict[str, Span]:
    return {}


@dataclass(frozen=True, slots=True)
class Document:
    """Original text of one file plus the located spans of its fields."""

    path: Path
    raw: str
    spans: Mapping[str, Span] = field(default_factory=_no_spans)


@dataclass(frozen=True, slots=True)
class DependencyRef:
    """An `order.group` entry: another package pinned by id and version."""

    id: str
    version: str
    span: Span


@dataclass(frozen=True, slots=True)
class PackageDescriptor:
    id: str
    version: Version
    version_span: Span
    dependencies: tuple[DependencyRef, ...] = ()


@dataclass(frozen=True, slots=True)
class ManifestFile:
    document: Document
    descriptor: PackageDescriptor


@dataclass(frozen=True, slots=True)
class BuilderBuildpack:
    """A `[[buildpacks]]` entry of a builder: where the image pulls it from."""

    id: str
    uri: str
    span: Span


@dataclass(frozen=True, slots=True)
class BuilderFile:
    document: Document
    buildpacks: tuple[BuilderBuildpack, ...]
    groups: tuple[DependencyRef, ...]


@dataclass(frozen=True, slots=True)
class Section:
    """A changelog section body.

    `body` is None when nothing sits between the section header and the next
    header (or end of file); `span` is then zero-width, right after the header.
    """

    span: Span
    body: str | None = None

    def render(self) -> str:
        if self.body is None or not self.body.strip():
            return NO_CHANGES
        return self.body.strip()


@dataclass(frozen=True, slots=True)
class ChangelogSections:
    pending: Section
    # Keyed by version string; only read when building reports.
    released: Mapping[str, Section]


@dataclass(frozen=True, slots=True)
class ChangelogFile:
    document: Document
    sections: ChangelogSections


@dataclass(frozen=True, slots=True)
class Replacement:
    span: Span
    text: str


@dataclass(frozen=True, slots=True)
class FileEdit:
    """Replacements to splice into one file's original text.

    Spans all refer to `raw` and never overlap. `terminate` re-ends the
    result with exactly one `newline`.
    """

    path: Path
    raw: str
    replacements: tuple[Replacement, ...]
    terminate: bool = False
    newline: str = "\n"


@dataclass(frozen=True, slots=True)
class PackageRelease:
    id: str
    manifest: FileEdit
    changelog: FileEdit
    changelog_header: str


@dataclass(frozen=True, slots=True)
class ReleasePlan:
    from_version: Version
    to_version: Version
    # Sorted by package id.
    packages: tuple[PackageRelease, ...]
